"""
Core Module
============

Shared core utilities and abstractions used across the application.

This module contains framework-agnostic code that defines the fundamental
building blocks of the system.
"""

from grievdesk.core.exceptions import (
    ApplicationException,
    DomainException,
    ValidationException,
    ConfigurationException,
    InvalidRangeError,
    UnknownPriorityError,
    MissingTimestampError,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "ValidationException",
    "ConfigurationException",
    "InvalidRangeError",
    "UnknownPriorityError",
    "MissingTimestampError",
]
