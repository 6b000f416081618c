"""
Core Exceptions
================

Custom exceptions for the SLA engine.

These exceptions define domain-specific errors that can be caught and handled
appropriately by the hosting ticket service.
"""

from typing import Optional, Any


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class InvalidRangeError(DomainException):
    """Raised when an interval ends before it starts."""

    def __init__(self, start: Any, end: Any, details: Optional[dict] = None):
        self.start = start
        self.end = end
        super().__init__(
            f"Invalid range: end {end} is before start {start}",
            details or {"start": str(start), "end": str(end)}
        )


class UnknownPriorityError(DomainException):
    """Raised when a priority has no SLA budget."""

    def __init__(self, priority: Any, details: Optional[dict] = None):
        self.priority = priority
        super().__init__(
            f"Unknown priority '{priority}'",
            details or {"priority": str(priority)}
        )


class MissingTimestampError(DomainException):
    """Raised when a computation needs a timestamp the ticket does not have."""

    def __init__(
        self,
        ticket_id: str,
        field_name: str,
        details: Optional[dict] = None
    ):
        self.ticket_id = ticket_id
        self.field_name = field_name
        super().__init__(
            f"Ticket {ticket_id} has no {field_name}",
            details or {"ticket_id": ticket_id, "field": field_name}
        )
