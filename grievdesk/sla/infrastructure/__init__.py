"""
SLA Infrastructure Layer
=========================

Infrastructure implementations for the SLA engine:
- External: YAML config file with hot-reload, static config provider
"""

from grievdesk.sla.infrastructure.external import (
    ConfigFileHandler,
    SLAConfigManager,
    StaticConfigProvider,
)

__all__ = [
    "ConfigFileHandler",
    "SLAConfigManager",
    "StaticConfigProvider",
]
