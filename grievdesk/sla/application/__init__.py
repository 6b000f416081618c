"""
SLA Application Layer
======================

Application layer for the SLA engine.

Contains:
- Services: Orchestrate domain logic over ticket batches
- DTOs: Validation of records coming from the ticket store

This layer depends on the domain layer and the configuration provider
interface, but not on concrete infrastructure implementations.
"""

from grievdesk.sla.application.dto import (
    TicketRecordDTO,
    MetricsQueryDTO,
)
from grievdesk.sla.application.services import (
    SLAService,
    MetricsAggregator,
    AlertingScanner,
    ISLAConfigProvider,
)

__all__ = [
    # DTOs
    "TicketRecordDTO",
    "MetricsQueryDTO",
    # Services
    "SLAService",
    "MetricsAggregator",
    "AlertingScanner",
    # Configuration Interface
    "ISLAConfigProvider",
]
