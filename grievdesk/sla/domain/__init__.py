"""
SLA Domain Layer
================

Domain layer for the business-hours SLA engine.

Contains:
- Entities: Ticket snapshots and derived results (SLAEvaluation, SLAAlert, metrics)
- Value Objects: Immutable configuration (WorkingHoursPolicy, Holiday, SLABudget, SLAConfig)
- Domain Services: Stateless business logic (BusinessCalendar,
  BusinessHoursCalculator, SLAEvaluator)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from grievdesk.sla.domain.entities import (
    Ticket,
    SLAEvaluation,
    TicketSLAReport,
    SLAAlert,
    SLABreach,
    TATMetrics,
    PriorityMetrics,
    BusinessHoursMetrics,
    TrendBucket,
)
from grievdesk.sla.domain.value_objects import (
    PriorityBudget,
    WorkingHoursPolicy,
    Holiday,
    SLABudget,
    SLAConfig,
    DEFAULT_SLA_TARGETS,
)
from grievdesk.sla.domain.calendar import BusinessCalendar
from grievdesk.sla.domain.calculator import BusinessHoursCalculator
from grievdesk.sla.domain.evaluator import SLAEvaluator

__all__ = [
    # Entities
    "Ticket",
    "SLAEvaluation",
    "TicketSLAReport",
    "SLAAlert",
    "SLABreach",
    "TATMetrics",
    "PriorityMetrics",
    "BusinessHoursMetrics",
    "TrendBucket",
    # Value Objects
    "PriorityBudget",
    "WorkingHoursPolicy",
    "Holiday",
    "SLABudget",
    "SLAConfig",
    "DEFAULT_SLA_TARGETS",
    # Domain Services
    "BusinessCalendar",
    "BusinessHoursCalculator",
    "SLAEvaluator",
]
