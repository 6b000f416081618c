"""
SLA Domain Entities
====================

Pure Python domain entities for SLA monitoring.

Ticket is the read-only snapshot supplied by the ticket store. Everything
else here is a derived result: computed fresh on every query and never
persisted by the engine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional

from grievdesk.config import (
    SLAStatus, TicketStatus, Priority,
    VALID_STATUSES, OPEN_STATUSES, CLOSED_STATUSES
)
from grievdesk.core import ValidationException


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Ticket:
    """
    Time points of a grievance ticket consumed by the SLA engine.

    Timestamps must be naive and expressed in the reference timezone.
    """

    id: str
    created_at: datetime
    status: str = TicketStatus.OPEN
    priority: Optional[str] = Priority.MEDIUM

    first_response_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate ticket on initialization."""
        if self.status not in VALID_STATUSES:
            raise ValidationException(
                f"Unknown ticket status '{self.status}'",
                {"ticket_id": self.id, "status": self.status}
            )

        for name in ("created_at", "first_response_at", "resolved_at", "closed_at"):
            value = getattr(self, name)
            if value is not None and value.tzinfo is not None:
                raise ValidationException(
                    f"{name} must be normalized to the reference timezone",
                    {"ticket_id": self.id, "field": name}
                )

        if self.first_response_at and self.first_response_at < self.created_at:
            raise ValidationException(
                "first_response_at cannot be before created_at",
                {"ticket_id": self.id}
            )

        if self.resolved_at and self.resolved_at < self.created_at:
            raise ValidationException(
                "resolved_at cannot be before created_at",
                {"ticket_id": self.id}
            )

        if self.closed_at and self.closed_at < self.created_at:
            raise ValidationException(
                "closed_at cannot be before created_at",
                {"ticket_id": self.id}
            )

        if self.is_closed and self.resolved_at is None and self.closed_at is None:
            raise ValidationException(
                f"{self.status} ticket needs resolved_at or closed_at",
                {"ticket_id": self.id, "status": self.status}
            )

    @property
    def is_open(self) -> bool:
        """Check if ticket is still being worked on."""
        return self.status in OPEN_STATUSES

    @property
    def is_closed(self) -> bool:
        """Check if ticket is resolved or closed."""
        return self.status in CLOSED_STATUSES

    @property
    def resolution_stopped_at(self) -> Optional[datetime]:
        """
        Instant the resolution clock stopped, or None while it runs.

        Tickets closed without a recorded resolution stop at closed_at.
        """
        if self.resolved_at is not None:
            return self.resolved_at
        if self.is_closed:
            return self.closed_at
        return None


@dataclass(frozen=True)
class SLAEvaluation:
    """
    SLA state of one clock (response or resolution) of a ticket.
    """

    sla_type: str
    status: str
    elapsed_business_hours: float
    target_hours: float
    remaining_hours: float
    deadline: datetime
    met_at: Optional[datetime] = None

    @property
    def is_breached(self) -> bool:
        return self.status == SLAStatus.BREACHED

    @property
    def passes(self) -> bool:
        """Compliance check: anything but a breach passes."""
        return not self.is_breached

    def to_dict(self) -> dict:
        return {
            "sla_type": self.sla_type,
            "status": self.status,
            "elapsed_business_hours": self.elapsed_business_hours,
            "target_hours": self.target_hours,
            "remaining_hours": self.remaining_hours,
            "deadline": self.deadline.isoformat(),
            "met_at": _iso(self.met_at)
        }


# Most urgent first
_STATUS_URGENCY = [
    SLAStatus.BREACHED, SLAStatus.NEAR_BREACH,
    SLAStatus.PENDING, SLAStatus.ON_TIME
]


@dataclass(frozen=True)
class TicketSLAReport:
    """
    Both SLA clocks of a ticket.

    A ticket is compliant only when both clocks pass.
    """

    ticket_id: str
    priority: str
    ticket_status: str
    response: SLAEvaluation
    resolution: SLAEvaluation
    elapsed_calendar_hours: float

    @property
    def is_compliant(self) -> bool:
        return self.response.passes and self.resolution.passes

    @property
    def overall_status(self) -> str:
        """Get the most urgent SLA status of the two clocks."""
        for status in _STATUS_URGENCY:
            if status in (self.response.status, self.resolution.status):
                return status
        return self.resolution.status

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "ticket_id": self.ticket_id,
            "priority": self.priority,
            "ticket_status": self.ticket_status,
            "response": self.response.to_dict(),
            "resolution": self.resolution.to_dict(),
            "overall": {
                "status": self.overall_status,
                "is_compliant": self.is_compliant,
                "elapsed_calendar_hours": self.elapsed_calendar_hours
            }
        }


@dataclass(frozen=True)
class SLAAlert:
    """
    Forward-looking warning for an open ticket close to its resolution deadline.
    """

    ticket_id: str
    priority: str
    ticket_status: str
    created_at: datetime
    remaining_hours: float
    target_hours: float
    elapsed_business_hours: float
    deadline: datetime

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "priority": self.priority,
            "ticket_status": self.ticket_status,
            "created_at": self.created_at.isoformat(),
            "remaining_hours": self.remaining_hours,
            "target_hours": self.target_hours,
            "elapsed_business_hours": self.elapsed_business_hours,
            "deadline": self.deadline.isoformat()
        }


@dataclass(frozen=True)
class SLABreach:
    """Resolution SLA breach, for open or already resolved tickets."""

    ticket_id: str
    priority: str
    created_at: datetime
    resolved_at: Optional[datetime]
    target_hours: float
    elapsed_business_hours: float
    breach_duration_hours: float
    breached_at: datetime

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "priority": self.priority,
            "created_at": self.created_at.isoformat(),
            "resolved_at": _iso(self.resolved_at),
            "target_hours": self.target_hours,
            "elapsed_business_hours": self.elapsed_business_hours,
            "breach_duration_hours": self.breach_duration_hours,
            "breached_at": self.breached_at.isoformat()
        }


@dataclass(frozen=True)
class TATMetrics:
    """Turnaround time statistics over resolved/closed tickets."""

    within_sla: int = 0
    exceeded_sla: int = 0
    avg_tat: float = 0.0
    median_tat: float = 0.0
    min_tat: float = 0.0
    max_tat: float = 0.0

    def to_dict(self) -> dict:
        return {
            "within_sla": self.within_sla,
            "exceeded_sla": self.exceeded_sla,
            "avg_tat": self.avg_tat,
            "median_tat": self.median_tat,
            "min_tat": self.min_tat,
            "max_tat": self.max_tat
        }


@dataclass(frozen=True)
class PriorityMetrics:
    """Metrics of one priority bucket."""

    priority: str
    response_target_hours: float
    resolution_target_hours: float
    total_tickets: int
    compliant_count: int
    avg_resolution_time: float
    avg_first_response_time: float
    sla_compliance_rate: float
    tat_metrics: TATMetrics

    @property
    def breached_count(self) -> int:
        return self.total_tickets - self.compliant_count

    def to_dict(self) -> dict:
        return {
            "priority": self.priority,
            "response_target_hours": self.response_target_hours,
            "resolution_target_hours": self.resolution_target_hours,
            "total_tickets": self.total_tickets,
            "compliant_count": self.compliant_count,
            "breached_count": self.breached_count,
            "avg_resolution_time": self.avg_resolution_time,
            "avg_first_response_time": self.avg_first_response_time,
            "sla_compliance_rate": self.sla_compliance_rate,
            "tat_metrics": self.tat_metrics.to_dict()
        }


@dataclass(frozen=True)
class BusinessHoursMetrics:
    """
    Batch SLA statistics. All times are in business hours.
    """

    total_tickets: int
    avg_resolution_time: float
    avg_first_response_time: float
    sla_compliance_rate: float
    tat_metrics: TATMetrics
    by_priority: Dict[str, PriorityMetrics] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_tickets": self.total_tickets,
            "avg_resolution_time": self.avg_resolution_time,
            "avg_first_response_time": self.avg_first_response_time,
            "sla_compliance_rate": self.sla_compliance_rate,
            "tat_metrics": self.tat_metrics.to_dict(),
            "by_priority": {
                priority: metrics.to_dict()
                for priority, metrics in self.by_priority.items()
            }
        }


@dataclass(frozen=True)
class TrendBucket:
    """One calendar day of the trend series."""

    day: date
    ticket_count: int = 0
    resolved_count: int = 0
    avg_response_time: float = 0.0
    avg_resolution_time: float = 0.0

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "ticket_count": self.ticket_count,
            "resolved_count": self.resolved_count,
            "avg_response_time": self.avg_response_time,
            "avg_resolution_time": self.avg_resolution_time
        }
