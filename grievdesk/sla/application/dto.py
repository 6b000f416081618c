"""
SLA Application DTOs
=====================

Data Transfer Objects between the ticket store and the SLA engine.

These Pydantic models validate raw ticket records and query filters before
they reach the domain layer.
"""

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from grievdesk.config import DEFAULT_PRIORITY, VALID_PRIORITIES
from grievdesk.shared.infrastructure.timezone import normalize_timestamp


# ========== Type Aliases for Literals ==========
PriorityStr = Literal["critical", "high", "medium", "low"]
TicketStatusStr = Literal["open", "in_progress", "resolved", "closed"]


class TicketRecordDTO(BaseModel):
    """
    Ticket record as supplied by the ticket store.

    Accepts snake_case or camelCase field names, from dicts or ORM objects.
    Priority is kept as given; unknown priorities fall back to the medium
    budget inside the engine.
    """
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(
        ...,
        validation_alias=AliasChoices("id", "ticket_id", "ticketId", "issue_id", "issueId"),
        description="Ticket identifier"
    )
    created_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("created_at", "createdAt"),
        description="Ticket creation timestamp"
    )
    first_response_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("first_response_at", "firstResponseAt"),
        description="First response time"
    )
    resolved_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("resolved_at", "resolvedAt"),
        description="Resolution time"
    )
    closed_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("closed_at", "closedAt"),
        description="Close time"
    )
    status: TicketStatusStr = Field(default="open", description="Ticket status")
    priority: str = Field(default=DEFAULT_PRIORITY, description="Ticket priority")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v: Any) -> Any:
        """Missing priority means medium."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_PRIORITY
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def to_domain(self, zone_name: Optional[str] = None) -> Any:
        """
        Convert to domain entity, normalizing timestamps to the reference zone.

        Raises:
            ValidationException: If the timestamps are out of order
        """
        from grievdesk.sla.domain import Ticket

        return Ticket(
            id=self.id,
            created_at=normalize_timestamp(self.created_at, zone_name),
            status=self.status,
            priority=self.priority,
            first_response_at=normalize_timestamp(self.first_response_at, zone_name),
            resolved_at=normalize_timestamp(self.resolved_at, zone_name),
            closed_at=normalize_timestamp(self.closed_at, zone_name)
        )


class MetricsQueryDTO(BaseModel):
    """Filters applied to a ticket batch before computing metrics or breaches."""
    start_date: Optional[date] = Field(None, description="Earliest creation day (inclusive)")
    end_date: Optional[date] = Field(None, description="Latest creation day (inclusive)")
    priority: Optional[PriorityStr] = Field(None, description="Only tickets of this priority")

    @model_validator(mode="after")
    def validate_range(self) -> "MetricsQueryDTO":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self

    def matches(self, ticket: Any) -> bool:
        """
        Check whether a domain ticket passes the filters.

        Unknown priorities match the medium filter, as they are bucketed there.
        """
        created = ticket.created_at.date()
        if self.start_date and created < self.start_date:
            return False
        if self.end_date and created > self.end_date:
            return False
        priority = ticket.priority if ticket.priority in VALID_PRIORITIES else DEFAULT_PRIORITY
        if self.priority and priority != self.priority:
            return False
        return True
