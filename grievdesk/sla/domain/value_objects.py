"""
SLA Value Objects
==================

Immutable value objects for SLA domain.

Value objects are defined by their attributes rather than an identity.
They are immutable and can be freely shared between concurrent evaluations;
a configuration change produces a new object instead of mutating one.
"""

from datetime import date, datetime, time, timedelta
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from grievdesk.config import (
    Priority, HolidayKind, VALID_PRIORITIES, DEFAULT_PRIORITY
)
from grievdesk.core import ConfigurationException, UnknownPriorityError
from grievdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class PriorityBudget(BaseModel):
    """Response and resolution budget for one priority, in business hours."""
    model_config = ConfigDict(frozen=True)

    response_hours: float = Field(gt=0, description="Hours allowed until first response")
    resolution_hours: float = Field(gt=0, description="Hours allowed until resolution")


DEFAULT_SLA_TARGETS: Dict[str, Dict[str, float]] = {
    Priority.CRITICAL: {"response_hours": 1, "resolution_hours": 4},
    Priority.HIGH: {"response_hours": 2, "resolution_hours": 8},
    Priority.MEDIUM: {"response_hours": 4, "resolution_hours": 24},
    Priority.LOW: {"response_hours": 8, "resolution_hours": 48},
}


class WorkingHoursPolicy(BaseModel):
    """
    Daily working window and the weekdays it applies to.

    Weekdays follow date.weekday(): 0 is Monday, 6 is Sunday.
    """
    model_config = ConfigDict(frozen=True)

    start_time: time = Field(default=time(9, 0), description="Start of the working day")
    end_time: time = Field(default=time(17, 0), description="End of the working day")
    working_weekdays: FrozenSet[int] = Field(
        default=frozenset({0, 1, 2, 3, 4, 5}),
        description="Working weekdays (0=Monday ... 6=Sunday)"
    )

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_clock_time(cls, v):
        # Unquoted 17:00 in YAML 1.1 loads as the integer 1020
        if isinstance(v, (int, float)):
            raise ValueError("clock times must be quoted 'HH:MM' strings")
        return v

    @field_validator("working_weekdays")
    @classmethod
    def validate_weekdays(cls, v: FrozenSet[int]) -> FrozenSet[int]:
        if not v:
            raise ValueError("working_weekdays must contain at least one weekday")
        invalid = sorted(d for d in v if d < 0 or d > 6)
        if invalid:
            raise ValueError(f"working_weekdays must be between 0 and 6, got {invalid}")
        return v

    @model_validator(mode="after")
    def validate_window(self) -> "WorkingHoursPolicy":
        if self.start_time >= self.end_time:
            raise ValueError(
                f"start_time {self.start_time} must be before end_time {self.end_time}"
            )
        return self

    @property
    def daily_working_time(self) -> timedelta:
        """Length of one working window."""
        start, end = self.window_for(date(2000, 1, 1))
        return end - start

    @property
    def daily_working_hours(self) -> float:
        return self.daily_working_time.total_seconds() / 3600

    def window_for(self, day: date) -> Tuple[datetime, datetime]:
        """Working window of a calendar day, ignoring whether the day is worked."""
        return (
            datetime.combine(day, self.start_time),
            datetime.combine(day, self.end_time)
        )


class Holiday(BaseModel):
    """
    A non-working calendar day.

    Recurring holidays fall on the same month and day every year.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str = Field(min_length=1)
    date: date
    kind: Literal["government", "restricted"] = HolidayKind.GOVERNMENT
    recurring: bool = False
    description: Optional[str] = None

    def occurrence_in(self, year: int) -> Optional[date]:
        """Date the holiday falls on in a year, or None."""
        if not self.recurring:
            return self.date if self.date.year == year else None
        try:
            return self.date.replace(year=year)
        except ValueError:
            # 29 February in a non-leap year
            return None


def find_duplicate_holidays(holidays: List[Holiday]) -> List[Tuple[Holiday, Holiday]]:
    """
    Find holidays that would share a calendar date.

    A recurring holiday collides with any holiday on the same month and day;
    a one-off holiday collides with another on the same date.

    Returns:
        List of (first, duplicate) pairs in input order
    """
    by_date: Dict[date, Holiday] = {}
    by_month_day: Dict[Tuple[int, int], Holiday] = {}
    recurring: Dict[Tuple[int, int], Holiday] = {}
    duplicates = []

    for holiday in holidays:
        key = (holiday.date.month, holiday.date.day)
        if holiday.recurring:
            clash = by_month_day.get(key)
        else:
            clash = by_date.get(holiday.date) or recurring.get(key)

        if clash is not None:
            duplicates.append((clash, holiday))
            continue

        by_date[holiday.date] = holiday
        by_month_day.setdefault(key, holiday)
        if holiday.recurring:
            recurring[key] = holiday

    return duplicates


class SLABudget:
    """
    Per-priority SLA budgets.

    Pure lookup table. Every recognized priority must have a budget.
    """

    def __init__(self, targets: Mapping[str, PriorityBudget]):
        missing = [p for p in VALID_PRIORITIES if p not in targets]
        if missing:
            raise ConfigurationException(
                f"SLA budget missing priorities: {missing}",
                {"missing": missing}
            )
        self._targets = MappingProxyType(dict(targets))

    @classmethod
    def default(cls) -> "SLABudget":
        return cls({
            priority: PriorityBudget(**hours)
            for priority, hours in DEFAULT_SLA_TARGETS.items()
        })

    def budget_for(self, priority: Optional[str]) -> PriorityBudget:
        """
        Look up the budget of a priority.

        Raises:
            UnknownPriorityError: If the priority is not recognized
        """
        if priority not in VALID_PRIORITIES:
            raise UnknownPriorityError(priority)
        return self._targets[priority]

    def resolve(self, priority: Optional[str]) -> Tuple[str, PriorityBudget]:
        """
        Look up a budget, substituting medium for unknown priorities.

        Returns:
            Tuple of (effective priority, budget)
        """
        try:
            return priority, self.budget_for(priority)
        except UnknownPriorityError:
            logger.debug(
                "Unknown priority, using default budget",
                extra={"priority": priority, "default_priority": DEFAULT_PRIORITY}
            )
            return DEFAULT_PRIORITY, self._targets[DEFAULT_PRIORITY]

    def to_dict(self) -> dict:
        return {
            priority: {
                "response_hours": budget.response_hours,
                "resolution_hours": budget.resolution_hours
            }
            for priority, budget in self._targets.items()
        }


class SLAConfig(BaseModel):
    """
    SLA Configuration loaded from YAML.

    Holds the working-hours policy, holiday list, per-priority budgets and
    alerting thresholds. Frozen: reloads build a new instance.
    """
    model_config = ConfigDict(frozen=True)

    working_hours: WorkingHoursPolicy = Field(
        default_factory=WorkingHoursPolicy,
        description="Daily working window and working weekdays"
    )
    sla_targets: Dict[str, PriorityBudget] = Field(
        default_factory=dict,
        validate_default=True,
        description="SLA budgets in business hours by priority"
    )
    holidays: Tuple[Holiday, ...] = Field(
        default=(),
        description="Non-working calendar days"
    )
    near_breach_percent: int = Field(
        default=80,
        gt=0,
        lt=100,
        description="Share of the resolution budget that marks a ticket near breach"
    )
    alert_lead_hours: float = Field(
        default=2.0,
        gt=0,
        description="Default lead time for near-breach alerts"
    )

    @field_validator("sla_targets")
    @classmethod
    def validate_sla_targets(cls, v: Dict[str, PriorityBudget]) -> Dict[str, PriorityBudget]:
        """Reject unknown priorities and fill in missing ones from defaults."""
        unknown = sorted(p for p in v if p not in VALID_PRIORITIES)
        if unknown:
            raise ValueError(f"unknown priorities in sla_targets: {unknown}")

        targets = dict(v)
        for priority in VALID_PRIORITIES:
            if priority not in targets:
                targets[priority] = PriorityBudget(**DEFAULT_SLA_TARGETS[priority])

            budget = targets[priority]
            if budget.response_hours > budget.resolution_hours:
                logger.warning(
                    "Response budget exceeds resolution budget",
                    extra={
                        "priority": priority,
                        "response_hours": budget.response_hours,
                        "resolution_hours": budget.resolution_hours
                    }
                )

        return targets

    @field_validator("holidays")
    @classmethod
    def validate_holidays(cls, v: Tuple[Holiday, ...]) -> Tuple[Holiday, ...]:
        """At most one holiday per calendar date."""
        duplicates = find_duplicate_holidays(list(v))
        if duplicates:
            pairs = [f"{a.name} / {b.name} ({b.date})" for a, b in duplicates]
            raise ValueError(f"duplicate holiday dates: {pairs}")
        return v

    def build_budget(self) -> SLABudget:
        return SLABudget(self.sla_targets)

    def build_calendar(self):
        """Build the business calendar for this configuration."""
        from grievdesk.sla.domain.calendar import BusinessCalendar

        return BusinessCalendar(self.working_hours, self.holidays)
