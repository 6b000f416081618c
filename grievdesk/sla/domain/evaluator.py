"""
SLA Evaluator
=============

Read-only classifier of a ticket's SLA clocks against a caller-supplied "now".

Resolution clock:
- resolved:      on_time if resolution time <= budget, else breached
                 (a ticket closed without resolved_at stops at closed_at)
- not resolved:  breached at >= 100% of budget, near_breach at >= the
                 near-breach percentage, pending below that

The response clock is classified the same way with the response budget
and first_response_at. A ticket resolved without a first response stops
the response clock at resolution.
"""

from datetime import datetime, timedelta
from typing import Optional

from grievdesk.config import SLAStatus, SLAType
from grievdesk.core import MissingTimestampError
from grievdesk.sla.domain.calendar import BusinessCalendar
from grievdesk.sla.domain.calculator import BusinessHoursCalculator, ZERO, hours
from grievdesk.sla.domain.entities import Ticket, SLAEvaluation, TicketSLAReport
from grievdesk.sla.domain.value_objects import SLABudget


class SLAEvaluator:
    """
    Evaluates SLA status of single tickets.

    Pure function of the ticket, calendar, budget and "now"; never mutates
    the ticket and caches nothing.
    """

    def __init__(
        self,
        calendar: BusinessCalendar,
        budget: Optional[SLABudget] = None,
        near_breach_percent: int = 80
    ):
        if not 0 < near_breach_percent < 100:
            raise ValueError("near_breach_percent must be between 0 and 100")
        self._calculator = BusinessHoursCalculator(calendar)
        self._budget = budget or SLABudget.default()
        self._near_breach_percent = near_breach_percent

    @property
    def calculator(self) -> BusinessHoursCalculator:
        return self._calculator

    @property
    def budget(self) -> SLABudget:
        return self._budget

    @property
    def near_breach_percent(self) -> int:
        return self._near_breach_percent

    def _elapsed_until(self, start: datetime, end: datetime) -> timedelta:
        # A "now" earlier than creation means the clock has not started.
        if end < start:
            return ZERO
        return self._calculator.elapsed_business_time(start, end)

    def _classify(
        self,
        sla_type: str,
        created_at: datetime,
        met_at: Optional[datetime],
        target_hours: float,
        now: datetime
    ) -> SLAEvaluation:
        target = timedelta(hours=target_hours)
        deadline = self._calculator.add_business_hours(created_at, target_hours)

        if met_at is not None:
            elapsed = self._calculator.elapsed_business_time(created_at, met_at)
            status = SLAStatus.ON_TIME if elapsed <= target else SLAStatus.BREACHED
        else:
            elapsed = self._elapsed_until(created_at, now)
            if elapsed >= target:
                status = SLAStatus.BREACHED
            elif elapsed * 100 >= target * self._near_breach_percent:
                status = SLAStatus.NEAR_BREACH
            else:
                status = SLAStatus.PENDING

        return SLAEvaluation(
            sla_type=sla_type,
            status=status,
            elapsed_business_hours=hours(elapsed),
            target_hours=target_hours,
            remaining_hours=hours(max(target - elapsed, ZERO)),
            deadline=deadline,
            met_at=met_at
        )

    def evaluate_resolution(self, ticket: Ticket, now: datetime) -> SLAEvaluation:
        """Classify the resolution clock of a ticket."""
        _, budget = self._budget.resolve(ticket.priority)
        return self._classify(
            SLAType.RESOLUTION, ticket.created_at, ticket.resolution_stopped_at,
            budget.resolution_hours, now
        )

    def evaluate_response(self, ticket: Ticket, now: datetime) -> SLAEvaluation:
        """Classify the first-response clock of a ticket."""
        _, budget = self._budget.resolve(ticket.priority)
        return self._classify(
            SLAType.RESPONSE, ticket.created_at,
            ticket.first_response_at or ticket.resolution_stopped_at,
            budget.response_hours, now
        )

    def evaluate(self, ticket: Ticket, now: datetime) -> TicketSLAReport:
        """
        Evaluate both SLA clocks of a ticket.

        Args:
            ticket: Ticket snapshot
            now: Evaluation instant (naive, reference zone)

        Returns:
            TicketSLAReport with response and resolution evaluations
        """
        priority, _ = self._budget.resolve(ticket.priority)
        end = ticket.resolution_stopped_at or max(now, ticket.created_at)

        return TicketSLAReport(
            ticket_id=ticket.id,
            priority=priority,
            ticket_status=ticket.status,
            response=self.evaluate_response(ticket, now),
            resolution=self.evaluate_resolution(ticket, now),
            elapsed_calendar_hours=self._calculator.elapsed_calendar_hours(
                ticket.created_at, end
            )
        )

    def is_compliant(self, ticket: Ticket, now: datetime) -> bool:
        """Both clocks pass (neither is breached)."""
        return (
            self.evaluate_response(ticket, now).passes
            and self.evaluate_resolution(ticket, now).passes
        )

    def resolution_time(self, ticket: Ticket) -> float:
        """
        Business hours from creation to resolution.

        Raises:
            MissingTimestampError: If the ticket is not resolved
        """
        if ticket.resolved_at is None:
            raise MissingTimestampError(ticket.id, "resolved_at")
        return self._calculator.elapsed_business_hours(ticket.created_at, ticket.resolved_at)

    def first_response_time(self, ticket: Ticket) -> float:
        """
        Business hours from creation to first response.

        Raises:
            MissingTimestampError: If the ticket has no first response
        """
        if ticket.first_response_at is None:
            raise MissingTimestampError(ticket.id, "first_response_at")
        return self._calculator.elapsed_business_hours(
            ticket.created_at, ticket.first_response_at
        )

    def breach_duration(self, ticket: Ticket) -> float:
        """
        Business hours a resolved ticket ran past its resolution budget.

        Zero for tickets resolved within budget.

        Raises:
            MissingTimestampError: If the ticket is not resolved
        """
        _, budget = self._budget.resolve(ticket.priority)
        return max(0.0, self.resolution_time(ticket) - budget.resolution_hours)

    def remaining_resolution_time(self, ticket: Ticket, now: datetime) -> timedelta:
        """Signed business time left on the resolution budget at "now"."""
        _, budget = self._budget.resolve(ticket.priority)
        elapsed = self._elapsed_until(ticket.created_at, now)
        return timedelta(hours=budget.resolution_hours) - elapsed
