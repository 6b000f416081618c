"""
SLA Application Services
=========================

Application services orchestrate the domain layer over batches of tickets
supplied by the hosting ticket service.

- MetricsAggregator: batch statistics and daily trend
- AlertingScanner: near-breach alerts and breach report
- SLAService: entry point that snapshots configuration once per call

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (config provider), not concrete implementations
"""

import statistics
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import ValidationError

from grievdesk.config import VALID_PRIORITIES, SLAStatus, settings
from grievdesk.core import ApplicationException, InvalidRangeError, ValidationException
from grievdesk.shared.infrastructure.logging import get_logger, log_latency
from grievdesk.shared.infrastructure.timezone import (
    current_reference_time, normalize_timestamp
)
from grievdesk.sla.domain import (
    Ticket, SLAConfig, SLAEvaluator, SLAAlert, SLABreach,
    TicketSLAReport, BusinessHoursMetrics, PriorityMetrics,
    TATMetrics, TrendBucket
)
from grievdesk.sla.domain.calculator import ZERO, hours
from grievdesk.sla.application.dto import TicketRecordDTO, MetricsQueryDTO

logger = get_logger(__name__)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


# ========== Configuration Interface (Dependency Inversion) ==========

class ISLAConfigProvider(ABC):
    """Interface for SLA configuration access."""

    @abstractmethod
    def get_config(self) -> SLAConfig:
        """Get current SLA configuration snapshot."""


# ========== Domain Orchestration ==========

class MetricsAggregator:
    """
    Batch SLA statistics over a set of tickets.

    Tickets lacking the timestamp a statistic needs are left out of that
    statistic rather than failing the batch.
    """

    def __init__(self, evaluator: SLAEvaluator):
        self._evaluator = evaluator

    def aggregate(self, tickets: Iterable[Ticket], now: datetime) -> BusinessHoursMetrics:
        """
        Compute batch metrics.

        Args:
            tickets: Ticket snapshots
            now: Evaluation instant for tickets that are still open

        Returns:
            BusinessHoursMetrics with overall figures and per-priority breakdown
        """
        tickets = list(tickets)

        buckets: Dict[str, List[Ticket]] = {priority: [] for priority in VALID_PRIORITIES}
        for ticket in tickets:
            priority, _ = self._evaluator.budget.resolve(ticket.priority)
            buckets[priority].append(ticket)

        by_priority = {
            priority: self._priority_metrics(priority, bucket, now)
            for priority, bucket in buckets.items()
        }

        return BusinessHoursMetrics(
            total_tickets=len(tickets),
            avg_resolution_time=self.average_resolution_time(tickets),
            avg_first_response_time=self.average_first_response_time(tickets),
            sla_compliance_rate=self.compliance_rate(tickets, now),
            tat_metrics=self.tat_metrics(tickets, now),
            by_priority=by_priority
        )

    def _priority_metrics(
        self,
        priority: str,
        tickets: List[Ticket],
        now: datetime
    ) -> PriorityMetrics:
        budget = self._evaluator.budget.budget_for(priority)
        compliant = sum(1 for t in tickets if self._evaluator.is_compliant(t, now))

        return PriorityMetrics(
            priority=priority,
            response_target_hours=budget.response_hours,
            resolution_target_hours=budget.resolution_hours,
            total_tickets=len(tickets),
            compliant_count=compliant,
            avg_resolution_time=self.average_resolution_time(tickets),
            avg_first_response_time=self.average_first_response_time(tickets),
            sla_compliance_rate=(compliant / len(tickets) * 100) if tickets else 0.0,
            tat_metrics=self.tat_metrics(tickets, now)
        )

    def average_resolution_time(self, tickets: List[Ticket]) -> float:
        """Mean resolution time of resolved/closed tickets that have resolved_at."""
        return _mean([
            self._evaluator.resolution_time(t)
            for t in tickets
            if t.is_closed and t.resolved_at is not None
        ])

    def average_first_response_time(self, tickets: List[Ticket]) -> float:
        """Mean first-response time of tickets that have first_response_at."""
        return _mean([
            self._evaluator.first_response_time(t)
            for t in tickets
            if t.first_response_at is not None
        ])

    def compliance_rate(self, tickets: List[Ticket], now: datetime) -> float:
        """Percentage of tickets passing both SLA clocks; 0 for an empty batch."""
        if not tickets:
            return 0.0
        compliant = sum(1 for t in tickets if self._evaluator.is_compliant(t, now))
        return compliant / len(tickets) * 100

    def tat_metrics(self, tickets: List[Ticket], now: datetime) -> TATMetrics:
        """Turnaround statistics over resolved/closed tickets that have resolved_at."""
        evaluations = [
            self._evaluator.evaluate_resolution(t, now)
            for t in tickets
            if t.is_closed and t.resolved_at is not None
        ]
        if not evaluations:
            return TATMetrics()

        tat_values = [e.elapsed_business_hours for e in evaluations]
        within = sum(1 for e in evaluations if e.status == SLAStatus.ON_TIME)

        return TATMetrics(
            within_sla=within,
            exceeded_sla=len(evaluations) - within,
            avg_tat=_mean(tat_values),
            median_tat=statistics.median(tat_values),
            min_tat=min(tat_values),
            max_tat=max(tat_values)
        )

    def trend(
        self,
        tickets: Iterable[Ticket],
        start_date: Union[date, datetime],
        end_date: Union[date, datetime]
    ) -> List[TrendBucket]:
        """
        Daily trend series over [start_date, end_date].

        Each bucket counts tickets created and resolved that day, and averages
        the response/resolution time of tickets whose first response or
        resolution fell on that day.

        Raises:
            InvalidRangeError: If end_date is before start_date
        """
        start_day = _as_date(start_date)
        end_day = _as_date(end_date)
        if end_day < start_day:
            raise InvalidRangeError(start_day, end_day)

        created: Dict[date, int] = defaultdict(int)
        responded: Dict[date, List[Ticket]] = defaultdict(list)
        resolved: Dict[date, List[Ticket]] = defaultdict(list)

        for ticket in tickets:
            created[ticket.created_at.date()] += 1
            if ticket.first_response_at is not None:
                responded[ticket.first_response_at.date()].append(ticket)
            if ticket.resolved_at is not None:
                resolved[ticket.resolved_at.date()].append(ticket)

        series = []
        day = start_day
        while day <= end_day:
            day_resolved = resolved.get(day, [])
            series.append(TrendBucket(
                day=day,
                ticket_count=created.get(day, 0),
                resolved_count=len(day_resolved),
                avg_response_time=_mean([
                    self._evaluator.first_response_time(t) for t in responded.get(day, [])
                ]),
                avg_resolution_time=_mean([
                    self._evaluator.resolution_time(t) for t in day_resolved
                ])
            ))
            day += timedelta(days=1)

        return series


class AlertingScanner:
    """
    Scans tickets for SLA risk.

    Alerts are forward-looking (budget not yet exhausted); breaches are
    retrospective. A ticket is never in both lists.
    """

    def __init__(self, evaluator: SLAEvaluator):
        self._evaluator = evaluator

    def scan_near_breach(
        self,
        tickets: Iterable[Ticket],
        lead_hours: float,
        now: datetime
    ) -> List[SLAAlert]:
        """
        Alert on open tickets whose remaining resolution budget is within lead time.

        Emits an alert iff 0 < remaining <= lead_hours. Most urgent first.

        Raises:
            ValidationException: If lead_hours is not positive
        """
        if lead_hours <= 0:
            raise ValidationException(
                "lead_hours must be positive",
                {"lead_hours": lead_hours}
            )

        lead = timedelta(hours=lead_hours)
        alerts = []

        for ticket in tickets:
            if not ticket.is_open:
                continue

            remaining = self._evaluator.remaining_resolution_time(ticket, now)
            if not ZERO < remaining <= lead:
                continue

            priority, budget = self._evaluator.budget.resolve(ticket.priority)
            alerts.append(SLAAlert(
                ticket_id=ticket.id,
                priority=priority,
                ticket_status=ticket.status,
                created_at=ticket.created_at,
                remaining_hours=hours(remaining),
                target_hours=budget.resolution_hours,
                elapsed_business_hours=budget.resolution_hours - hours(remaining),
                deadline=self._evaluator.calculator.add_business_hours(
                    ticket.created_at, budget.resolution_hours
                )
            ))

        alerts.sort(key=lambda a: a.remaining_hours)
        return alerts

    def scan_breaches(self, tickets: Iterable[Ticket], now: datetime) -> List[SLABreach]:
        """
        Report tickets whose resolution SLA is breached.

        Resolved tickets are measured up to resolved_at (closed_at when closed
        without a resolution), open ones up to now.
        """
        breaches = []

        for ticket in tickets:
            evaluation = self._evaluator.evaluate_resolution(ticket, now)
            if not evaluation.is_breached:
                continue

            priority, _ = self._evaluator.budget.resolve(ticket.priority)
            breaches.append(SLABreach(
                ticket_id=ticket.id,
                priority=priority,
                created_at=ticket.created_at,
                resolved_at=ticket.resolved_at,
                target_hours=evaluation.target_hours,
                elapsed_business_hours=evaluation.elapsed_business_hours,
                breach_duration_hours=(
                    evaluation.elapsed_business_hours - evaluation.target_hours
                ),
                breached_at=evaluation.deadline
            ))

        return breaches


# ========== Application Services ==========

class SLAService:
    """
    Entry point for the hosting ticket service.

    Takes one configuration snapshot per call so every ticket in a batch is
    evaluated against the same calendar and budgets.
    """

    def __init__(
        self,
        config_provider: ISLAConfigProvider,
        reference_timezone: Optional[str] = None
    ):
        self._config_provider = config_provider
        self._reference_timezone = reference_timezone or settings.reference_timezone

    def _snapshot(self) -> Tuple[SLAConfig, SLAEvaluator]:
        config = self._config_provider.get_config()
        evaluator = SLAEvaluator(
            config.build_calendar(),
            config.build_budget(),
            config.near_breach_percent
        )
        return config, evaluator

    def _now(self, now: Optional[datetime]) -> datetime:
        if now is None:
            return current_reference_time(self._reference_timezone)
        return normalize_timestamp(now, self._reference_timezone)

    def _to_ticket(self, record: Any) -> Ticket:
        if isinstance(record, Ticket):
            return record
        dto = TicketRecordDTO.model_validate(record)
        return dto.to_domain(self._reference_timezone)

    def load_tickets(self, records: Iterable[Any]) -> List[Ticket]:
        """
        Convert raw records to domain tickets.

        Malformed records are logged and skipped so one bad record never
        aborts a batch.
        """
        tickets = []
        skipped = 0

        for record in records:
            try:
                tickets.append(self._to_ticket(record))
            except (ValidationError, ApplicationException) as e:
                skipped += 1
                logger.warning(
                    "Skipping malformed ticket record",
                    extra={"error": str(e)}
                )

        if skipped:
            logger.info(
                "Ticket records loaded",
                extra={"tickets_loaded": len(tickets), "tickets_skipped": skipped}
            )
        return tickets

    def evaluate_ticket(self, record: Any, now: Optional[datetime] = None) -> TicketSLAReport:
        """
        Evaluate both SLA clocks of a single ticket.

        Raises:
            ValidationError: If the record cannot be parsed
            ValidationException: If the record's timestamps are inconsistent
        """
        _, evaluator = self._snapshot()
        return evaluator.evaluate(self._to_ticket(record), self._now(now))

    def get_metrics(
        self,
        records: Iterable[Any],
        query: Optional[MetricsQueryDTO] = None,
        now: Optional[datetime] = None
    ) -> BusinessHoursMetrics:
        """Batch metrics over the records matching the query filters."""
        _, evaluator = self._snapshot()
        tickets = self.load_tickets(records)
        if query is not None:
            tickets = [t for t in tickets if query.matches(t)]

        with log_latency(logger, "sla_metrics", ticket_count=len(tickets)):
            metrics = MetricsAggregator(evaluator).aggregate(tickets, self._now(now))

        return metrics

    def get_trend(
        self,
        records: Iterable[Any],
        start_date: Union[date, datetime],
        end_date: Union[date, datetime]
    ) -> List[TrendBucket]:
        """Daily trend series between two days, inclusive."""
        _, evaluator = self._snapshot()
        tickets = self.load_tickets(records)

        with log_latency(logger, "sla_trend", ticket_count=len(tickets)):
            series = MetricsAggregator(evaluator).trend(tickets, start_date, end_date)

        return series

    def get_alerts(
        self,
        records: Iterable[Any],
        lead_hours: Optional[float] = None,
        now: Optional[datetime] = None
    ) -> List[SLAAlert]:
        """Near-breach alerts; lead time defaults to the configured value."""
        config, evaluator = self._snapshot()
        tickets = self.load_tickets(records)
        lead = lead_hours if lead_hours is not None else config.alert_lead_hours

        alerts = AlertingScanner(evaluator).scan_near_breach(tickets, lead, self._now(now))

        logger.info(
            "Near-breach scan complete",
            extra={
                "tickets_scanned": len(tickets),
                "alerts": len(alerts),
                "lead_hours": lead
            }
        )
        return alerts

    def get_breaches(
        self,
        records: Iterable[Any],
        query: Optional[MetricsQueryDTO] = None,
        now: Optional[datetime] = None
    ) -> List[SLABreach]:
        """Resolution SLA breaches among the records matching the query filters."""
        _, evaluator = self._snapshot()
        tickets = self.load_tickets(records)
        if query is not None:
            tickets = [t for t in tickets if query.matches(t)]

        return AlertingScanner(evaluator).scan_breaches(tickets, self._now(now))
