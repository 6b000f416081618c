"""Tests for AlertingScanner."""

import pytest

from grievdesk.config import Priority, TicketStatus
from grievdesk.core import ValidationException
from grievdesk.sla.application import AlertingScanner

from tests.factories import at

NOW = at(6, 11, 30)


@pytest.fixture
def scanner(evaluator):
    return AlertingScanner(evaluator)


@pytest.fixture
def open_tickets(make_ticket):
    return [
        # 2.5h of 4h used: 1.5h left
        make_ticket("CRIT", at(6, 9), priority=Priority.CRITICAL),
        # 2.5h of 8h used
        make_ticket("HIGH-FRESH", at(6, 9), priority=Priority.HIGH),
        # Saturday 4.5h + Monday 2.5h of 8h used: 1h left
        make_ticket(
            "HIGH-OLD", at(4, 12, 30), priority=Priority.HIGH,
            status=TicketStatus.IN_PROGRESS
        ),
        # Saturday 8h + Monday 2.5h of 4h used: breached
        make_ticket("CRIT-LATE", at(4, 9), priority=Priority.CRITICAL),
        make_ticket("LOW", at(6, 9), priority=Priority.LOW),
    ]


class TestScanNearBreach:
    """Tests for forward-looking alerts."""

    def test_alerts_sorted_by_remaining(self, scanner, open_tickets):
        alerts = scanner.scan_near_breach(open_tickets, lead_hours=2, now=NOW)

        assert [a.ticket_id for a in alerts] == ["HIGH-OLD", "CRIT"]
        assert alerts[0].remaining_hours == pytest.approx(1.0)
        assert alerts[1].remaining_hours == pytest.approx(1.5)

    def test_alert_fields(self, scanner, open_tickets):
        alert = scanner.scan_near_breach(open_tickets, lead_hours=2, now=NOW)[1]

        assert alert.priority == Priority.CRITICAL
        assert alert.ticket_status == TicketStatus.OPEN
        assert alert.target_hours == 4
        assert alert.elapsed_business_hours == pytest.approx(2.5)
        assert alert.deadline == at(6, 13)
        assert alert.to_dict()["deadline"] == "2025-01-06T13:00:00"

    def test_remaining_equal_to_lead_alerts(self, scanner, make_ticket):
        ticket = make_ticket(priority=Priority.CRITICAL)
        assert len(scanner.scan_near_breach([ticket], lead_hours=2, now=at(6, 11))) == 1

    def test_exhausted_budget_does_not_alert(self, scanner, make_ticket):
        ticket = make_ticket(priority=Priority.CRITICAL)
        assert scanner.scan_near_breach([ticket], lead_hours=2, now=at(6, 13)) == []

    def test_resolved_tickets_skipped(self, scanner, make_ticket):
        ticket = make_ticket(
            priority=Priority.CRITICAL, status=TicketStatus.RESOLVED, resolved_at=at(6, 12)
        )
        assert scanner.scan_near_breach([ticket], lead_hours=2, now=NOW) == []

    def test_wider_lead_catches_more(self, scanner, open_tickets):
        alerts = scanner.scan_near_breach(open_tickets, lead_hours=6, now=NOW)
        assert [a.ticket_id for a in alerts] == ["HIGH-OLD", "CRIT", "HIGH-FRESH"]

    @pytest.mark.parametrize("lead", [0, -1])
    def test_non_positive_lead_rejected(self, scanner, lead):
        with pytest.raises(ValidationException):
            scanner.scan_near_breach([], lead_hours=lead, now=NOW)


class TestScanBreaches:
    """Tests for the breach report."""

    def test_open_ticket_breach(self, scanner, open_tickets):
        breaches = scanner.scan_breaches(open_tickets, now=NOW)

        assert [b.ticket_id for b in breaches] == ["CRIT-LATE"]
        breach = breaches[0]
        assert breach.resolved_at is None
        assert breach.elapsed_business_hours == pytest.approx(10.5)
        assert breach.breach_duration_hours == pytest.approx(6.5)
        assert breach.breached_at == at(4, 13)

    def test_resolved_ticket_breach(self, scanner, make_ticket):
        late = make_ticket(
            "LATE", priority=Priority.CRITICAL, status=TicketStatus.RESOLVED,
            resolved_at=at(6, 14)
        )
        on_time = make_ticket(
            "OK", priority=Priority.CRITICAL, status=TicketStatus.RESOLVED,
            resolved_at=at(6, 12)
        )

        breaches = scanner.scan_breaches([late, on_time], now=at(7, 9))

        assert [b.ticket_id for b in breaches] == ["LATE"]
        assert breaches[0].breach_duration_hours == pytest.approx(1.0)
        assert breaches[0].to_dict()["resolved_at"] == "2025-01-06T14:00:00"

    def test_closed_without_resolution_measured_to_close(self, scanner, make_ticket):
        on_time = make_ticket(
            "CLOSED-OK", priority=Priority.CRITICAL, status=TicketStatus.CLOSED,
            closed_at=at(6, 10)
        )
        late = make_ticket(
            "CLOSED-LATE", priority=Priority.CRITICAL, status=TicketStatus.CLOSED,
            closed_at=at(7, 10)
        )

        breaches = scanner.scan_breaches([on_time, late], now=at(20, 12))

        assert [b.ticket_id for b in breaches] == ["CLOSED-LATE"]
        assert breaches[0].elapsed_business_hours == pytest.approx(9.0)

    def test_alerts_and_breaches_are_disjoint(self, scanner, open_tickets):
        alerted = {a.ticket_id for a in scanner.scan_near_breach(open_tickets, 8, NOW)}
        breached = {b.ticket_id for b in scanner.scan_breaches(open_tickets, NOW)}
        assert alerted.isdisjoint(breached)
