"""Shared fixtures for SLA engine tests."""

from datetime import date

import pytest

from grievdesk.sla.domain import (
    BusinessCalendar,
    BusinessHoursCalculator,
    Holiday,
    SLAEvaluator,
    Ticket,
    WorkingHoursPolicy,
)

from tests.factories import at


@pytest.fixture
def policy():
    return WorkingHoursPolicy()


@pytest.fixture
def weekday_policy():
    return WorkingHoursPolicy(working_weekdays=frozenset({0, 1, 2, 3, 4}))


@pytest.fixture
def calendar(policy):
    return BusinessCalendar(policy)


@pytest.fixture
def calculator(calendar):
    return BusinessHoursCalculator(calendar)


@pytest.fixture
def evaluator(calendar):
    return SLAEvaluator(calendar)


@pytest.fixture
def wednesday_holiday():
    return Holiday(id=1, name="Founders Day", date=date(2025, 1, 8))


@pytest.fixture
def make_ticket():
    def _make(ticket_id="T-1", created_at=None, **kwargs):
        return Ticket(id=ticket_id, created_at=created_at or at(6, 9), **kwargs)
    return _make
