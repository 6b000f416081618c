"""Tests for BusinessHoursCalculator."""

from datetime import datetime, timedelta, timezone
from itertools import combinations

import pytest

from grievdesk.core import InvalidRangeError, ValidationException
from grievdesk.sla.domain import BusinessCalendar, BusinessHoursCalculator, Holiday

from tests.factories import at

# Monday to next Monday, crossing nights, a Wednesday holiday and Sunday
INSTANTS = [
    at(6, 8), at(6, 10), at(6, 17), at(6, 23), at(7, 9), at(7, 12, 30),
    at(8, 12), at(9, 8), at(9, 9, 30), at(11, 16), at(12, 12), at(13, 8), at(13, 11),
]


@pytest.fixture
def holiday_calculator(policy, wednesday_holiday):
    return BusinessHoursCalculator(BusinessCalendar(policy, [wednesday_holiday]))


class TestElapsedBusinessHours:
    """Tests for the day-walk elapsed time."""

    def test_clips_to_window_start(self, calculator):
        # Monday 08:00 -> Monday 10:00
        assert calculator.elapsed_business_hours(at(6, 8), at(6, 10)) == 1.0

    def test_spans_sunday(self, calculator):
        # Saturday 16:00 -> Monday 10:00
        assert calculator.elapsed_business_hours(at(11, 16), at(13, 10)) == 2.0

    def test_friday_to_monday_on_weekday_calendar(self, weekday_policy):
        calculator = BusinessHoursCalculator(BusinessCalendar(weekday_policy))
        assert calculator.elapsed_business_hours(at(10, 16), at(13, 10)) == 2.0

    def test_friday_to_monday_counts_saturday(self, calculator):
        assert calculator.elapsed_business_hours(at(10, 16), at(13, 10)) == 10.0

    def test_holiday_is_excluded(self, policy, wednesday_holiday):
        calculator = BusinessHoursCalculator(BusinessCalendar(policy, [wednesday_holiday]))
        assert calculator.elapsed_business_hours(at(8, 10), at(8, 14)) == 0.0

    def test_holiday_inside_span(self, policy, wednesday_holiday):
        calculator = BusinessHoursCalculator(BusinessCalendar(policy, [wednesday_holiday]))
        # Tue 16:00 -> Thu 10:00 skips Wednesday
        assert calculator.elapsed_business_hours(at(7, 16), at(9, 10)) == 2.0

    def test_start_equals_end_is_zero(self, calculator):
        assert calculator.elapsed_business_time(at(6, 11), at(6, 11)) == timedelta(0)

    def test_entirely_outside_window(self, calculator):
        assert calculator.elapsed_business_hours(at(6, 17), at(7, 9)) == 0.0
        assert calculator.elapsed_business_hours(at(12, 9), at(12, 17)) == 0.0

    def test_full_week(self, calculator):
        # Monday 00:00 -> next Monday 00:00: six working days
        assert calculator.elapsed_business_hours(at(6, 0), at(13, 0)) == 48.0

    def test_microsecond_precision(self, calculator):
        start = datetime(2025, 1, 6, 9, 0, 0, 1)
        end = datetime(2025, 1, 6, 9, 0, 0, 3)
        assert calculator.elapsed_business_time(start, end) == timedelta(microseconds=2)

    def test_additive_over_split_point(self, calculator):
        start, middle, end = at(7, 12), at(9, 8), at(11, 13)
        assert (
            calculator.elapsed_business_time(start, middle)
            + calculator.elapsed_business_time(middle, end)
            == calculator.elapsed_business_time(start, end)
        )

    def test_never_exceeds_calendar_time(self, calculator):
        start, end = at(6, 10), at(6, 12)
        elapsed = calculator.elapsed_business_hours(start, end)
        assert elapsed <= calculator.elapsed_calendar_hours(start, end)

    def test_end_before_start_raises(self, calculator):
        with pytest.raises(InvalidRangeError):
            calculator.elapsed_business_time(at(7, 10), at(6, 10))

    def test_aware_timestamps_rejected(self, calculator):
        start = datetime(2025, 1, 6, 9, tzinfo=timezone.utc)
        with pytest.raises(ValidationException):
            calculator.elapsed_business_time(start, at(6, 10))


class TestAddBusinessHours:
    """Tests for deadline computation."""

    def test_within_same_day(self, calculator):
        assert calculator.add_business_hours(at(6, 9), 4) == at(6, 13)

    def test_rolls_over_to_next_day(self, calculator):
        assert calculator.add_business_hours(at(6, 15), 4) == at(7, 11)

    def test_starts_before_window(self, calculator):
        assert calculator.add_business_hours(at(6, 7), 1) == at(6, 10)

    def test_skips_sunday_and_holiday(self, policy):
        calculator = BusinessHoursCalculator(BusinessCalendar(
            policy, [Holiday(name="Bridge", date=at(13, 0).date())]
        ))
        # Saturday 16:00 + 2h -> Tuesday 10:00
        assert calculator.add_business_hours(at(11, 16), 2) == at(14, 10)

    def test_ends_exactly_at_window_end(self, calculator):
        assert calculator.add_business_hours(at(6, 9), 8) == at(6, 17)

    def test_zero_hours_returns_start(self, calculator):
        assert calculator.add_business_hours(at(12, 20), 0) == at(12, 20)

    def test_inverse_of_elapsed(self, calculator):
        start = at(9, 14, 30)
        deadline = calculator.add_business_hours(start, 24)
        assert calculator.elapsed_business_hours(start, deadline) == 24.0


class TestElapsedCalendarHours:
    """Tests for raw wall-clock hours."""

    def test_counts_nights_and_weekends(self, calculator):
        assert calculator.elapsed_calendar_hours(at(10, 16), at(13, 10)) == 66.0

    def test_end_before_start_raises(self, calculator):
        with pytest.raises(InvalidRangeError):
            calculator.elapsed_calendar_hours(at(13, 10), at(10, 16))


class TestElapsedInvariants:
    """Ordering and bound properties of elapsed business time."""

    @pytest.mark.parametrize("earlier, later", list(zip(INSTANTS, INSTANTS[1:])))
    def test_monotonic_in_end(self, holiday_calculator, earlier, later):
        start = INSTANTS[0]
        assert (
            holiday_calculator.elapsed_business_time(start, earlier)
            <= holiday_calculator.elapsed_business_time(start, later)
        )

    @pytest.mark.parametrize("earlier, later", list(zip(INSTANTS, INSTANTS[1:])))
    def test_monotonic_in_start(self, holiday_calculator, earlier, later):
        end = INSTANTS[-1]
        assert (
            holiday_calculator.elapsed_business_time(later, end)
            <= holiday_calculator.elapsed_business_time(earlier, end)
        )

    @pytest.mark.parametrize("start, end", list(combinations(INSTANTS, 2)))
    def test_bounded_by_days_spanned(self, holiday_calculator, start, end):
        days_spanned = (end.date() - start.date()).days + 1
        bound = days_spanned * holiday_calculator.calendar.daily_working_hours
        assert holiday_calculator.elapsed_business_hours(start, end) <= bound

    def test_holiday_and_sunday_add_nothing(self, holiday_calculator):
        assert holiday_calculator.elapsed_business_time(at(7, 17), at(9, 9)) == timedelta(0)
        assert holiday_calculator.elapsed_business_time(at(11, 17), at(13, 9)) == timedelta(0)
