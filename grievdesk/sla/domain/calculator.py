"""
Business-Hours Calculator
=========================

Elapsed working time between two instants, and the inverse operation of
moving an instant forward by a number of working hours.

Single algorithm: walk the span day by day and add the overlap of each
working day's window with the interval. Sums are kept as timedelta so that
threshold comparisons are exact to the microsecond.
"""

from datetime import datetime, time, timedelta

from grievdesk.core import InvalidRangeError, ValidationException
from grievdesk.sla.domain.calendar import BusinessCalendar

ZERO = timedelta(0)


def hours(delta: timedelta) -> float:
    """Convert a timedelta to fractional hours."""
    return delta.total_seconds() / 3600


def _require_naive(*values: datetime) -> None:
    for value in values:
        if value.tzinfo is not None:
            raise ValidationException(
                "Timestamps must be normalized to the reference timezone (naive) "
                "before business-hours calculation",
                {"timestamp": value.isoformat()}
            )


class BusinessHoursCalculator:
    """
    Business-hours arithmetic over a BusinessCalendar.

    Stateless apart from the immutable calendar; safe to share across threads.
    """

    def __init__(self, calendar: BusinessCalendar):
        self._calendar = calendar

    @property
    def calendar(self) -> BusinessCalendar:
        return self._calendar

    def elapsed_business_time(self, start: datetime, end: datetime) -> timedelta:
        """
        Working time between two instants.

        Args:
            start: Interval start (naive, reference zone)
            end: Interval end (naive, reference zone)

        Returns:
            Elapsed working time as a timedelta

        Raises:
            InvalidRangeError: If end is before start
        """
        _require_naive(start, end)
        if start > end:
            raise InvalidRangeError(start, end)

        total = ZERO
        day = start.date()
        last_day = end.date()

        while day <= last_day:
            window = self._calendar.working_window(day)
            if window is not None:
                window_start, window_end = window
                overlap_start = max(start, window_start)
                overlap_end = min(end, window_end)
                if overlap_end > overlap_start:
                    total += overlap_end - overlap_start
            day += timedelta(days=1)

        return total

    def elapsed_business_hours(self, start: datetime, end: datetime) -> float:
        """Working hours between two instants. See elapsed_business_time."""
        return hours(self.elapsed_business_time(start, end))

    def add_business_hours(self, start: datetime, business_hours: float) -> datetime:
        """
        Instant reached after spending the given working hours from start.

        Used to compute SLA deadlines. The result always lies inside a working
        window (or equals start when no hours are added).
        """
        _require_naive(start)
        remaining = timedelta(hours=business_hours)
        if remaining <= ZERO:
            return start

        cursor = start
        while True:
            window = self._calendar.working_window(cursor)
            if window is not None:
                window_start, window_end = window
                effective_start = max(cursor, window_start)
                if effective_start < window_end:
                    available = window_end - effective_start
                    if remaining <= available:
                        return effective_start + remaining
                    remaining -= available
            cursor = datetime.combine(cursor.date() + timedelta(days=1), time.min)

    @staticmethod
    def elapsed_calendar_hours(start: datetime, end: datetime) -> float:
        """Raw wall-clock hours between two instants."""
        if start > end:
            raise InvalidRangeError(start, end)
        return hours(end - start)
