"""
Business Calendar
=================

Combines the working-hours policy with the holiday list to answer
"is this a working day / working instant" questions.

Operates at calendar-day granularity on naive timestamps that are already
expressed in the reference timezone.
"""

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple, Union

from grievdesk.core import ConfigurationException
from grievdesk.sla.domain.value_objects import (
    Holiday, WorkingHoursPolicy, find_duplicate_holidays
)


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


class BusinessCalendar:
    """
    Immutable calendar of working days and working hours.

    Build a new instance to change holidays or policy.
    """

    def __init__(
        self,
        policy: Optional[WorkingHoursPolicy] = None,
        holidays: Iterable[Holiday] = ()
    ):
        holidays = tuple(holidays)
        duplicates = find_duplicate_holidays(list(holidays))
        if duplicates:
            raise ConfigurationException(
                "More than one holiday on the same date",
                {"duplicates": [(a.name, b.name, str(b.date)) for a, b in duplicates]}
            )

        self._policy = policy or WorkingHoursPolicy()
        self._holidays = holidays
        self._by_date: Dict[date, Holiday] = {
            h.date: h for h in holidays if not h.recurring
        }
        self._recurring: Dict[Tuple[int, int], Holiday] = {
            (h.date.month, h.date.day): h for h in holidays if h.recurring
        }

    @property
    def policy(self) -> WorkingHoursPolicy:
        return self._policy

    @property
    def holidays(self) -> Tuple[Holiday, ...]:
        return self._holidays

    @property
    def daily_working_hours(self) -> float:
        return self._policy.daily_working_hours

    def holiday_for(self, day: Union[date, datetime]) -> Optional[Holiday]:
        """Holiday falling on the given day, if any."""
        day = _as_date(day)
        holiday = self._by_date.get(day)
        if holiday is None:
            holiday = self._recurring.get((day.month, day.day))
        return holiday

    def is_holiday(self, day: Union[date, datetime]) -> bool:
        return self.holiday_for(day) is not None

    def is_working_day(self, day: Union[date, datetime]) -> bool:
        """Weekday is worked and no holiday falls on the day."""
        day = _as_date(day)
        return day.weekday() in self._policy.working_weekdays and not self.is_holiday(day)

    def is_working_instant(self, instant: datetime) -> bool:
        """
        Working day and clock time inside the working window.

        Compares hours:minutes only; both window bounds count as working.
        """
        if not self.is_working_day(instant):
            return False
        clock = instant.time().replace(second=0, microsecond=0)
        return self._policy.start_time <= clock <= self._policy.end_time

    def working_window(self, day: Union[date, datetime]) -> Optional[Tuple[datetime, datetime]]:
        """Working window of a day, or None on non-working days."""
        day = _as_date(day)
        if not self.is_working_day(day):
            return None
        return self._policy.window_for(day)

    def next_working_day(self, day: Union[date, datetime]) -> date:
        """First working day strictly after the given day."""
        candidate = _as_date(day) + timedelta(days=1)
        while not self.is_working_day(candidate):
            candidate += timedelta(days=1)
        return candidate

    def holidays_in_year(self, year: int) -> List[Holiday]:
        """
        Holidays falling in a year, sorted by date.

        Recurring holidays are returned with their date moved into the year.
        """
        result = []
        for holiday in self._holidays:
            occurrence = holiday.occurrence_in(year)
            if occurrence is None:
                continue
            if occurrence != holiday.date:
                holiday = holiday.model_copy(update={"date": occurrence})
            result.append(holiday)
        return sorted(result, key=lambda h: h.date)
