"""Calendar-day and working-day counts to the target date.

Both counts are inclusive of today and of the target date, and never negative.
"""

from collections.abc import Iterable
from datetime import date, timedelta

from countdown.domain.dates import parse_calendar_date


# date.weekday(): Monday == 0 ... Saturday == 5, Sunday == 6
WEEKEND_DAYS = frozenset({5, 6})


def _excluded_key_set(excluded_dates: Iterable[str | date]) -> set[str]:
    return {parse_calendar_date(value).isoformat() for value in excluded_dates}


def calendar_days_remaining(target: date | None, today: date) -> int:
    """Return the number of calendar days from today through target, inclusive."""
    if target is None:
        return 0
    return max(0, (target - today).days + 1)


def is_working_day(day: date, excluded: set[str]) -> bool:
    """Return True if day is neither a weekend day nor in the excluded key set."""
    return day.weekday() not in WEEKEND_DAYS and day.isoformat() not in excluded


def working_days_remaining(target: date | None, today: date, excluded_dates: Iterable[str | date] = ()) -> int:
    """Count working days from today through target, inclusive.

    Args:
        target: Countdown horizon, or None when unset
        today: Effective today
        excluded_dates: Excluded calendar dates as dates or ISO strings;
            strings with an offset are read in the local timezone

    Returns:
        Number of days in [today, target] that are not weekends and not excluded
    """
    if target is None or target < today:
        return 0

    excluded = _excluded_key_set(excluded_dates)
    count = 0
    day = today
    while day <= target:
        if is_working_day(day, excluded):
            count += 1
        day += timedelta(days=1)
    return count


def days_until(due: date, today: date) -> int:
    """Signed calendar-day difference, used for a task's 'Nd remaining' label."""
    return (due - today).days
