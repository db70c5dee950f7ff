"""Operations on the excluded-dates list.

All functions return a new list and leave their input untouched.
"""

from datetime import date

from countdown.domain.dates import iso_date_key
from countdown.domain.excluded_date import ExcludedDate


def is_excluded(excluded_dates: list[ExcludedDate], day: date) -> bool:
    key = iso_date_key(day)
    return any(entry.key == key for entry in excluded_dates)


def toggle_exclusion(excluded_dates: list[ExcludedDate], day: date) -> list[ExcludedDate]:
    """Remove day if it is excluded, otherwise add it without a comment."""
    key = iso_date_key(day)
    if any(entry.key == key for entry in excluded_dates):
        return [entry for entry in excluded_dates if entry.key != key]
    return [*excluded_dates, ExcludedDate(date=day)]


def update_comment(excluded_dates: list[ExcludedDate], day: date, comment: str) -> list[ExcludedDate]:
    """Set the comment of an excluded day; the date key never changes.

    Raises:
        KeyError: If day is not excluded
    """
    key = iso_date_key(day)
    if not any(entry.key == key for entry in excluded_dates):
        msg = f"Date is not excluded: {key}"
        raise KeyError(msg)

    return [
        entry.model_copy(update={"comment": comment or None}) if entry.key == key else entry
        for entry in excluded_dates
    ]


def sorted_exclusions(excluded_dates: list[ExcludedDate]) -> list[ExcludedDate]:
    """Return excluded dates in chronological order."""
    return sorted(excluded_dates, key=lambda entry: entry.date)
