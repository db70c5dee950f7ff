"""Calendar-date parsing and formatting for the wire format.

Dates travel as ISO-8601 date-time strings (local midnight, no offset). Readers
accept plain dates and full date-time strings. A string without an offset keeps
the calendar date written in it; one with an offset (e.g. a UTC "Z" stamp) is
first converted to the configured local timezone.
"""

from datetime import date, datetime, tzinfo
from zoneinfo import ZoneInfo

from countdown.core.config import settings


def _local_zone() -> tzinfo | None:
    # None makes astimezone() use the system local zone
    return ZoneInfo(settings.timezone) if settings.timezone else None


def _local_date(value: datetime) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(_local_zone()).date()


def parse_calendar_date(value: object) -> date:
    """Return the calendar date carried by a date, datetime or ISO-8601 string.

    Raises:
        ValueError: If the value is not a recognisable date
    """
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO-8601 date string, got {type(value).__name__}")

    text = value.strip()
    try:
        if len(text) == 10:  # noqa: PLR2004 - YYYY-MM-DD
            return date.fromisoformat(text)
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid ISO-8601 date: {value!r}") from e

    return _local_date(parsed)


def format_calendar_date(value: date) -> str:
    """Serialize a calendar date as a date-time string at midnight."""
    return datetime(value.year, value.month, value.day).isoformat()


def iso_date_key(value: date) -> str:
    """Return the YYYY-MM-DD key identifying a calendar date."""
    return value.isoformat()
