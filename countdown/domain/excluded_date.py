"""Excluded (non-working) date domain model."""

import datetime as dt

from pydantic import BaseModel, Field, field_serializer, field_validator

from countdown.domain.dates import format_calendar_date, iso_date_key, parse_calendar_date


class ExcludedDate(BaseModel):
    """A calendar date that does not count as a working day."""

    date: dt.date = Field(..., description="Excluded calendar date")
    comment: str | None = Field(default=None, description="Reason for skipping (e.g. Vacation, Holiday)")

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> dt.date:
        return parse_calendar_date(value)

    @field_validator("comment")
    @classmethod
    def _empty_comment_is_absent(cls, value: str | None) -> str | None:
        return value or None

    @field_serializer("date")
    def _serialize_date(self, value: dt.date) -> str:
        return format_calendar_date(value)

    @property
    def key(self) -> str:
        """YYYY-MM-DD key; at most one entry per key."""
        return iso_date_key(self.date)
