"""AppData: the full durable application state as one serializable unit."""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from countdown.domain.dates import format_calendar_date, parse_calendar_date
from countdown.domain.excluded_date import ExcludedDate
from countdown.domain.migration import CURRENT_SCHEMA_VERSION, migrate_app_data
from countdown.domain.task import Task


class AppData(BaseModel):
    """Target date, excluded dates and tasks.

    The wire shape is camelCase JSON::

        {"targetDate": "2024-06-07T00:00:00",
         "excludedDates": [{"date": "2024-06-05T00:00:00", "comment": "Holiday"}],
         "tasks": [{"id": "...", "text": "...", "completed": false, "dueDate": "..."}]}
    """

    model_config = ConfigDict(populate_by_name=True)

    target_date: date | None = Field(default=None, alias="targetDate")
    excluded_dates: list[ExcludedDate] = Field(default_factory=list, alias="excludedDates")
    tasks: list[Task] = Field(default_factory=list)
    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION, alias="schemaVersion")

    @field_validator("target_date", mode="before")
    @classmethod
    def _parse_target_date(cls, value: object) -> date | None:
        if value is None or value == "":
            return None
        return parse_calendar_date(value)

    @field_validator("excluded_dates", "tasks", mode="before")
    @classmethod
    def _null_list_is_empty(cls, value: object) -> object:
        # Firebase drops empty arrays, so a stored document may carry null instead
        return [] if value is None else value

    @model_validator(mode="after")
    def _check_uniqueness(self) -> "AppData":
        keys = [entry.key for entry in self.excluded_dates]
        if len(keys) != len(set(keys)):
            raise ValueError("Excluded dates must be unique per calendar date")
        ids = [task.id for task in self.tasks]
        if len(ids) != len(set(ids)):
            raise ValueError("Task IDs must be unique")
        return self

    @field_serializer("target_date")
    def _serialize_target_date(self, value: date | None) -> str | None:
        return format_calendar_date(value) if value else None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AppData":
        """Build AppData from a stored or synced JSON document, migrating it first.

        Raises:
            ValueError: If the document cannot be migrated or validated
        """
        if not isinstance(payload, dict):
            raise ValueError(f"AppData document must be an object, got {type(payload).__name__}")
        return cls.model_validate(migrate_app_data(payload))

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON wire shape, omitting absent optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def excluded_keys(self) -> set[str]:
        """Return the YYYY-MM-DD keys of all excluded dates."""
        return {entry.key for entry in self.excluded_dates}
