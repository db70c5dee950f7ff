"""Task domain model."""

import uuid
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from countdown.domain.dates import format_calendar_date, parse_calendar_date


def new_task_id() -> str:
    """Generate an opaque task ID, unique within a task list."""
    return uuid.uuid4().hex


class Task(BaseModel):
    """A milestone on the way to the target date."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_task_id, min_length=1, description="Client-generated task ID")
    text: str = Field(..., description="Task text")
    completed: bool = Field(default=False, description="Whether the task is done")
    due_date: date | None = Field(default=None, alias="dueDate", description="Optional due date")

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Task text must not be empty")
        return value

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: object) -> date | None:
        if value is None or value == "":
            return None
        return parse_calendar_date(value)

    @field_serializer("due_date")
    def _serialize_due_date(self, value: date | None) -> str | None:
        return format_calendar_date(value) if value else None
