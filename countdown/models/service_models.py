"""Pydantic models for service layer return types."""

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Countdown(BaseModel):
    """Days remaining until the target date, as seen from effective today."""

    model_config = ConfigDict(populate_by_name=True)

    today: date = Field(..., description="Effective today used for the counts")
    target_date: date | None = Field(default=None, alias="targetDate", description="Countdown horizon")
    calendar_days: int = Field(..., alias="calendarDays", ge=0, description="Calendar days, inclusive")
    working_days: int = Field(..., alias="workingDays", ge=0, description="Working days, inclusive")


class SyncState(StrEnum):
    """Remote sync lifecycle as shown by the passive status indicator."""

    IDLE = "idle"
    LOADING = "loading"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


class SyncStatus(BaseModel):
    """Last known remote sync outcome."""

    state: SyncState = Field(default=SyncState.IDLE, description="Current sync state")
    message: str | None = Field(default=None, description="User-facing detail")
    at: str | None = Field(default=None, description="When the state was entered (ISO format)")
