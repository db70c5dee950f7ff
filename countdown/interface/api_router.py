"""JSON API for the countdown page."""

import datetime as dt
import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from countdown.domain.excluded_date import ExcludedDate
from countdown.domain.task import Task
from countdown.interface.dependencies import get_app_state
from countdown.models.service_models import Countdown, SyncStatus
from countdown.services import exclusion_service, task_service
from countdown.services.state_service import AppState


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


class TargetDateUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    target_date: date | None = Field(default=None, alias="targetDate")


class ExclusionToggle(BaseModel):
    date: dt.date


class ExclusionToggleResult(BaseModel):
    date: dt.date
    excluded: bool


class CommentUpdate(BaseModel):
    comment: str = ""


class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1)
    due_date: date | None = Field(default=None, alias="dueDate")


class ResetRequest(BaseModel):
    confirm: bool = False


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/state")
async def get_state(app_state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    """Return the full AppData with the computed countdown."""
    data = app_state.data
    return {
        **data.to_payload(),
        "excludedDates": [_dump(entry) for entry in exclusion_service.sorted_exclusions(data.excluded_dates)],
        "tasks": [_dump(task) for task in task_service.sort_tasks(data.tasks)],
        "pendingTasks": task_service.pending_count(data.tasks),
        "countdown": _dump(app_state.countdown()),
        "sync": _dump(app_state.sync.status),
    }


@router.get("/countdown")
async def get_countdown(app_state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    """Return calendar and working days remaining."""
    countdown: Countdown = app_state.countdown()
    return _dump(countdown)


@router.put("/target-date")
async def put_target_date(body: TargetDateUpdate, app_state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    """Set or clear the target date."""
    await app_state.set_target_date(body.target_date)
    return _dump(app_state.countdown())


@router.post("/excluded-dates/toggle")
async def post_toggle_exclusion(
    body: ExclusionToggle, app_state: AppState = Depends(get_app_state)
) -> ExclusionToggleResult:
    """Exclude a date, or include it again if it is already excluded."""
    excluded = await app_state.toggle_exclusion(body.date)
    return ExclusionToggleResult(date=body.date, excluded=excluded)


@router.put("/excluded-dates/{day}/comment")
async def put_exclusion_comment(
    day: date, body: CommentUpdate, app_state: AppState = Depends(get_app_state)
) -> dict[str, Any]:
    """Set the comment of an excluded date."""
    try:
        entry: ExcludedDate = await app_state.update_exclusion_comment(day, body.comment)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Date is not excluded: {day}") from e
    return _dump(entry)


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def post_task(body: TaskCreate, app_state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    """Create a task."""
    try:
        task: Task = await app_state.add_task(body.text, body.due_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return _dump(task)


@router.post("/tasks/{task_id}/toggle")
async def post_toggle_task(task_id: str, app_state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    """Flip a task's completed flag."""
    try:
        task = await app_state.toggle_task(task_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task not found: {task_id}") from e
    return _dump(task)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, app_state: AppState = Depends(get_app_state)) -> None:
    """Delete a task."""
    try:
        await app_state.delete_task(task_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task not found: {task_id}") from e


@router.post("/reset")
async def post_reset(body: ResetRequest, app_state: AppState = Depends(get_app_state)) -> dict[str, str]:
    """Clear all data; requires explicit confirmation."""
    try:
        await app_state.reset(confirm=body.confirm)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return {"status": "reset"}


@router.get("/sync-status")
async def get_sync_status(app_state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    """Return the passive remote sync status."""
    sync_status: SyncStatus = app_state.sync.status
    return _dump(sync_status)
