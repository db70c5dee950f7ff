"""Server-rendered countdown page and its form endpoints."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Form, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from countdown.core.config import constants
from countdown.domain.dates import parse_calendar_date
from countdown.interface.dependencies import get_app_state
from countdown.services import exclusion_service, task_service
from countdown.services.day_counter import days_until
from countdown.services.state_service import AppState


logger = logging.getLogger(__name__)

router = APIRouter(tags=["web"])

templates = Jinja2Templates(directory=str(constants.TEMPLATES_DIR))


def _redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


def _optional_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return parse_calendar_date(value)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.get("/")
async def get_home(request: Request, app_state: AppState = Depends(get_app_state)) -> Response:
    """Render the countdown page."""
    data = app_state.data
    countdown = app_state.countdown()
    tasks = [
        {
            "task": task,
            "days_remaining": days_until(task.due_date, countdown.today) if task.due_date else None,
        }
        for task in task_service.sort_tasks(data.tasks)
    ]

    return templates.TemplateResponse(
        request,
        name="index.html",
        context={
            "countdown": countdown,
            "has_target_date": data.target_date is not None,
            "excluded_dates": exclusion_service.sorted_exclusions(data.excluded_dates),
            "tasks": tasks,
            "pending_count": task_service.pending_count(data.tasks),
            "sync_status": app_state.sync.status,
            "sync_enabled": app_state.sync.enabled,
        },
    )


@router.post("/ui/target-date")
async def post_target_date(
    target_date: str | None = Form(None),
    app_state: AppState = Depends(get_app_state),
) -> Response:
    await app_state.set_target_date(_optional_date(target_date))
    return _redirect_home()


@router.post("/ui/excluded-dates/toggle")
async def post_toggle_exclusion(
    day: str = Form(...),
    app_state: AppState = Depends(get_app_state),
) -> Response:
    parsed = _optional_date(day)
    if parsed is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Date is required")
    await app_state.toggle_exclusion(parsed)
    return _redirect_home()


@router.post("/ui/excluded-dates/comment")
async def post_exclusion_comment(
    day: str = Form(...),
    comment: str = Form(""),
    app_state: AppState = Depends(get_app_state),
) -> Response:
    parsed = _optional_date(day)
    if parsed is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Date is required")
    try:
        await app_state.update_exclusion_comment(parsed, comment)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Date is not excluded: {day}") from e
    return _redirect_home()


@router.post("/ui/tasks")
async def post_task(
    text: str = Form(""),
    due_date: str | None = Form(None),
    app_state: AppState = Depends(get_app_state),
) -> Response:
    if not text.strip():
        logger.info("Ignoring blank task submission")
        return _redirect_home()
    await app_state.add_task(text, _optional_date(due_date))
    return _redirect_home()


@router.post("/ui/tasks/{task_id}/toggle")
async def post_toggle_task(task_id: str, app_state: AppState = Depends(get_app_state)) -> Response:
    try:
        await app_state.toggle_task(task_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task not found: {task_id}") from e
    return _redirect_home()


@router.post("/ui/tasks/{task_id}/delete")
async def post_delete_task(task_id: str, app_state: AppState = Depends(get_app_state)) -> Response:
    try:
        await app_state.delete_task(task_id)
    except KeyError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task not found: {task_id}") from e
    return _redirect_home()


@router.post("/ui/reset")
async def post_reset(
    confirm: str | None = Form(None),
    app_state: AppState = Depends(get_app_state),
) -> Response:
    """Clear everything; the form's confirmation checkbox must be ticked."""
    if confirm != "yes":
        logger.info("Reset submitted without confirmation, nothing cleared")
        return _redirect_home()
    await app_state.reset(confirm=True)
    return _redirect_home()
