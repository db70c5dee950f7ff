"""Application state holder.

AppState owns the in-memory AppData. Every mutation goes through it: the new
value is written to the local key-value store (one key per field) and handed
to the sync service for a debounced remote save. Local-store failures are
logged and never propagate; the in-memory value stays authoritative.
"""

import logging
from datetime import date
from typing import Any

from countdown.core.config import constants
from countdown.core.db_client import KeyValueStore
from countdown.core.errors import StorageError
from countdown.domain.app_data import AppData
from countdown.domain.excluded_date import ExcludedDate
from countdown.domain.migration import CURRENT_SCHEMA_VERSION, LEGACY_SCHEMA_VERSION
from countdown.domain.task import Task
from countdown.models.service_models import Countdown
from countdown.services import exclusion_service, task_service
from countdown.services.clock import CutoffClock
from countdown.services.day_counter import calendar_days_remaining, working_days_remaining
from countdown.services.sync_service import SyncService


logger = logging.getLogger(__name__)

# AppData wire field -> local storage key
_FIELD_KEYS: dict[str, str] = {
    "targetDate": constants.KEY_TARGET_DATE,
    "excludedDates": constants.KEY_EXCLUDED_DATES,
    "tasks": constants.KEY_TASKS,
}


class AppState:
    """In-memory AppData plus its persistence and sync collaborators."""

    def __init__(self, *, store: KeyValueStore, sync: SyncService, clock: CutoffClock) -> None:
        self.store = store
        self.sync = sync
        self.clock = clock
        self._data = AppData()
        self._countdown: Countdown | None = None
        clock.subscribe(self._on_today_changed)

    @property
    def data(self) -> AppData:
        return self._data

    # Loading

    async def _read_key(self, key: str, default: Any) -> Any:  # noqa: ANN401
        try:
            value = await self.store.get_value(key)
        except StorageError as e:
            logger.error("local_read_failed", extra={"key": key, "error": str(e)})
            return default
        return default if value is None else value

    async def load_local(self) -> AppData:
        """Read the three local entries, migrating legacy shapes once.

        Falls back to the current in-memory value when the stored entries
        cannot be read or validated.
        """
        version = await self._read_key(constants.KEY_SCHEMA_VERSION, None)
        document: dict[str, Any] = {
            "targetDate": await self._read_key(constants.KEY_TARGET_DATE, None),
            "excludedDates": await self._read_key(constants.KEY_EXCLUDED_DATES, []),
            "tasks": await self._read_key(constants.KEY_TASKS, []),
        }
        if version is not None:
            document["schemaVersion"] = version

        try:
            data = AppData.from_payload(document)
        except ValueError as e:
            logger.error("local_state_invalid", extra={"error": str(e)})
            return self._data

        self._data = data
        if (version or LEGACY_SCHEMA_VERSION) < CURRENT_SCHEMA_VERSION:
            logger.info("Upgrading local storage schema", extra={"from_version": version})
            await self._persist_local(*_FIELD_KEYS)

        logger.info(
            "Loaded local state",
            extra={"excluded_dates": len(data.excluded_dates), "tasks": len(data.tasks)},
        )
        return data

    async def load(self) -> AppData:
        """Load local state, then let a remote document, if any, replace it."""
        await self.load_local()

        remote = await self.sync.load()
        if remote is not None:
            self._data = remote
            self._countdown = None
            await self._persist_local(*_FIELD_KEYS)
            logger.info("Replaced local state with remote document")
        return self._data

    # Persistence

    async def _persist_local(self, *fields: str) -> None:
        payload = self._data.to_payload()
        for field in fields:
            key = _FIELD_KEYS[field]
            try:
                if field in payload:
                    await self.store.set_value(key, payload[field])
                else:
                    await self.store.delete_value(key)
            except StorageError as e:
                logger.error("local_write_failed", extra={"key": key, "error": str(e)})

        try:
            await self.store.set_value(constants.KEY_SCHEMA_VERSION, CURRENT_SCHEMA_VERSION)
        except StorageError as e:
            logger.error("local_write_failed", extra={"key": constants.KEY_SCHEMA_VERSION, "error": str(e)})

    async def _commit(self, data: AppData, *fields: str) -> None:
        self._data = data
        self._countdown = None
        await self._persist_local(*fields)
        self.sync.schedule_save(data)

    # Mutations

    async def set_target_date(self, target: date | None) -> None:
        await self._commit(self._data.model_copy(update={"target_date": target}), "targetDate")
        logger.info("Target date set", extra={"target_date": target.isoformat() if target else None})

    async def toggle_exclusion(self, day: date) -> bool:
        """Toggle day's exclusion; return True if the day is now excluded."""
        excluded = exclusion_service.toggle_exclusion(self._data.excluded_dates, day)
        await self._commit(self._data.model_copy(update={"excluded_dates": excluded}), "excludedDates")
        now_excluded = exclusion_service.is_excluded(excluded, day)
        logger.info("Exclusion toggled", extra={"date": day.isoformat(), "excluded": now_excluded})
        return now_excluded

    async def update_exclusion_comment(self, day: date, comment: str) -> ExcludedDate:
        """Set the comment on an excluded day.

        Raises:
            KeyError: If day is not excluded
        """
        excluded = exclusion_service.update_comment(self._data.excluded_dates, day, comment)
        await self._commit(self._data.model_copy(update={"excluded_dates": excluded}), "excludedDates")
        return next(entry for entry in excluded if entry.date == day)

    async def add_task(self, text: str, due_date: date | None = None) -> Task:
        """Add an open task.

        Raises:
            ValueError: If text is blank
        """
        tasks, task = task_service.add_task(self._data.tasks, text, due_date)
        await self._commit(self._data.model_copy(update={"tasks": tasks}), "tasks")
        logger.info("Task added", extra={"task_id": task.id})
        return task

    async def toggle_task(self, task_id: str) -> Task:
        """Flip a task's completed flag.

        Raises:
            KeyError: If the task does not exist
        """
        tasks, task = task_service.toggle_task(self._data.tasks, task_id)
        await self._commit(self._data.model_copy(update={"tasks": tasks}), "tasks")
        return task

    async def delete_task(self, task_id: str) -> None:
        """Delete a task.

        Raises:
            KeyError: If the task does not exist
        """
        tasks = task_service.delete_task(self._data.tasks, task_id)
        await self._commit(self._data.model_copy(update={"tasks": tasks}), "tasks")
        logger.info("Task deleted", extra={"task_id": task_id})

    async def reset(self, *, confirm: bool) -> None:
        """Clear target date, excluded dates and tasks.

        Raises:
            ValueError: If the reset was not explicitly confirmed
        """
        if not confirm:
            raise ValueError("Reset requires explicit confirmation")
        await self._commit(AppData(), *_FIELD_KEYS)
        logger.warning("All data reset")

    # Derived values

    def countdown(self) -> Countdown:
        """Return calendar and working days remaining as of effective today."""
        today = self.clock.today()
        if self._countdown is not None and self._countdown.today == today:
            return self._countdown

        target = self._data.target_date
        self._countdown = Countdown(
            today=today,
            target_date=target,
            calendar_days=calendar_days_remaining(target, today),
            working_days=working_days_remaining(target, today, self._data.excluded_keys()),
        )
        return self._countdown

    async def _on_today_changed(self, today: date) -> None:
        self._countdown = None
        countdown = self.countdown()
        logger.info(
            "Countdown recomputed for new day",
            extra={
                "today": today.isoformat(),
                "calendar_days": countdown.calendar_days,
                "working_days": countdown.working_days,
            },
        )
