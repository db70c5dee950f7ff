"""Best-effort remote sync with a debounced, coalesced save."""

import contextlib
import logging
from datetime import UTC, datetime, timedelta

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger

from countdown.core.config import constants
from countdown.core.errors import classify_sync_error
from countdown.core.logging import span
from countdown.domain.app_data import AppData
from countdown.interface.remote_storage import RemoteStorage
from countdown.models.service_models import SyncState, SyncStatus


logger = logging.getLogger(__name__)


class SyncService:
    """Loads AppData once at startup and pushes changes after a quiet period.

    Failures are logged and reflected in the status; nothing is retried. Each
    scheduled save replaces the previous pending one, so only the latest
    snapshot is sent.
    """

    def __init__(
        self,
        *,
        remote: RemoteStorage,
        scheduler: BaseScheduler | None = None,
        debounce_seconds: float = 1.5,
    ) -> None:
        self.remote = remote
        self.scheduler = scheduler
        self.debounce_seconds = debounce_seconds
        self._pending: AppData | None = None
        self._status = SyncStatus()

    @property
    def enabled(self) -> bool:
        return self.remote.name != "none"

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def has_pending_save(self) -> bool:
        return self._pending is not None

    def _set_status(self, state: SyncState, message: str | None = None) -> None:
        self._status = SyncStatus(state=state, message=message, at=datetime.now(UTC).isoformat())

    async def load(self) -> AppData | None:
        """Fetch the remote document; None if absent, disabled or failed."""
        if not self.enabled:
            return None

        self._set_status(SyncState.LOADING)
        try:
            with span("sync_service.load"):
                data = await self.remote.load()
        except Exception as e:
            category, message = classify_sync_error(e)
            logger.error(
                "remote_load_failed",
                extra={"provider": self.remote.name, "category": category.value, "error": str(e)},
            )
            self._set_status(SyncState.ERROR, message)
            return None

        if data is None:
            self._set_status(SyncState.IDLE, "No remote data yet")
        else:
            self._set_status(SyncState.SAVED, "Loaded from remote")
        logger.info("remote_load_complete", extra={"provider": self.remote.name, "found": data is not None})
        return data

    def schedule_save(self, data: AppData) -> None:
        """Queue data for saving once no further change arrives within the debounce window."""
        if not self.enabled:
            return

        self._pending = data.model_copy(deep=True)

        if self.scheduler is None:
            logger.debug("No scheduler attached, save stays pending until flushed")
            return

        self.scheduler.add_job(
            self.flush,
            trigger=DateTrigger(run_date=datetime.now(UTC) + timedelta(seconds=self.debounce_seconds)),
            id=constants.JOB_REMOTE_SAVE,
            name="Save App Data To Remote",
            replace_existing=True,
            misfire_grace_time=None,
            coalesce=True,
        )

    async def flush(self) -> None:
        """Send the pending snapshot, if any."""
        data, self._pending = self._pending, None
        if data is None:
            return
        await self.save_now(data)

    async def save_now(self, data: AppData) -> bool:
        """Save immediately; return False on failure without raising."""
        self._set_status(SyncState.SAVING)
        try:
            with span("sync_service.save"):
                await self.remote.save(data)
        except Exception as e:
            category, message = classify_sync_error(e)
            logger.error(
                "remote_save_failed",
                extra={"provider": self.remote.name, "category": category.value, "error": str(e)},
            )
            self._set_status(SyncState.ERROR, message)
            return False

        self._set_status(SyncState.SAVED)
        logger.info("remote_save_complete", extra={"provider": self.remote.name})
        return True

    def cancel_pending(self) -> None:
        """Drop the pending save and its timer."""
        self._pending = None
        if self.scheduler is None:
            return
        with contextlib.suppress(JobLookupError):
            self.scheduler.remove_job(constants.JOB_REMOTE_SAVE)
