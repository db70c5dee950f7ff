"""Tests for the debounced remote sync service."""

import asyncio
import time
from datetime import date
from unittest.mock import MagicMock

import httpx
import pytest
from apscheduler.jobstores.base import JobLookupError
from apscheduler.triggers.date import DateTrigger

from countdown.core.config import constants
from countdown.core.errors import RemoteStorageError
from countdown.core.scheduler import create_scheduler
from countdown.domain.app_data import AppData
from countdown.interface.remote_storage import NullRemoteStorage
from countdown.models.service_models import SyncState
from countdown.services.sync_service import SyncService
from tests.unit.mocks import FakeRemoteStorage, unreachable_remote


FRIDAY = date(2024, 6, 7)


@pytest.fixture
def mock_scheduler() -> MagicMock:
    return MagicMock()


@pytest.mark.unit
class TestScheduleSave:
    def test_registers_debounced_job(self, mock_scheduler: MagicMock) -> None:
        sync = SyncService(remote=FakeRemoteStorage(), scheduler=mock_scheduler, debounce_seconds=1.5)

        sync.schedule_save(AppData(target_date=FRIDAY))

        mock_scheduler.add_job.assert_called_once()
        kwargs = mock_scheduler.add_job.call_args.kwargs
        assert kwargs["id"] == constants.JOB_REMOTE_SAVE
        assert kwargs["replace_existing"] is True
        assert isinstance(kwargs["trigger"], DateTrigger)
        assert mock_scheduler.add_job.call_args.args[0] == sync.flush
        assert kwargs["misfire_grace_time"] is None
        assert kwargs["coalesce"] is True

    async def test_save_still_runs_after_loop_was_blocked(self) -> None:
        remote = FakeRemoteStorage()
        scheduler = create_scheduler()
        scheduler.start()
        try:
            sync = SyncService(remote=remote, scheduler=scheduler, debounce_seconds=0.1)
            sync.schedule_save(AppData(target_date=FRIDAY))

            # hold the event loop well past the run date
            time.sleep(1.5)
            await asyncio.sleep(0.5)
        finally:
            scheduler.shutdown(wait=False)

        assert remote.saved == [AppData(target_date=FRIDAY)]
        assert sync.has_pending_save is False

    def test_each_change_restarts_the_same_timer(self, mock_scheduler: MagicMock) -> None:
        sync = SyncService(remote=FakeRemoteStorage(), scheduler=mock_scheduler)

        sync.schedule_save(AppData())
        sync.schedule_save(AppData(target_date=FRIDAY))

        job_ids = {call.kwargs["id"] for call in mock_scheduler.add_job.call_args_list}
        assert job_ids == {constants.JOB_REMOTE_SAVE}
        assert mock_scheduler.add_job.call_count == 2

    def test_disabled_sync_schedules_nothing(self, mock_scheduler: MagicMock) -> None:
        sync = SyncService(remote=NullRemoteStorage(), scheduler=mock_scheduler)

        sync.schedule_save(AppData(target_date=FRIDAY))

        mock_scheduler.add_job.assert_not_called()
        assert sync.has_pending_save is False
        assert sync.enabled is False

    async def test_latest_snapshot_wins(self) -> None:
        remote = FakeRemoteStorage()
        sync = SyncService(remote=remote)

        sync.schedule_save(AppData())
        sync.schedule_save(AppData(target_date=FRIDAY))
        await sync.flush()

        assert remote.saved == [AppData(target_date=FRIDAY)]
        assert sync.has_pending_save is False

    async def test_snapshot_is_isolated_from_later_mutation(self) -> None:
        remote = FakeRemoteStorage()
        sync = SyncService(remote=remote)
        data = AppData(excluded_dates=[{"date": "2024-06-05"}])

        sync.schedule_save(data)
        data.excluded_dates.clear()
        await sync.flush()

        assert remote.saved[0].excluded_keys() == {"2024-06-05"}

    async def test_flush_without_pending_is_noop(self) -> None:
        remote = FakeRemoteStorage()
        sync = SyncService(remote=remote)

        await sync.flush()

        assert remote.saved == []
        assert sync.status.state is SyncState.IDLE

    def test_cancel_pending_removes_timer(self, mock_scheduler: MagicMock) -> None:
        sync = SyncService(remote=FakeRemoteStorage(), scheduler=mock_scheduler)
        sync.schedule_save(AppData())

        sync.cancel_pending()

        assert sync.has_pending_save is False
        mock_scheduler.remove_job.assert_called_once_with(constants.JOB_REMOTE_SAVE)

    def test_cancel_pending_tolerates_fired_timer(self, mock_scheduler: MagicMock) -> None:
        mock_scheduler.remove_job.side_effect = JobLookupError(constants.JOB_REMOTE_SAVE)
        sync = SyncService(remote=FakeRemoteStorage(), scheduler=mock_scheduler)

        sync.cancel_pending()

        assert sync.has_pending_save is False


@pytest.mark.unit
class TestSaveNow:
    async def test_success_sets_saved(self) -> None:
        remote = FakeRemoteStorage()
        sync = SyncService(remote=remote)

        assert await sync.save_now(AppData(target_date=FRIDAY)) is True

        assert sync.status.state is SyncState.SAVED
        assert sync.status.at is not None

    async def test_failure_sets_error_and_is_not_retried(self) -> None:
        remote = unreachable_remote()
        sync = SyncService(remote=remote)

        sync.schedule_save(AppData(target_date=FRIDAY))
        await sync.flush()

        assert sync.status.state is SyncState.ERROR
        assert "unreachable" in (sync.status.message or "")
        assert sync.has_pending_save is False

    async def test_auth_failure_message(self) -> None:
        remote = FakeRemoteStorage(save_error=RemoteStorageError("GitHub API error: 401", status_code=401))
        sync = SyncService(remote=remote)

        assert await sync.save_now(AppData()) is False
        assert "credentials" in (sync.status.message or "")

    async def test_transport_error_does_not_raise(self) -> None:
        remote = FakeRemoteStorage(save_error=httpx.ConnectError("connection refused"))
        sync = SyncService(remote=remote)

        assert await sync.save_now(AppData()) is False
        assert sync.status.state is SyncState.ERROR


@pytest.mark.unit
class TestLoad:
    async def test_found_document(self) -> None:
        sync = SyncService(remote=FakeRemoteStorage(AppData(target_date=FRIDAY)))

        data = await sync.load()

        assert data is not None
        assert data.target_date == FRIDAY
        assert sync.status.state is SyncState.SAVED

    async def test_absent_document(self) -> None:
        sync = SyncService(remote=FakeRemoteStorage(None))

        assert await sync.load() is None
        assert sync.status.state is SyncState.IDLE
        assert sync.status.message == "No remote data yet"

    async def test_invalid_document_sets_error(self) -> None:
        sync = SyncService(remote=FakeRemoteStorage(load_error=ValueError("Schema version 9 is newer")))

        assert await sync.load() is None
        assert sync.status.state is SyncState.ERROR
        assert "could not be read" in (sync.status.message or "")

    async def test_disabled_sync_skips_remote(self) -> None:
        sync = SyncService(remote=NullRemoteStorage())

        assert await sync.load() is None
        assert sync.status.state is SyncState.IDLE
