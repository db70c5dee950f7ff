"""Pytest configuration and fixtures for unit tests."""

from datetime import date, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from countdown.core.config import settings
from countdown.interface.api_router import router as api_router
from countdown.interface.web_router import router as web_router
from countdown.services.clock import CutoffClock
from countdown.services.state_service import AppState
from countdown.services.sync_service import SyncService
from tests.unit.mocks import FakeRemoteStorage, FixedNow, InMemoryKeyValueStore


# Monday 2024-06-03, mid-morning
MONDAY = date(2024, 6, 3)


@pytest.fixture
def in_memory_store() -> InMemoryKeyValueStore:
    """Provides a fresh InMemoryKeyValueStore for each test."""
    return InMemoryKeyValueStore()


@pytest.fixture
def berlin_timezone(monkeypatch: pytest.MonkeyPatch) -> str:
    """Read offset timestamps in a zone two hours ahead of UTC in summer."""
    monkeypatch.setattr(settings, "timezone", "Europe/Berlin")
    return "Europe/Berlin"


@pytest.fixture
def fixed_now() -> FixedNow:
    """Wall clock pinned to Monday 2024-06-03 10:00."""
    return FixedNow(datetime(2024, 6, 3, 10, 0))


@pytest.fixture
def clock(fixed_now: FixedNow) -> CutoffClock:
    return CutoffClock(cutoff_hour=17, now_func=fixed_now)


@pytest.fixture
def remote() -> FakeRemoteStorage:
    return FakeRemoteStorage()


@pytest.fixture
def sync_service(remote: FakeRemoteStorage) -> SyncService:
    """Sync service without a scheduler: saves stay pending until flushed."""
    return SyncService(remote=remote, scheduler=None, debounce_seconds=1.5)


@pytest.fixture
def app_state(in_memory_store: InMemoryKeyValueStore, sync_service: SyncService, clock: CutoffClock) -> AppState:
    return AppState(store=in_memory_store, sync=sync_service, clock=clock)


@pytest.fixture
def client(app_state: AppState) -> TestClient:
    """Create test client with both routers and a preloaded AppState."""
    test_app = FastAPI()
    test_app.include_router(api_router)
    test_app.include_router(web_router)
    test_app.state.app_state = app_state
    return TestClient(test_app)
