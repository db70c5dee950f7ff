"""countdown - days and working days left until a target date."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from countdown.core.config import Settings, settings
from countdown.core.db_client import SQLiteKeyValueStore
from countdown.core.logging import configure_logfire, instrument_fastapi
from countdown.core.scheduler import create_scheduler, start_scheduler, stop_scheduler
from countdown.interface.api_router import router as api_router
from countdown.interface.remote_storage import NullRemoteStorage, RemoteStorage, build_remote_storage
from countdown.interface.web_router import router as web_router
from countdown.services.clock import CutoffClock
from countdown.services.state_service import AppState
from countdown.services.sync_service import SyncService


logger = logging.getLogger(__name__)


def select_remote_storage(app_settings: Settings, store: SQLiteKeyValueStore) -> RemoteStorage:
    """Build the configured remote storage, degrading to local-only on bad configuration."""
    try:
        return build_remote_storage(app_settings, store=store)
    except ValueError as e:
        logger.error(
            "startup_validation",
            extra={"service": app_settings.sync_provider, "status": "failed", "error": str(e)},
        )
        logger.warning("Remote sync disabled, running local-only")
        return NullRemoteStorage()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    store = SQLiteKeyValueStore(db_path=settings.sqlite_db_path)
    scheduler = create_scheduler()
    clock = CutoffClock(cutoff_hour=settings.cutoff_hour, tz_name=settings.timezone)
    sync = SyncService(
        remote=select_remote_storage(settings, store),
        scheduler=scheduler,
        debounce_seconds=settings.save_debounce_seconds,
    )
    app_state = AppState(store=store, sync=sync, clock=clock)

    await app_state.load()
    logger.info("Application state loaded", extra={"today": clock.today().isoformat(), "db_path": str(store.path)})

    start_scheduler(scheduler, clock, check_seconds=settings.clock_check_seconds)
    app.state.app_state = app_state
    yield
    # Shutdown
    if sync.has_pending_save:
        await sync.flush()
    stop_scheduler(scheduler)
    await store.close()


app = FastAPI(
    title="countdown",
    description="Calendar and working days left until a target date",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(api_router)
app.include_router(web_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
