"""Remote document store contract and provider selection."""

import logging
from typing import Protocol

import httpx

from countdown.core.config import Settings
from countdown.core.db_client import KeyValueStore
from countdown.domain.app_data import AppData
from countdown.interface.firebase_storage import FirebaseStorage
from countdown.interface.gist_storage import GistStorage


logger = logging.getLogger(__name__)


class RemoteStorage(Protocol):
    """Asynchronous load/save of a whole AppData document.

    load() returns None when no document exists; both operations raise on failure.
    """

    name: str

    async def load(self) -> AppData | None: ...

    async def save(self, data: AppData) -> None: ...


class NullRemoteStorage:
    """Remote storage used when sync is disabled."""

    name = "none"

    async def load(self) -> AppData | None:
        return None

    async def save(self, data: AppData) -> None:  # noqa: ARG002
        return None


def build_remote_storage(
    settings: Settings,
    *,
    store: KeyValueStore,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RemoteStorage:
    """Create the single remote storage configured for this deployment.

    Raises:
        ValueError: If the selected provider's credentials are missing
    """
    if settings.sync_provider == "firebase":
        database_url = settings.require_credential("firebase_database_url", "Firebase database URL")
        logger.info("Remote sync enabled", extra={"provider": "firebase", "path": settings.firebase_data_path})
        return FirebaseStorage(
            database_url=database_url,
            data_path=settings.firebase_data_path,
            auth_token=settings.firebase_auth_token,
            transport=transport,
        )

    if settings.sync_provider == "gist":
        token = settings.require_credential("github_token", "GitHub")
        logger.info("Remote sync enabled", extra={"provider": "gist"})
        return GistStorage(
            token=token,
            store=store,
            api_url=settings.github_api_url,
            default_gist_id=settings.github_gist_id,
            transport=transport,
        )

    logger.info("Remote sync disabled")
    return NullRemoteStorage()
