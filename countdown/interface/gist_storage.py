"""GitHub Gist storage for the AppData document.

The document lives in a single private gist file. The gist ID is remembered in
the local key-value store after the first save, so later loads and saves
address the same gist.
"""

import json
import logging
from typing import Any

import httpx

from countdown.core.config import constants
from countdown.core.db_client import KeyValueStore
from countdown.core.errors import RemoteStorageError
from countdown.domain.app_data import AppData


logger = logging.getLogger(__name__)


class GistStorage:
    """Loads and saves AppData as ``countdown-data.json`` in a gist."""

    name = "gist"

    def __init__(
        self,
        *,
        token: str,
        store: KeyValueStore,
        api_url: str = "https://api.github.com",
        default_gist_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._store = store
        self._api_url = api_url.rstrip("/")
        self._default_gist_id = default_gist_id
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self._token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=constants.API_TIMEOUT_SECONDS,
            headers=self._headers(),
            transport=self._transport,
        )

    async def get_gist_id(self) -> str | None:
        """Return the remembered gist ID, falling back to the configured one."""
        stored = await self._store.get_value(constants.KEY_GIST_ID)
        return stored or self._default_gist_id

    async def load(self) -> AppData | None:
        """Fetch the document; None when no token, no gist or no data file."""
        if not self._token:
            return None

        gist_id = await self.get_gist_id()
        if not gist_id:
            logger.info("No gist ID known yet, skipping load")
            return None

        async with self._client() as client:
            response = await client.get(f"{self._api_url}/gists/{gist_id}")

            if response.status_code == constants.HTTP_NOT_FOUND:
                logger.warning("Gist not found, forgetting stored gist ID", extra={"gist_id": gist_id})
                await self._store.delete_value(constants.KEY_GIST_ID)
                return None
            if not response.is_success:
                raise RemoteStorageError(
                    f"GitHub API error: {response.status_code} - {response.text}", status_code=response.status_code
                )

            file = response.json().get("files", {}).get(constants.GIST_FILENAME)
            if not file:
                logger.info("Gist has no data file", extra={"gist_id": gist_id})
                return None

            content = file.get("content")
            if file.get("truncated") and file.get("raw_url"):
                raw = await client.get(file["raw_url"])
                if not raw.is_success:
                    raise RemoteStorageError(
                        f"GitHub raw content error: {raw.status_code}", status_code=raw.status_code
                    )
                content = raw.text

        if not content:
            return None
        return AppData.from_payload(json.loads(content))

    async def save(self, data: AppData) -> None:
        """Update the known gist, or create a private one and remember its ID."""
        if not self._token:
            return

        gist_id = await self.get_gist_id()
        body: dict[str, Any] = {
            "files": {
                constants.GIST_FILENAME: {"content": json.dumps(data.to_payload(), indent=2)},
            },
            "description": constants.GIST_DESCRIPTION,
        }

        async with self._client() as client:
            if gist_id:
                response = await client.patch(f"{self._api_url}/gists/{gist_id}", json=body)
            else:
                body["public"] = False
                response = await client.post(f"{self._api_url}/gists", json=body)

        if not response.is_success:
            raise RemoteStorageError(
                f"GitHub API error: {response.status_code} - {response.text}", status_code=response.status_code
            )

        if not gist_id:
            created_id = response.json().get("id")
            if created_id:
                await self._store.set_value(constants.KEY_GIST_ID, created_id)
                logger.info("Created gist for app data", extra={"gist_id": created_id})
        else:
            logger.info("Saved app data to gist", extra={"gist_id": gist_id})
