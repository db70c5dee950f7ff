"""Firebase Realtime Database storage over its REST API."""

import logging

import httpx

from countdown.core.config import constants
from countdown.core.errors import RemoteStorageError
from countdown.domain.app_data import AppData


logger = logging.getLogger(__name__)


class FirebaseStorage:
    """Stores the AppData document at a single database path."""

    name = "firebase"

    def __init__(
        self,
        *,
        database_url: str,
        data_path: str,
        auth_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{database_url.rstrip('/')}/{data_path.strip('/')}.json"
        self._auth_token = auth_token
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    def _params(self) -> dict[str, str]:
        return {"auth": self._auth_token} if self._auth_token else {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS, transport=self._transport)

    async def load(self) -> AppData | None:
        """Fetch the document; None when nothing is stored at the path."""
        async with self._client() as client:
            response = await client.get(self._url, params=self._params())

        if not response.is_success:
            raise RemoteStorageError(
                f"Firebase returned status {response.status_code}", status_code=response.status_code
            )

        payload = response.json()
        if payload is None:
            logger.info("No document stored in Firebase", extra={"url": self._url})
            return None

        return AppData.from_payload(payload)

    async def save(self, data: AppData) -> None:
        """Replace the document at the path."""
        async with self._client() as client:
            response = await client.put(self._url, params=self._params(), json=data.to_payload())

        if not response.is_success:
            raise RemoteStorageError(
                f"Firebase returned status {response.status_code}", status_code=response.status_code
            )

        logger.info("Saved document to Firebase", extra={"url": self._url})
