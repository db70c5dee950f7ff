"""Tests for the GitHub Gist adapter."""

import json
from datetime import date

import httpx
import pytest

from countdown.core.config import constants
from countdown.core.errors import RemoteStorageError
from countdown.domain.app_data import AppData
from countdown.interface.gist_storage import GistStorage
from tests.unit.mocks import InMemoryKeyValueStore


API_URL = "https://api.github.test"


def gist_response(content: str | None, *, truncated: bool = False) -> dict:
    files = {}
    if content is not None:
        files[constants.GIST_FILENAME] = {
            "filename": constants.GIST_FILENAME,
            "content": content,
            "truncated": truncated,
            "raw_url": f"{API_URL}/raw/{constants.GIST_FILENAME}",
        }
    return {"id": "gist123", "files": files}


def make_storage(
    handler, store: InMemoryKeyValueStore, *, token: str = "ghp_test", default_gist_id: str | None = None
) -> GistStorage:
    return GistStorage(
        token=token,
        store=store,
        api_url=API_URL,
        default_gist_id=default_gist_id,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestGistLoad:
    async def test_no_gist_id_skips_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        storage = make_storage(handler, InMemoryKeyValueStore())

        assert await storage.load() is None

    async def test_no_token_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        storage = make_storage(handler, InMemoryKeyValueStore({constants.KEY_GIST_ID: "gist123"}), token="")

        assert await storage.load() is None

    async def test_load_document_from_stored_gist(self) -> None:
        requests: list[httpx.Request] = []
        content = json.dumps({"targetDate": "2024-06-07T00:00:00", "excludedDates": [], "tasks": []})

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=gist_response(content))

        storage = make_storage(handler, InMemoryKeyValueStore({constants.KEY_GIST_ID: "gist123"}))

        data = await storage.load()

        assert data is not None
        assert data.target_date == date(2024, 6, 7)
        assert str(requests[0].url) == f"{API_URL}/gists/gist123"
        assert requests[0].headers["Authorization"] == "token ghp_test"
        assert requests[0].headers["Accept"] == "application/vnd.github.v3+json"

    async def test_configured_gist_id_is_fallback(self) -> None:
        urls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            urls.append(str(request.url))
            return httpx.Response(200, json=gist_response(None))

        storage = make_storage(handler, InMemoryKeyValueStore(), default_gist_id="configured")

        assert await storage.load() is None
        assert urls == [f"{API_URL}/gists/configured"]

    async def test_missing_gist_forgets_stored_id(self) -> None:
        store = InMemoryKeyValueStore({constants.KEY_GIST_ID: "deleted"})
        storage = make_storage(lambda request: httpx.Response(404, json={"message": "Not Found"}), store)

        assert await storage.load() is None
        assert store.raw(constants.KEY_GIST_ID) is None

    async def test_truncated_file_fetches_raw_content(self) -> None:
        content = json.dumps({"targetDate": "2024-06-07T00:00:00", "schemaVersion": 2})

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.startswith("/raw/"):
                return httpx.Response(200, text=content)
            return httpx.Response(200, json=gist_response("{\"targ", truncated=True))

        storage = make_storage(handler, InMemoryKeyValueStore({constants.KEY_GIST_ID: "gist123"}))

        data = await storage.load()

        assert data is not None
        assert data.target_date == date(2024, 6, 7)

    async def test_empty_content_returns_none(self) -> None:
        storage = make_storage(
            lambda request: httpx.Response(200, json=gist_response("")),
            InMemoryKeyValueStore({constants.KEY_GIST_ID: "gist123"}),
        )

        assert await storage.load() is None

    async def test_server_error_raises(self) -> None:
        storage = make_storage(
            lambda request: httpx.Response(500, text="boom"),
            InMemoryKeyValueStore({constants.KEY_GIST_ID: "gist123"}),
        )

        with pytest.raises(RemoteStorageError) as exc_info:
            await storage.load()

        assert exc_info.value.status_code == 500


@pytest.mark.unit
class TestGistSave:
    async def test_first_save_creates_private_gist_and_stores_id(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"id": "new-gist"})

        store = InMemoryKeyValueStore()
        storage = make_storage(handler, store)

        await storage.save(AppData(target_date=date(2024, 6, 7)))

        assert requests[0].method == "POST"
        assert str(requests[0].url) == f"{API_URL}/gists"
        body = json.loads(requests[0].content)
        assert body["public"] is False
        assert body["description"] == constants.GIST_DESCRIPTION
        content = body["files"][constants.GIST_FILENAME]["content"]
        assert json.loads(content)["targetDate"] == "2024-06-07T00:00:00"
        assert store.raw(constants.KEY_GIST_ID) == "new-gist"

    async def test_later_save_patches_known_gist(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"id": "gist123"})

        store = InMemoryKeyValueStore({constants.KEY_GIST_ID: "gist123"})
        storage = make_storage(handler, store)

        await storage.save(AppData())

        assert requests[0].method == "PATCH"
        assert str(requests[0].url) == f"{API_URL}/gists/gist123"
        assert "public" not in json.loads(requests[0].content)
        assert store.writes == []

    async def test_save_failure_raises(self) -> None:
        storage = make_storage(
            lambda request: httpx.Response(403, json={"message": "Bad credentials"}),
            InMemoryKeyValueStore(),
        )

        with pytest.raises(RemoteStorageError) as exc_info:
            await storage.save(AppData())

        assert exc_info.value.status_code == 403
