"""SQLite-backed key-value store holding JSON-serialized values."""

import asyncio
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from countdown.core.config import settings
from countdown.core.errors import StorageError


logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String-keyed store with JSON-serializable values."""

    async def get_value(self, key: str) -> Any | None: ...  # noqa: ANN401

    async def set_value(self, key: str, value: Any) -> None: ...  # noqa: ANN401

    async def delete_value(self, key: str) -> None: ...


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


class SQLiteKeyValueStore:
    """Async key-value store over a single SQLite table.

    Every value is stored as JSON text under its key. The connection is opened
    lazily on first use and must be released with close().
    """

    def __init__(self, *, db_path: str | None = None) -> None:
        self._path = get_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create the connection, creating the schema on first open."""
        if self._conn is not None:
            return self._conn

        async with self._lock:
            # Double-check after acquiring lock
            if self._conn is not None:
                return self._conn

            self._path.parent.mkdir(parents=True, exist_ok=True)

            conn = await aiosqlite.connect(str(self._path))
            await conn.execute("PRAGMA journal_mode = WAL")
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated TEXT NOT NULL
                )
                """
            )
            await conn.commit()
            self._conn = conn

            logger.info("Opened SQLite key-value store", extra={"db_path": str(self._path)})
            return conn

    async def close(self) -> None:
        """Close the connection if it is open."""
        if self._conn is None:
            return

        try:
            await self._conn.close()
            logger.info("Closed SQLite key-value store", extra={"db_path": str(self._path)})
        except Exception as e:
            logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": str(self._path)})
        finally:
            self._conn = None

    async def get_value(self, key: str) -> Any | None:  # noqa: ANN401
        """Return the decoded value for key, or None if the key is absent."""
        try:
            conn = await self._get_connection()
            cursor = await conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
        except (aiosqlite.Error, OSError) as e:
            logger.error("get_value_failed", extra={"key": key, "error": str(e)})
            msg = f"Failed to read {key}: {e}"
            raise StorageError(msg) from e

        if row is None:
            return None

        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            logger.error("get_value_corrupt", extra={"key": key, "error": str(e)})
            msg = f"Stored value for {key} is not valid JSON"
            raise StorageError(msg) from e

    async def set_value(self, key: str, value: Any) -> None:  # noqa: ANN401
        """Serialize value to JSON and store it under key, replacing any previous value."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            msg = f"Value for {key} is not JSON serializable: {e}"
            raise StorageError(msg) from e

        try:
            conn = await self._get_connection()
            await conn.execute(
                """
                INSERT INTO kv_store (key, value, updated) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated = excluded.updated
                """,
                (key, payload, datetime.now(UTC).isoformat()),
            )
            await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            logger.error("set_value_failed", extra={"key": key, "error": str(e)})
            msg = f"Failed to write {key}: {e}"
            raise StorageError(msg) from e

        logger.debug("Stored value", extra={"key": key})

    async def delete_value(self, key: str) -> None:
        """Remove key; removing an absent key is a no-op."""
        try:
            conn = await self._get_connection()
            await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await conn.commit()
        except (aiosqlite.Error, OSError) as e:
            logger.error("delete_value_failed", extra={"key": key, "error": str(e)})
            msg = f"Failed to delete {key}: {e}"
            raise StorageError(msg) from e

        logger.debug("Deleted value", extra={"key": key})
