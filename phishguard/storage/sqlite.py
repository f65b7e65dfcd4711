"""SQLite-backed key-value store."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from ..errors import StorageError
from .base import KeyValueStore

logger = logging.getLogger(__name__)


class SQLiteStore(KeyValueStore):
    """Async SQLite key-value table with JSON-encoded values."""

    def __init__(self, db_path: Path):
        super().__init__()
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def connect(self):
        """Establish database connection and create tables."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._connection = await aiosqlite.connect(self.db_path)
        except (aiosqlite.Error, OSError) as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e
        self._connection.row_factory = aiosqlite.Row
        # Best-effort because some SQLite builds/settings may reject these pragmas.
        try:
            await self._connection.execute("PRAGMA journal_mode=WAL")
            await self._connection.execute("PRAGMA synchronous=NORMAL")
            await self._connection.execute("PRAGMA busy_timeout=5000")
            await self._connection.commit()
        except aiosqlite.Error as e:
            logger.debug(f"SQLite pragmas rejected: {e}")
        await self._create_tables()

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def close(self):
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _create_tables(self):
        async with self._lock:
            await self._connection.executescript(
                """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );
                """
            )
            await self._connection.commit()

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StorageError("SQLiteStore is not connected")
        return self._connection

    async def get(self, key: str, default: Any = None) -> Any:
        conn = self._require_connection()
        try:
            async with self._lock:
                cursor = await conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Read failed for {key}: {e}") from e
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except ValueError as e:
            raise StorageError(f"Corrupt value for {key}: {e}") from e

    async def set(self, key: str, value: Any) -> None:
        conn = self._require_connection()
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}") from e
        try:
            async with self._lock:
                await conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, payload),
                )
                await conn.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Write failed for {key}: {e}") from e

    async def delete(self, key: str) -> None:
        conn = self._require_connection()
        try:
            async with self._lock:
                await conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                await conn.commit()
        except aiosqlite.Error as e:
            raise StorageError(f"Delete failed for {key}: {e}") from e

    async def keys(self, prefix: str = "") -> list[str]:
        conn = self._require_connection()
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        try:
            async with self._lock:
                cursor = await conn.execute(
                    "SELECT key FROM kv WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
                    (f"{escaped}%",),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StorageError(f"Key scan failed for prefix {prefix!r}: {e}") from e
        # LIKE is case-insensitive for ASCII
        return [row["key"] for row in rows if row["key"].startswith(prefix)]
