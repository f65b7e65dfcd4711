"""Async key-value storage contract."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class KeyValueStore(ABC):
    """
    Persistent async key-value store with JSON-compatible values.

    `get`, `set` and `delete` are independent per-key operations. `update`
    serializes read-modify-write cycles per key so concurrent classifications
    cannot lose counter increments or history appends.
    """

    def __init__(self):
        self._key_locks: dict[str, asyncio.Lock] = {}

    @abstractmethod
    async def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or `default` if absent."""

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Store `value` under `key`, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove `key` (no-op if absent)."""

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with `prefix`."""

    async def close(self) -> None:
        """Release resources held by the store."""

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._key_locks.get(key)
        if lock is None:
            lock = self._key_locks[key] = asyncio.Lock()
        return lock

    async def update(
        self,
        key: str,
        fn: Callable[[Any], Any],
        default: Optional[Any] = None,
    ) -> Any:
        """
        Atomically replace the value at `key` with `fn(current)`.

        Returns the new value. Writers going through `update` for the same
        key are serialized; plain `set` calls are not.
        """
        async with self._lock_for(key):
            current = await self.get(key, default)
            new_value = fn(current)
            await self.set(key, new_value)
            return new_value
