"""In-memory key-value store."""

from __future__ import annotations

import copy
from typing import Any

from .base import KeyValueStore


class MemoryStore(KeyValueStore):
    """Process-local store; values are deep-copied in and out."""

    def __init__(self):
        super().__init__()
        self._data: dict[str, Any] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._data if k.startswith(prefix)]
