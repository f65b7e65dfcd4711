"""Scan history and aggregate statistics."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any, Optional

from ..constants import HISTORY_LIMIT, Status
from .base import KeyValueStore

HISTORY_KEY = "history"
STATS_KEY = "stats"


@dataclass
class Stats:
    """Monotonic scan counters."""

    total_scans: int = 0
    malicious: int = 0
    suspicious: int = 0
    safe: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Stats":
        data = data or {}
        return cls(
            total_scans=int(data.get("total_scans", 0)),
            malicious=int(data.get("malicious", 0)),
            suspicious=int(data.get("suspicious", 0)),
            safe=int(data.get("safe", 0)),
        )

    def to_dict(self) -> dict:
        return asdict(self)


class ActivityLog:
    """History (newest first, bounded) and Stats on top of a key-value store."""

    def __init__(self, store: KeyValueStore, history_limit: int = HISTORY_LIMIT):
        self.store = store
        self.history_limit = history_limit

    async def add_history(self, url: str, domain: str, result: dict) -> None:
        entry = {
            "url": url,
            "domain": domain,
            "result": result,
            "timestamp": time.time(),
        }

        def prepend(history: Any) -> list:
            items = list(history or [])
            items.insert(0, entry)
            return items[: self.history_limit]

        await self.store.update(HISTORY_KEY, prepend, default=[])

    async def get_history(self, limit: int = 50) -> list[dict]:
        history = await self.store.get(HISTORY_KEY, [])
        return list(history or [])[: max(limit, 0)]

    async def clear_history(self) -> None:
        await self.store.update(HISTORY_KEY, lambda _: [], default=[])

    async def record_scan(self, status: Status) -> Stats:
        """Increment total_scans and the counter matching `status`."""
        field_name = Status(status).value

        def increment(current: Any) -> dict:
            stats = Stats.from_dict(current)
            stats.total_scans += 1
            if field_name == Status.MALICIOUS.value:
                stats.malicious += 1
            elif field_name == Status.SUSPICIOUS.value:
                stats.suspicious += 1
            else:
                stats.safe += 1
            return stats.to_dict()

        return Stats.from_dict(await self.store.update(STATS_KEY, increment, default={}))

    async def get_stats(self) -> Stats:
        return Stats.from_dict(await self.store.get(STATS_KEY, {}))
