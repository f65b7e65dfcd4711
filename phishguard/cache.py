"""TTL-bound verdict cache for PhishGuard.

Remembers combined (remote-backed) verdicts per URL so that repeat visits do
not spend reputation-API quota. Entries live in the shared key-value store
under the `cache:` prefix:

    {"url": ..., "verdict": {...}, "timestamp": <epoch seconds>}

A newer `set` for the same URL supersedes the old entry. Stale entries are
ignored by `get` and swept by `clear_expired`.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from .errors import StorageError
from .models import Verdict
from .storage.base import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_PREFIX = "cache:"
DEFAULT_TTL_SECONDS = 24 * 60 * 60


class CacheEntry:
    """Represents a cached verdict with timestamp."""

    __slots__ = ("url", "verdict", "timestamp")

    def __init__(self, url: str, verdict: Verdict, timestamp: float):
        self.url = url
        self.verdict = verdict
        self.timestamp = timestamp

    def is_expired(self, ttl_seconds: float, now: float) -> bool:
        """Check if this entry has expired."""
        return now - self.timestamp >= ttl_seconds

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "verdict": self.verdict.to_dict(),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CacheEntry":
        return cls(
            url=data["url"],
            verdict=Verdict.from_dict(data["verdict"]),
            timestamp=float(data["timestamp"]),
        )


class ResultCache:
    """
    Verdict cache keyed by URL.

    Usage:
        cache = ResultCache(store, ttl_seconds=24 * 3600)
        await cache.set(url, verdict)
        cached = await cache.get(url)
        removed = await cache.clear_expired()
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def _make_key(self, url: str) -> str:
        return f"{CACHE_PREFIX}{url}"

    def _decode(self, key: str, raw: Any) -> Optional[CacheEntry]:
        try:
            return CacheEntry.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Discarding unreadable cache entry {key}: {e}")
            return None

    async def get(self, url: str) -> Optional[Verdict]:
        """
        Get cached verdict if it exists and has not expired.

        Expired or unreadable entries are removed on access.
        """
        key = self._make_key(url)
        raw = await self.store.get(key)
        if raw is None:
            return None

        entry = self._decode(key, raw)
        if entry is None or entry.is_expired(self.ttl_seconds, self.clock()):
            await self.store.delete(key)
            return None
        return entry.verdict

    async def set(self, url: str, verdict: Verdict) -> None:
        """Cache a verdict, superseding any previous entry for the URL."""
        entry = CacheEntry(url=url, verdict=verdict, timestamp=self.clock())
        await self.store.set(self._make_key(url), entry.to_dict())

    async def remove(self, url: str) -> None:
        """Delete cached verdict."""
        await self.store.delete(self._make_key(url))

    async def clear_expired(self) -> int:
        """Delete every entry older than the TTL. Returns the number removed."""
        now = self.clock()
        removed = 0
        for key in await self.store.keys(CACHE_PREFIX):
            try:
                raw = await self.store.get(key)
                if raw is None:
                    continue
                entry = self._decode(key, raw)
                if entry is None or entry.is_expired(self.ttl_seconds, now):
                    await self.store.delete(key)
                    removed += 1
            except StorageError as e:
                logger.warning(f"Cache sweep skipped {key}: {e}")

        if removed:
            logger.info(f"Cache sweep removed {removed} expired entries")
        return removed

    async def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        keys = await self.store.keys(CACHE_PREFIX)
        return {
            "entries": len(keys),
            "ttl_seconds": self.ttl_seconds,
        }
