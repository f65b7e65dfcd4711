"""PhishGuard service: wires the classifier to storage and exposes its actions."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .analyzer.scorer import RiskScorer
from .cache import ResultCache
from .config import Config
from .intel.rate_limiter import RateLimiter
from .intel.reputation import ReputationClient
from .models import Verdict
from .pipeline.classifier import Classifier
from .storage.activity import ActivityLog, Stats
from .storage.base import KeyValueStore
from .storage.lists import ListStore
from .storage.sqlite import SQLiteStore

logger = logging.getLogger(__name__)


class PhishGuardService:
    """
    Long-lived classification service.

    Owns the key-value store, the verdict cache sweep worker and the
    user-editable lists. All request-style actions (analyze, stats, history,
    list edits) go through this class.
    """

    def __init__(
        self,
        config: Config,
        store: Optional[KeyValueStore] = None,
        reputation: Optional[ReputationClient] = None,
    ):
        self.config = config
        self.store = store or SQLiteStore(config.database_path)
        self._owns_store = store is None
        self._running = False
        self._tasks: list[asyncio.Task] = []

        self.activity = ActivityLog(self.store)
        self.lists = ListStore(self.store)
        self.cache = ResultCache(self.store, ttl_seconds=config.cache_ttl_seconds)
        self.rate_limiter = RateLimiter(
            max_requests=config.vt_max_requests,
            window_seconds=config.vt_window_seconds,
        )
        if reputation is None and config.virustotal_api_key:
            reputation = ReputationClient(
                api_key=config.virustotal_api_key,
                poll_delay=config.vt_poll_delay_seconds,
                timeout=config.vt_timeout_seconds,
            )
        self.reputation = reputation
        self.classifier = Classifier(
            scorer=RiskScorer(),
            list_store=self.lists,
            activity=self.activity,
            cache=self.cache,
            reputation=self.reputation,
            rate_limiter=self.rate_limiter,
        )

    async def start(self, sweep: bool = True):
        """Open storage, seed configured lists and start background workers."""
        if self._running:
            return
        if isinstance(self.store, SQLiteStore) and not self.store.is_connected:
            await self.store.connect()
        await self.lists.seed(self.config.whitelist, self.config.blacklist)
        self._running = True

        if sweep:
            self._tasks.append(asyncio.create_task(self._cache_sweep_worker()))
        logger.info(
            "PhishGuard service started (remote lookups %s)",
            "enabled" if self.classifier.remote_enabled else "disabled",
        )

    async def stop(self):
        """Stop workers and close storage."""
        self._running = False
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        if self._owns_store:
            await self.store.close()
        logger.info("PhishGuard service stopped")

    async def __aenter__(self) -> "PhishGuardService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def _cache_sweep_worker(self):
        """Periodically delete expired cache entries."""
        interval = max(self.config.cache_sweep_interval_minutes * 60, 1.0)
        logger.info("Cache sweep worker started")

        while self._running:
            try:
                await self.cache.clear_expired()
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Cache sweep worker error: {e}")
                await asyncio.sleep(60)

        logger.info("Cache sweep worker stopped")

    # Actions

    async def analyze_url(self, url: str) -> Verdict:
        return await self.classifier.classify(url)

    async def get_stats(self) -> Stats:
        return await self.activity.get_stats()

    async def get_history(self, limit: int = 50) -> list[dict]:
        return await self.activity.get_history(limit)

    async def clear_history(self) -> None:
        await self.activity.clear_history()

    async def add_to_whitelist(self, domain: str) -> bool:
        return await self.lists.add("whitelist", domain)

    async def remove_from_whitelist(self, domain: str) -> bool:
        return await self.lists.remove("whitelist", domain)

    async def add_to_blacklist(self, domain: str) -> bool:
        return await self.lists.add("blacklist", domain)

    async def remove_from_blacklist(self, domain: str) -> bool:
        return await self.lists.remove("blacklist", domain)

    async def get_lists(self) -> dict:
        return {
            "whitelist": await self.lists.get("whitelist"),
            "blacklist": await self.lists.get("blacklist"),
        }

    async def clear_expired_cache(self) -> int:
        return await self.cache.clear_expired()

    def status(self) -> dict:
        """Snapshot for the health endpoint."""
        return {
            "status": "ok" if self._running else "stopped",
            "remote_enabled": self.classifier.remote_enabled,
            "rate_limit_in_window": self.rate_limiter.in_window,
            "rate_limit_wait_seconds": round(self.rate_limiter.wait_time(), 1),
        }
