"""Decision orchestrator: turns a URL into a Verdict."""

from __future__ import annotations

import logging
import math
from typing import Optional

from ..analyzer.lists import ListOverrideResolver, ListSet
from ..analyzer.scorer import RiskScorer
from ..cache import ResultCache
from ..constants import (
    INDICATOR_WEIGHT,
    MALICIOUS_THRESHOLD,
    MAX_SCORE,
    REMOTE_WEIGHT,
    SUSPICIOUS_THRESHOLD,
    Reason,
    Status,
)
from ..errors import ParseError, RemoteLookupError, StorageError
from ..intel.rate_limiter import RateLimiter
from ..intel.reputation import ReputationClient
from ..models import Verdict
from ..storage.activity import ActivityLog
from ..storage.lists import ListStore
from ..utils.domains import extract_hostname

logger = logging.getLogger(__name__)


def fuse_scores(indicator_score: int, remote_score: int) -> int:
    """Weighted fusion (0.3 local, 0.7 remote), rounded half up, clamped."""
    weighted = INDICATOR_WEIGHT * indicator_score + REMOTE_WEIGHT * remote_score
    final = math.floor(round(weighted, 6) + 0.5)
    return max(0, min(final, MAX_SCORE))


def indicator_status(score: int) -> Status:
    """Status for a local-only verdict."""
    return Status.SUSPICIOUS if score >= SUSPICIOUS_THRESHOLD else Status.SAFE


class Classifier:
    """
    Sequences list overrides, local scoring and the remote lookup.

    One pass per request, terminal on the first matching branch:
    whitelist > blacklist > trusted domain > strong local indicators >
    no API key > cached combined verdict > rate limit > remote fusion.
    Every non-error verdict is appended to history and counted in stats.
    """

    def __init__(
        self,
        *,
        scorer: Optional[RiskScorer] = None,
        lists: Optional[ListSet] = None,
        list_store: Optional[ListStore] = None,
        activity: Optional[ActivityLog] = None,
        cache: Optional[ResultCache] = None,
        reputation: Optional[ReputationClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self.scorer = scorer or RiskScorer()
        self.lists = lists or ListSet()
        self.list_store = list_store
        self.activity = activity
        self.cache = cache
        self.reputation = reputation
        self.rate_limiter = rate_limiter or RateLimiter()

    @property
    def remote_enabled(self) -> bool:
        return self.reputation is not None and bool(self.reputation.api_key)

    async def classify(self, url: str) -> Verdict:
        """Classify `url`. Never raises; failures become an `error` verdict."""
        try:
            return await self._classify(url)
        except Exception as e:
            logger.error(f"Classification failed for {url}: {e}", exc_info=True)
            return Verdict(status=Status.ERROR, score=0, reason=Reason.INTERNAL_ERROR, error=str(e))

    async def _classify(self, url: str) -> Verdict:
        try:
            domain = extract_hostname(url)
        except ParseError as e:
            logger.info(f"Rejected malformed URL {url!r}: {e.message}")
            return Verdict(status=Status.ERROR, score=0, reason=Reason.INVALID_URL, error=str(e))

        logger.debug(f"Analyzing: {url}")

        resolver = ListOverrideResolver(
            lists=await self._load_lists(),
            trusted_domains=self.scorer.trusted_domains,
        )
        override = resolver.resolve(domain)
        if override is not None:
            verdict = Verdict(status=override.status, score=override.score, reason=override.reason)
            return await self._finish(url, domain, verdict)

        indicator_score = self.scorer.analyze(url).score

        # Clear positives never spend remote quota
        if indicator_score >= MALICIOUS_THRESHOLD:
            verdict = Verdict(
                status=Status.MALICIOUS,
                score=indicator_score,
                reason=Reason.PHISHING_INDICATORS,
                indicator_score=indicator_score,
            )
            return await self._finish(url, domain, verdict)

        if not self.remote_enabled:
            return await self._finish(
                url, domain, self._indicator_verdict(indicator_score, Reason.NO_API_KEY)
            )

        cached = await self._cache_get(url)
        if cached is not None:
            logger.debug(f"Cache hit for {url}")
            return await self._finish(url, domain, cached)

        if not self.rate_limiter.try_acquire():
            logger.info(
                f"Reputation lookup skipped for {domain}: rate limited "
                f"({self.rate_limiter.wait_time():.1f}s until capacity)"
            )
            return await self._finish(
                url, domain, self._indicator_verdict(indicator_score, Reason.RATE_LIMITED)
            )

        try:
            remote = await self.reputation.lookup(url)
        except RemoteLookupError as e:
            logger.warning(f"Reputation lookup failed for {domain}: {e}")
            return await self._finish(
                url, domain, self._indicator_verdict(indicator_score, Reason.REMOTE_UNAVAILABLE)
            )

        final_score = fuse_scores(indicator_score, remote.score)
        verdict = Verdict(
            status=Status.from_score(final_score),
            score=final_score,
            reason=Reason.COMBINED_ANALYSIS,
            indicator_score=indicator_score,
            remote_score=remote.score,
            remote_detections=remote.detections,
        )
        # A pending analysis carries a placeholder score; do not pin it for the TTL
        if not remote.pending:
            await self._cache_set(url, verdict)
        return await self._finish(url, domain, verdict)

    def _indicator_verdict(self, indicator_score: int, reason: Reason) -> Verdict:
        return Verdict(
            status=indicator_status(indicator_score),
            score=indicator_score,
            reason=reason,
            indicator_score=indicator_score,
        )

    async def _load_lists(self) -> ListSet:
        if self.list_store is None:
            return self.lists
        try:
            stored = await self.list_store.load()
        except StorageError as e:
            logger.warning(f"Using configured lists, stored lists unavailable: {e}")
            return self.lists
        return ListSet(
            whitelist=_merge(self.lists.whitelist, stored.whitelist),
            blacklist=_merge(self.lists.blacklist, stored.blacklist),
        )

    async def _cache_get(self, url: str) -> Optional[Verdict]:
        if self.cache is None:
            return None
        try:
            return await self.cache.get(url)
        except StorageError as e:
            logger.warning(f"Cache read failed for {url}: {e}")
            return None

    async def _cache_set(self, url: str, verdict: Verdict) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set(url, verdict)
        except StorageError as e:
            logger.warning(f"Cache write failed for {url}: {e}")

    async def _finish(self, url: str, domain: str, verdict: Verdict) -> Verdict:
        """Record history and stats; persistence failures never hide the verdict."""
        logger.info(f"{domain}: {verdict.status.value} (score {verdict.score}, {verdict.reason.value})")
        if self.activity is None:
            return verdict

        try:
            await self.activity.add_history(url, domain, verdict.to_dict())
        except Exception as e:
            logger.warning(f"Failed to record history for {url}: {e}")
        try:
            await self.activity.record_scan(verdict.status)
        except Exception as e:
            logger.warning(f"Failed to update stats for {url}: {e}")
        return verdict


def _merge(first: tuple[str, ...], second: tuple[str, ...]) -> tuple[str, ...]:
    """Ordered union."""
    return tuple(dict.fromkeys(first + second))
