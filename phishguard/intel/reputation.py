"""
Remote URL reputation via the VirusTotal v3 API.

Lookup flow for a URL:
- Fetch the existing URL report (`GET /urls/{id}`).
- If VirusTotal has never seen the URL, submit it (`POST /urls`), wait once
  for a fixed delay and poll the analysis (`GET /analyses/{id}`).
- An analysis that is still queued after that single wait is reported as
  pending rather than as an error.

Free tier: 4 req/min, 500 req/day. Admission control lives in the caller
(see `RateLimiter`); this client never retries.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp

from ..errors import RemoteLookupError

logger = logging.getLogger(__name__)

VIRUSTOTAL_BASE_URL = "https://www.virustotal.com/api/v3"

PENDING_SCORE = 50
PENDING_CONFIDENCE = 0.1

# Standalone thresholds on raw engine counts
MALICIOUS_ENGINE_THRESHOLD = 5
SUSPICIOUS_ENGINE_THRESHOLD = 3


@dataclass
class ReputationResult:
    """Per-engine detection summary for one URL."""

    status: str = "safe"  # safe, suspicious, malicious, pending
    score: int = 0
    malicious_count: int = 0
    suspicious_count: int = 0
    total_engines: int = 0
    confidence: float = 1.0
    analysis_id: Optional[str] = None

    @property
    def detections(self) -> int:
        return self.malicious_count + self.suspicious_count

    @property
    def pending(self) -> bool:
        return self.status == "pending"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "score": self.score,
            "malicious": self.malicious_count,
            "suspicious": self.suspicious_count,
            "detections": self.detections,
            "total_engines": self.total_engines,
            "confidence": self.confidence,
            "analysis_id": self.analysis_id,
        }


def url_identifier(url: str) -> str:
    """VirusTotal URL id: unpadded URL-safe base64 of the URL."""
    return base64.urlsafe_b64encode(url.encode()).decode().rstrip("=")


def standalone_status(malicious: int, suspicious: int) -> str:
    """
    Status for direct queries, based on raw engine counts.

    Stricter than the orchestrator's normalized thresholds: a single
    malicious engine already makes a URL suspicious.
    """
    if malicious > MALICIOUS_ENGINE_THRESHOLD:
        return "malicious"
    if malicious > 0 or suspicious > SUSPICIOUS_ENGINE_THRESHOLD:
        return "suspicious"
    return "safe"


def parse_stats(stats: dict, analysis_id: Optional[str] = None) -> ReputationResult:
    """Build a result from a VirusTotal `stats` / `last_analysis_stats` mapping."""
    malicious = int(stats.get("malicious", 0) or 0)
    suspicious = int(stats.get("suspicious", 0) or 0)
    total = sum(int(v or 0) for v in stats.values() if isinstance(v, (int, float)))
    score = round(100 * (malicious + suspicious) / total) if total > 0 else 0

    return ReputationResult(
        status=standalone_status(malicious, suspicious),
        score=score,
        malicious_count=malicious,
        suspicious_count=suspicious,
        total_engines=total,
        analysis_id=analysis_id,
    )


def pending_result(analysis_id: Optional[str] = None) -> ReputationResult:
    return ReputationResult(
        status="pending",
        score=PENDING_SCORE,
        confidence=PENDING_CONFIDENCE,
        analysis_id=analysis_id,
    )


class ReputationClient:
    """Queries VirusTotal for URL reputation."""

    def __init__(
        self,
        api_key: str,
        base_url: str = VIRUSTOTAL_BASE_URL,
        poll_delay: float = 5.0,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_delay = poll_delay
        self.timeout = timeout

    @property
    def _headers(self) -> dict:
        return {"x-apikey": self.api_key}

    @property
    def _client_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.timeout)

    async def lookup(self, url: str) -> ReputationResult:
        """
        Return the reputation of `url`.

        Raises RemoteLookupError on network failure, timeout or any
        non-success response.
        """
        if not self.api_key:
            raise RemoteLookupError("No API key configured")

        try:
            async with aiohttp.ClientSession() as session:
                report = await self._get_url_report(session, url)
                if report is not None:
                    return report

                analysis_id = await self._submit_url(session, url)
                logger.debug(f"VirusTotal: submitted {url} (analysis {analysis_id})")

                # Single fixed wait, not a retry loop
                await asyncio.sleep(self.poll_delay)
                return await self._get_analysis(session, analysis_id)

        except asyncio.TimeoutError as e:
            raise RemoteLookupError(f"Timeout querying {url}") from e
        except aiohttp.ClientError as e:
            raise RemoteLookupError(str(e) or e.__class__.__name__) from e
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteLookupError(f"Malformed response: {e}") from e

    async def _get_url_report(self, session, url: str) -> Optional[ReputationResult]:
        """Existing report, or None if VirusTotal has never seen the URL."""
        endpoint = f"{self.base_url}/urls/{url_identifier(url)}"
        async with session.get(endpoint, headers=self._headers, timeout=self._client_timeout) as resp:
            if resp.status == 404:
                return None
            if resp.status != 200:
                raise RemoteLookupError(await _error_message(resp), status_code=resp.status)
            data = await resp.json()

        attrs = data["data"]["attributes"]
        stats = attrs.get("last_analysis_stats") or attrs.get("stats") or {}
        result = parse_stats(stats)
        logger.debug(
            f"VirusTotal: {url} = {result.malicious_count}/{result.total_engines} malicious"
        )
        return result

    async def _submit_url(self, session, url: str) -> str:
        """Submit a URL for analysis and return the analysis id."""
        endpoint = f"{self.base_url}/urls"
        async with session.post(
            endpoint,
            headers=self._headers,
            data={"url": url},
            timeout=self._client_timeout,
        ) as resp:
            if resp.status != 200:
                raise RemoteLookupError(
                    f"Failed to submit URL: {await _error_message(resp)}",
                    status_code=resp.status,
                )
            data = await resp.json()
        return data["data"]["id"]

    async def _get_analysis(self, session, analysis_id: str) -> ReputationResult:
        endpoint = f"{self.base_url}/analyses/{analysis_id}"
        async with session.get(endpoint, headers=self._headers, timeout=self._client_timeout) as resp:
            if resp.status == 404:
                return pending_result(analysis_id)
            if resp.status != 200:
                raise RemoteLookupError(await _error_message(resp), status_code=resp.status)
            data = await resp.json()

        attrs = data["data"]["attributes"]
        if attrs.get("status", "completed") != "completed":
            logger.debug(f"VirusTotal: analysis {analysis_id} still {attrs.get('status')}")
            return pending_result(analysis_id)
        return parse_stats(attrs.get("stats") or {}, analysis_id=analysis_id)


async def _error_message(resp) -> str:
    """Best-effort error text from a VirusTotal error body."""
    try:
        body = await resp.json()
        error = body.get("error") or {}
        return error.get("message") or error.get("code") or f"HTTP {resp.status}"
    except Exception:
        return f"HTTP {resp.status}"
