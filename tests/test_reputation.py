"""Tests for the VirusTotal reputation client."""

import base64

import aiohttp
import pytest

from phishguard.errors import RemoteLookupError
from phishguard.intel.reputation import (
    ReputationClient,
    parse_stats,
    standalone_status,
    url_identifier,
)

BASE = "https://vt.test/api/v3"


class _FakeResponse:
    def __init__(self, status: int, payload: dict | str):
        self.status = status
        self._payload = payload

    async def json(self):
        if not isinstance(self._payload, dict):
            raise ValueError("Response payload is not JSON")
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeSession:
    """Routes requests through `handler(method, url) -> (status, payload)`."""

    def __init__(self, handler):
        self._handler = handler
        self.calls: list[tuple[str, str]] = []
        self.headers: list[dict] = []
        self.post_data: list[dict] = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append(("GET", url))
        self.headers.append(headers or {})
        return _FakeResponse(*self._handler("GET", url))

    def post(self, url, headers=None, data=None, json=None, timeout=None):
        self.calls.append(("POST", url))
        self.headers.append(headers or {})
        self.post_data.append(data or json or {})
        return _FakeResponse(*self._handler("POST", url))

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def _install(monkeypatch, handler) -> _FakeSession:
    session = _FakeSession(handler)
    monkeypatch.setattr(aiohttp, "ClientSession", lambda *args, **kwargs: session)
    return session


def _client() -> ReputationClient:
    return ReputationClient(api_key="test-key", base_url=BASE, poll_delay=0)


def test_url_identifier_is_unpadded_urlsafe_base64():
    url = "http://a.com"
    expected = base64.urlsafe_b64encode(url.encode()).decode().rstrip("=")
    assert url_identifier(url) == expected
    assert "=" not in url_identifier(url)


def test_standalone_status_thresholds():
    assert standalone_status(0, 0) == "safe"
    assert standalone_status(0, 3) == "safe"
    assert standalone_status(0, 4) == "suspicious"
    assert standalone_status(1, 0) == "suspicious"
    assert standalone_status(5, 0) == "suspicious"
    assert standalone_status(6, 0) == "malicious"


def test_parse_stats_normalizes_score():
    result = parse_stats({"malicious": 6, "suspicious": 1, "harmless": 60, "undetected": 3})
    assert result.total_engines == 70
    assert result.score == 10
    assert result.detections == 7
    assert result.status == "malicious"

    assert parse_stats({}).score == 0


def test_result_to_dict():
    result = parse_stats({"malicious": 2, "suspicious": 1, "harmless": 7}, analysis_id="an-9")
    assert result.to_dict() == {
        "status": "suspicious",
        "score": 30,
        "malicious": 2,
        "suspicious": 1,
        "detections": 3,
        "total_engines": 10,
        "confidence": 1.0,
        "analysis_id": "an-9",
    }


@pytest.mark.asyncio
async def test_lookup_uses_existing_report(monkeypatch):
    url = "https://phish.example/login"

    def handler(method, endpoint):
        assert endpoint == f"{BASE}/urls/{url_identifier(url)}"
        return 200, {
            "data": {
                "attributes": {
                    "last_analysis_stats": {"malicious": 9, "suspicious": 1, "harmless": 10}
                }
            }
        }

    session = _install(monkeypatch, handler)
    result = await _client().lookup(url)

    assert result.score == 50
    assert result.malicious_count == 9
    assert result.status == "malicious"
    assert session.calls == [("GET", f"{BASE}/urls/{url_identifier(url)}")]
    assert session.headers[0] == {"x-apikey": "test-key"}


@pytest.mark.asyncio
async def test_lookup_submits_unknown_url_and_polls(monkeypatch):
    url = "https://new.example/"

    def handler(method, endpoint):
        if method == "GET" and "/urls/" in endpoint:
            return 404, {"error": {"code": "NotFoundError"}}
        if method == "POST":
            return 200, {"data": {"id": "an-1"}}
        assert endpoint == f"{BASE}/analyses/an-1"
        return 200, {
            "data": {
                "attributes": {
                    "status": "completed",
                    "stats": {"malicious": 0, "suspicious": 0, "harmless": 10},
                }
            }
        }

    session = _install(monkeypatch, handler)
    result = await _client().lookup(url)

    assert [c[0] for c in session.calls] == ["GET", "POST", "GET"]
    assert session.post_data == [{"url": url}]
    assert result.status == "safe"
    assert result.score == 0
    assert result.analysis_id == "an-1"
    assert not result.pending


@pytest.mark.asyncio
async def test_lookup_reports_queued_analysis_as_pending(monkeypatch):
    def handler(method, endpoint):
        if method == "GET" and "/urls/" in endpoint:
            return 404, {}
        if method == "POST":
            return 200, {"data": {"id": "an-2"}}
        return 200, {"data": {"attributes": {"status": "queued", "stats": {}}}}

    _install(monkeypatch, handler)
    result = await _client().lookup("https://slow.example/")

    assert result.pending
    assert result.score == 50
    assert result.confidence == 0.1


@pytest.mark.asyncio
async def test_lookup_raises_on_http_error(monkeypatch):
    _install(
        monkeypatch,
        lambda method, endpoint: (401, {"error": {"code": "WrongCredentialsError", "message": "bad key"}}),
    )

    with pytest.raises(RemoteLookupError) as exc_info:
        await _client().lookup("https://example.com/")
    assert exc_info.value.status_code == 401
    assert "bad key" in str(exc_info.value)


@pytest.mark.asyncio
async def test_lookup_raises_on_failed_submission(monkeypatch):
    def handler(method, endpoint):
        if method == "POST":
            return 429, "quota"
        return 404, {}

    _install(monkeypatch, handler)
    with pytest.raises(RemoteLookupError) as exc_info:
        await _client().lookup("https://example.com/")
    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_lookup_wraps_connection_errors(monkeypatch):
    def handler(method, endpoint):
        raise aiohttp.ClientConnectionError("connection refused")

    _install(monkeypatch, handler)
    with pytest.raises(RemoteLookupError):
        await _client().lookup("https://example.com/")


@pytest.mark.asyncio
async def test_lookup_wraps_malformed_payload(monkeypatch):
    _install(monkeypatch, lambda method, endpoint: (200, {"data": {}}))
    with pytest.raises(RemoteLookupError):
        await _client().lookup("https://example.com/")


@pytest.mark.asyncio
async def test_lookup_without_api_key():
    with pytest.raises(RemoteLookupError):
        await ReputationClient(api_key="").lookup("https://example.com/")
