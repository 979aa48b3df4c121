"""
Rate-Limited Client Tests.

============================================================
PURPOSE
============================================================
Tests for the per-provider transport.

TEST COVERAGE:
- Throttling: minimum interval, per-instance scope, failed calls
- Failure conversion: timeouts, transport errors, non-2xx, bad JSON
- JSON-RPC: envelope, result unwrapping, error member
- Configuration: validation, env overrides

============================================================
"""

import asyncio

import aiohttp
import pytest

from core.clock import MockClock
from data_sources.models import DataSourceProvider
from fetchers.base import RateLimitedClient
from fetchers.config import FetcherConfig, FetcherSettings
from fetchers.exceptions import ConfigurationError


# ============================================================
# FAKE AIOHTTP SESSION
# ============================================================

class FakeResponse:
    """Stands in for aiohttp.ClientResponse inside `async with`."""

    def __init__(self, status=200, payload=None, reason="OK", json_error=None, delay=0.0):
        self.status = status
        self.reason = reason
        self._payload = payload
        self._json_error = json_error
        self._delay = delay

    async def json(self, content_type=None):
        if self._json_error is not None:
            raise self._json_error
        return self._payload

    async def __aenter__(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Replays queued responses; exceptions in the queue are raised."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


def make_client(session, rate_limit=60.0, timeout=5.0, clock=None):
    config = FetcherConfig(
        base_url="https://api.example.org",
        rate_limit=rate_limit,
        timeout=timeout,
    )
    return RateLimitedClient(
        DataSourceProvider.BLOCKCHAIN,
        config,
        session=session,
        clock=clock or MockClock(),
    )


# ============================================================
# THROTTLING
# ============================================================

class TestThrottling:
    """Tests for the minimum inter-request interval."""

    @pytest.mark.asyncio
    async def test_first_request_does_not_wait(self):
        clock = MockClock()
        client = make_client(FakeSession(FakeResponse(payload={})), clock=clock)

        await client.request("/pools")

        assert clock.sleeps == []
        assert client.last_request_at == 0.0

    @pytest.mark.asyncio
    async def test_back_to_back_requests_wait_full_interval(self):
        clock = MockClock()
        session = FakeSession(FakeResponse(payload={}), FakeResponse(payload={}))
        client = make_client(session, rate_limit=60.0, clock=clock)

        await client.request("/a")
        await client.request("/b")

        # 60 requests/minute -> 1 second apart
        assert clock.sleeps == [pytest.approx(1.0)]

    @pytest.mark.asyncio
    async def test_waits_only_the_remainder(self):
        clock = MockClock()
        session = FakeSession(FakeResponse(payload={}), FakeResponse(payload={}))
        client = make_client(session, rate_limit=30.0, clock=clock)

        await client.request("/a")
        clock.advance(0.5)
        await client.request("/b")

        assert clock.sleeps == [pytest.approx(1.5)]

    @pytest.mark.asyncio
    async def test_no_wait_after_interval_elapsed(self):
        clock = MockClock()
        session = FakeSession(FakeResponse(payload={}), FakeResponse(payload={}))
        client = make_client(session, rate_limit=60.0, clock=clock)

        await client.request("/a")
        clock.advance(5)
        await client.request("/b")

        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_failed_call_counts_against_budget(self):
        clock = MockClock()
        session = FakeSession(
            FakeResponse(status=503, reason="Service Unavailable"),
            FakeResponse(payload={}),
        )
        client = make_client(session, rate_limit=60.0, clock=clock)

        first = await client.request("/a")
        await client.request("/b")

        assert first.success is False
        assert clock.sleeps == [pytest.approx(1.0)]

    @pytest.mark.asyncio
    async def test_concurrent_requests_are_spaced(self):
        clock = MockClock()
        session = FakeSession(*(FakeResponse(payload={}) for _ in range(3)))
        client = make_client(session, rate_limit=60.0, clock=clock)

        await asyncio.gather(client.request("/a"), client.request("/b"), client.request("/c"))

        assert len(clock.sleeps) == 2
        assert all(s == pytest.approx(1.0) for s in clock.sleeps)
        assert clock.monotonic() == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_instances_do_not_share_budget(self):
        clock = MockClock()
        first = make_client(FakeSession(FakeResponse(payload={})), clock=clock)
        second = make_client(FakeSession(FakeResponse(payload={})), clock=clock)

        await first.request("/a")
        await second.request("/a")

        assert clock.sleeps == []


# ============================================================
# FAILURE CONVERSION
# ============================================================

class TestFailureConversion:
    """Every failure mode becomes a FetchResult."""

    @pytest.mark.asyncio
    async def test_success_carries_payload_and_status(self):
        client = make_client(FakeSession(FakeResponse(payload={"AntPool": 12})))

        result = await client.request("/pools", params={"timespan": "5days"})

        assert result.success is True
        assert result.data == {"AntPool": 12}
        assert result.status_code == 200

    @pytest.mark.asyncio
    async def test_url_and_params_are_forwarded(self):
        session = FakeSession(FakeResponse(payload={}))
        client = make_client(session)

        await client.request("/pools", params={"timespan": "5days"})

        method, url, kwargs = session.calls[0]
        assert method == "GET"
        assert url == "https://api.example.org/pools"
        assert kwargs["params"] == {"timespan": "5days"}

    @pytest.mark.asyncio
    async def test_non_2xx_becomes_failure(self):
        client = make_client(FakeSession(FakeResponse(status=429, reason="Too Many Requests")))

        result = await client.request("/pools")

        assert result.success is False
        assert result.error == "HTTP 429: Too Many Requests"
        assert result.status_code == 429

    @pytest.mark.asyncio
    async def test_timeout_becomes_failure(self):
        client = make_client(FakeSession(FakeResponse(payload={}, delay=1.0)), timeout=0.05)

        result = await client.request("/slow")

        assert result.success is False
        assert result.error.startswith("Timeout after")

    @pytest.mark.asyncio
    async def test_connection_error_becomes_failure(self):
        client = make_client(FakeSession(aiohttp.ClientConnectionError("refused")))

        result = await client.request("/pools")

        assert result.success is False
        assert result.error.startswith("Connection error")

    @pytest.mark.asyncio
    async def test_invalid_json_becomes_failure(self):
        client = make_client(FakeSession(FakeResponse(json_error=ValueError("Expecting value"))))

        result = await client.request("/pools")

        assert result.success is False
        assert result.error.startswith("Invalid JSON response")

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failure(self):
        client = make_client(FakeSession(RuntimeError("boom")))

        result = await client.request("/pools")

        assert result.success is False
        assert "boom" in result.error

    @pytest.mark.asyncio
    async def test_stats_track_failures(self):
        session = FakeSession(
            FakeResponse(payload={}),
            FakeResponse(status=500, reason="Internal Server Error"),
        )
        client = make_client(session)

        await client.request("/a")
        await client.request("/b")

        stats = client.get_stats()
        assert stats["requests"] == 2
        assert stats["failures"] == 1
        assert stats["last_error"] == "HTTP 500: Internal Server Error"


# ============================================================
# JSON-RPC
# ============================================================

class TestJsonRpc:
    """Tests for rpc_call()."""

    @pytest.mark.asyncio
    async def test_envelope(self):
        session = FakeSession(FakeResponse(payload={"jsonrpc": "2.0", "id": 1, "result": []}))
        client = make_client(session)

        await client.rpc_call("getVoteAccounts", [{"commitment": "finalized"}])

        method, url, kwargs = session.calls[0]
        assert method == "POST"
        assert url == "https://api.example.org"
        assert kwargs["json"]["jsonrpc"] == "2.0"
        assert kwargs["json"]["method"] == "getVoteAccounts"
        assert kwargs["json"]["params"] == [{"commitment": "finalized"}]
        assert "id" in kwargs["json"]

    @pytest.mark.asyncio
    async def test_ids_increase(self):
        session = FakeSession(
            FakeResponse(payload={"result": 1}),
            FakeResponse(payload={"result": 2}),
        )
        client = make_client(session)

        await client.rpc_call("a")
        await client.rpc_call("b")

        assert session.calls[1][2]["json"]["id"] > session.calls[0][2]["json"]["id"]

    @pytest.mark.asyncio
    async def test_result_is_unwrapped(self):
        client = make_client(FakeSession(FakeResponse(payload={"result": {"current": []}})))

        result = await client.rpc_call("getVoteAccounts")

        assert result.success is True
        assert result.data == {"current": []}

    @pytest.mark.asyncio
    async def test_error_member_becomes_failure(self):
        payload = {"error": {"code": -32601, "message": "Method not found"}}
        client = make_client(FakeSession(FakeResponse(payload=payload)))

        result = await client.rpc_call("nope")

        assert result.success is False
        assert result.error == "Method not found"

    @pytest.mark.asyncio
    async def test_transport_failure_passes_through(self):
        client = make_client(FakeSession(FakeResponse(status=502, reason="Bad Gateway")))

        result = await client.rpc_call("getClusterNodes")

        assert result.success is False
        assert result.error == "HTTP 502: Bad Gateway"

    @pytest.mark.asyncio
    async def test_non_object_body_becomes_failure(self):
        client = make_client(FakeSession(FakeResponse(payload=["not", "an", "object"])))

        result = await client.rpc_call("getClusterNodes")

        assert result.success is False


# ============================================================
# CONFIGURATION
# ============================================================

class TestFetcherConfig:
    """Tests for FetcherConfig / FetcherSettings."""

    def test_min_interval(self):
        assert FetcherConfig(base_url="x", rate_limit=3).min_interval == pytest.approx(20.0)

    def test_rejects_non_positive_rate_limit(self):
        with pytest.raises(ConfigurationError):
            FetcherConfig(base_url="x", rate_limit=0)

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ConfigurationError):
            FetcherConfig(base_url="x", timeout=-1)

    def test_api_key_is_masked(self):
        config = FetcherConfig(base_url="x", api_key="secret")
        assert config.to_dict()["api_key"] == "***"

    def test_defaults_cover_every_adapter_provider(self):
        settings = FetcherSettings()
        assert settings.for_provider(DataSourceProvider.BITNODES).rate_limit == 3
        assert settings.sample_size == 40

    def test_unknown_provider_raises(self):
        with pytest.raises(ConfigurationError):
            FetcherSettings().for_provider(DataSourceProvider.GITHUB)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("BITNODES_RATE_LIMIT", "6")
        monkeypatch.setenv("BITNODES_BASE_URL", "https://mirror.example.org")
        monkeypatch.setenv("FETCHER_SAMPLE_SIZE", "10")

        settings = FetcherSettings.from_env()
        bitnodes = settings.for_provider(DataSourceProvider.BITNODES)

        assert bitnodes.rate_limit == 6.0
        assert bitnodes.base_url == "https://mirror.example.org"
        assert settings.sample_size == 10

    def test_yaml_overrides(self, tmp_path):
        path = tmp_path / "fetchers.yaml"
        path.write_text(
            "sample_size: 12\n"
            "providers:\n"
            "  filfox:\n"
            "    timeout: 10\n"
        )

        settings = FetcherSettings.from_yaml(path)

        assert settings.sample_size == 12
        assert settings.for_provider(DataSourceProvider.FILFOX).timeout == 10
        assert settings.for_provider(DataSourceProvider.FILFOX).base_url == "https://filfox.info/api/v1"
