"""
Rate-Limited Client - Transport for every source adapter.

One instance per provider. The instance:
- Spaces requests by 60 / rate_limit seconds
- Bounds every call with a timeout
- Converts every failure into a FetchResult, never an exception
"""

import asyncio
import itertools
import logging
from typing import Any, Optional

import aiohttp

from core.clock import ClockProtocol, SystemClock
from data_sources.models import DataSourceProvider
from fetchers.config import FetcherConfig
from fetchers.models import FetchResult


logger = logging.getLogger(__name__)


class RateLimitedClient:
    """
    Throttled, timeout-bounded HTTP/JSON-RPC client for one provider.

    The time of the last request is owned by this instance. Sharing an
    instance means sharing its rate budget; separate instances never
    coordinate with each other.

    Usage:
        async with RateLimitedClient(DataSourceProvider.BLOCKCHAIN, config) as client:
            result = await client.request("/pools", params={"timespan": "5days"})
            if result.success:
                pools = result.data
    """

    def __init__(
        self,
        provider: DataSourceProvider,
        config: FetcherConfig,
        session: Optional[aiohttp.ClientSession] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._provider = provider
        self._config = config
        self._session = session
        self._owns_session = session is None
        self._clock = clock or SystemClock()

        # Rate limiting
        self._last_request: Optional[float] = None
        self._throttle_lock = asyncio.Lock()
        self._rpc_ids = itertools.count(1)

        # Stats
        self._request_count = 0
        self._failure_count = 0
        self._last_error: Optional[str] = None

    @property
    def name(self) -> str:
        return self._provider.value

    @property
    def provider(self) -> DataSourceProvider:
        return self._provider

    @property
    def config(self) -> FetcherConfig:
        return self._config

    @property
    def last_request_at(self) -> Optional[float]:
        """Monotonic reading taken when the last request was issued."""
        return self._last_request

    # ─────────────────────────────────────────────────────────────
    # Rate Limiting
    # ─────────────────────────────────────────────────────────────

    async def throttle(self) -> None:
        """Wait out the remainder of the minimum interval, then claim a slot."""
        async with self._throttle_lock:
            min_interval = self._config.min_interval

            if self._last_request is not None:
                elapsed = self._clock.monotonic() - self._last_request
                if elapsed < min_interval:
                    wait = min_interval - elapsed
                    logger.debug(f"[{self.name}] Throttling for {wait:.2f}s")
                    await self._clock.sleep(wait)

            self._last_request = self._clock.monotonic()

    # ─────────────────────────────────────────────────────────────
    # Requests
    # ─────────────────────────────────────────────────────────────

    async def request(
        self,
        endpoint: str = "",
        method: str = "GET",
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> FetchResult:
        """
        Issue one throttled request against the provider base URL.

        Args:
            endpoint: Path appended to the configured base URL
            method: HTTP method
            params: Query parameters
            json_body: JSON payload for POST requests
            headers: Extra headers for this call

        Returns:
            FetchResult; success=False for timeouts, transport errors,
            undecodable bodies and non-2xx statuses
        """
        await self.throttle()

        url = f"{self._config.base_url}{endpoint}"
        self._request_count += 1

        try:
            result = await asyncio.wait_for(
                self._send(method, url, params, json_body, headers),
                timeout=self._config.timeout,
            )
        except asyncio.TimeoutError:
            result = FetchResult.fail(f"Timeout after {self._config.timeout}s")
        except aiohttp.ClientError as e:
            result = FetchResult.fail(f"Connection error: {e}")
        except ValueError as e:
            result = FetchResult.fail(f"Invalid JSON response: {e}")
        except Exception as e:
            logger.error(f"[{self.name}] Unexpected error for {url}: {e!r}")
            result = FetchResult.fail(f"Unexpected error: {e}")

        if not result.success:
            self._failure_count += 1
            self._last_error = result.error
            logger.warning(f"[{self.name}] {method} {url} failed: {result.error}")

        return result

    async def rpc_call(
        self,
        method: str,
        params: Optional[list[Any]] = None,
    ) -> FetchResult:
        """
        JSON-RPC 2.0 call against the base URL.

        Returns:
            FetchResult carrying the `result` member, or a failure with
            the `error.message` reported by the node
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._rpc_ids),
            "method": method,
            "params": list(params or []),
        }

        result = await self.request(
            method="POST",
            json_body=payload,
            headers={"Content-Type": "application/json"},
        )
        if not result.success:
            return result

        body = result.data
        if not isinstance(body, dict):
            return FetchResult.fail(f"Malformed JSON-RPC response for {method}")

        error = body.get("error")
        if error:
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            logger.warning(f"[{self.name}] RPC {method} error: {message}")
            self._failure_count += 1
            self._last_error = message
            return FetchResult.fail(message, status_code=result.status_code)

        return FetchResult.ok(body.get("result"), status_code=result.status_code)

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]],
        json_body: Optional[Any],
        headers: Optional[dict[str, str]],
    ) -> FetchResult:
        session = await self._get_session()

        request_headers = dict(self._config.headers)
        if headers:
            request_headers.update(headers)

        async with session.request(
            method,
            url,
            params=params,
            json=json_body,
            headers=request_headers or None,
        ) as response:
            if not 200 <= response.status < 300:
                return FetchResult.fail(
                    f"HTTP {response.status}: {response.reason}",
                    status_code=response.status,
                )

            # Some providers send JSON as text/plain
            data = await response.json(content_type=None)
            return FetchResult.ok(data, status_code=response.status)

    # ─────────────────────────────────────────────────────────────
    # HTTP Session
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        headers = {
            "Accept": "application/json",
            "User-Agent": "DecentralizationIndex/1.0",
        }
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        return headers

    # ─────────────────────────────────────────────────────────────
    # Stats & Lifecycle
    # ─────────────────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Request counters for this provider."""
        return {
            "provider": self.name,
            "requests": self._request_count,
            "failures": self._failure_count,
            "last_error": self._last_error,
        }

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "RateLimitedClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(provider={self.name}, rate_limit={self._config.rate_limit}/min)>"
