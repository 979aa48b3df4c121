"""
Base Source Adapter - Abstract interface for every upstream API.

All adapters MUST:
- Issue remote calls only through their RateLimitedClient
- Fan independent calls out concurrently, isolating failures per field
- Never raise from get_all_metrics()
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, ClassVar, Optional

from core.clock import ClockProtocol, SystemClock
from fetchers.base import RateLimitedClient
from fetchers.exceptions import FetchError, FetcherError, NormalizationError
from fetchers.models import FetchResult, MeasuredValue, MetricsRecord, Scalar


logger = logging.getLogger(__name__)


class BaseSourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Each adapter must:
    1. Declare metrics_type - the MetricsRecord subclass it produces
    2. Implement collect() - fetch payloads and build the record

    The template method get_all_metrics() wraps collect() so that an
    unexpected failure yields an all-None record instead of an exception.
    """

    metrics_type: ClassVar[type[MetricsRecord]] = MetricsRecord

    def __init__(
        self,
        client: RateLimitedClient,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._client = client
        self._clock = clock or SystemClock()

    @property
    def name(self) -> str:
        """Unique identifier for this adapter."""
        return self._client.name

    @property
    def client(self) -> RateLimitedClient:
        return self._client

    @abstractmethod
    async def collect(self) -> MetricsRecord:
        """
        Fetch and normalize every metric this adapter provides.

        May raise; get_all_metrics() absorbs it.
        """
        pass

    async def get_all_metrics(self) -> MetricsRecord:
        """
        Collect metrics (main entry point).

        NEVER raises - returns an all-None record on failure.
        """
        try:
            record = await self.collect()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[{self.name}] Metrics collection failed: {e!r}")
            return self.metrics_type.empty()

        resolved = record.resolved_fields()
        logger.info(
            f"[{self.name}] Collected {len(resolved)}/{len(record.field_names())} metrics"
        )
        return record

    # ─────────────────────────────────────────────────────────────
    # Helpers for subclasses
    # ─────────────────────────────────────────────────────────────

    async def gather_fields(self, **calls: Awaitable[Any]) -> dict[str, Any]:
        """
        Await independent calls concurrently.

        A failed call does not cancel its siblings; its slot becomes None.
        """
        names = list(calls)
        results = await asyncio.gather(*calls.values(), return_exceptions=True)

        resolved: dict[str, Any] = {}
        for name, result in zip(names, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                if isinstance(result, FetcherError):
                    logger.warning(f"[{self.name}] {name} unavailable: {result.message}")
                else:
                    logger.warning(f"[{self.name}] {name} unavailable: {result!r}")
                resolved[name] = None
            else:
                resolved[name] = result
        return resolved

    def unwrap(self, result: FetchResult, what: str) -> Any:
        """Payload of a successful result; FetchError otherwise."""
        if not result.success:
            raise FetchError(
                f"{what}: {result.error}",
                provider=self.name,
                status_code=result.status_code,
            )
        if result.data is None:
            raise FetchError(f"{what}: empty response", provider=self.name)
        return result.data

    def dig(self, data: Any, *path: Any) -> Any:
        """Walk nested keys/indexes; NormalizationError if any step is missing."""
        current = data
        for key in path:
            try:
                current = current[key]
            except (KeyError, IndexError, TypeError) as e:
                dotted = ".".join(str(p) for p in path)
                raise NormalizationError(
                    f"Missing field '{dotted}'",
                    provider=self.name,
                    field_name=str(key),
                    raw_data=data,
                    original_error=e,
                ) from e
        return current

    def measured(self, value: Optional[Scalar], confidence: float = 1.0) -> Optional[MeasuredValue]:
        """Wrap a value with provenance; None stays None."""
        if value is None:
            return None
        return MeasuredValue(
            value=value,
            timestamp=self._clock.now(),
            provider=self._client.provider,
            confidence=confidence,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(provider={self.name})>"
