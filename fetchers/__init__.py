"""
Fetchers Package - Rate-limited data acquisition layer.

Features:
- One RateLimitedClient per provider (min interval + per-call timeout)
- Every failure surfaces as a FetchResult, never an exception
- Adapters normalize provider payloads into typed metrics records
- Independent calls fan out concurrently; a failure nulls only its fields

Quick Start:
    from data_sources import DataSourceProvider
    from fetchers import RateLimitedClient, SolanaRpcAdapter, get_config

    async def solana_metrics():
        provider = DataSourceProvider.SOLANA_RPC
        config = get_config().for_provider(provider)

        async with RateLimitedClient(provider, config) as client:
            adapter = SolanaRpcAdapter(client)

            # Never raises - unavailable metrics are None
            metrics = await adapter.get_all_metrics()

        print(f"Nakamoto: {metrics.nakamoto_coefficient}")
        print(f"Status: {metrics.fetch_status().value}")

Adding New Adapters:
    @dataclass(frozen=True)
    class NewMetrics(MetricsRecord):
        CORE_METRICS = ("validators",)
        validators: Optional[int] = None

    class NewAdapter(BaseSourceAdapter):
        metrics_type = NewMetrics

        async def collect(self) -> NewMetrics: ...
"""

from fetchers.adapter import BaseSourceAdapter
from fetchers.base import RateLimitedClient
from fetchers.config import (
    DEFAULT_PROVIDER_CONFIGS,
    FetcherConfig,
    FetcherSettings,
    get_config,
    set_config,
)
from fetchers.exceptions import (
    ConfigurationError,
    FetchError,
    FetcherError,
    NormalizationError,
)
from fetchers.models import (
    FetchResult,
    FetchStatus,
    MeasuredValue,
    MetricsRecord,
    classify_fetch_status,
)
from fetchers.providers import (
    ADAPTER_CLASSES,
    AptosAdapter,
    AptosMetrics,
    BitnodesAdapter,
    BitnodesMetrics,
    BlockchainInfoAdapter,
    BlockchainPoolMetrics,
    CosmosAdapter,
    CosmosMetrics,
    FilecoinAdapter,
    FilecoinMetrics,
    SolanaMetrics,
    SolanaRpcAdapter,
    SuiAdapter,
    SuiMetrics,
)


__all__ = [
    # Transport
    "RateLimitedClient",
    "BaseSourceAdapter",

    # Config
    "DEFAULT_PROVIDER_CONFIGS",
    "FetcherConfig",
    "FetcherSettings",
    "get_config",
    "set_config",

    # Exceptions
    "ConfigurationError",
    "FetchError",
    "FetcherError",
    "NormalizationError",

    # Models
    "FetchResult",
    "FetchStatus",
    "MeasuredValue",
    "MetricsRecord",
    "classify_fetch_status",

    # Adapters
    "ADAPTER_CLASSES",
    "AptosAdapter",
    "AptosMetrics",
    "BitnodesAdapter",
    "BitnodesMetrics",
    "BlockchainInfoAdapter",
    "BlockchainPoolMetrics",
    "CosmosAdapter",
    "CosmosMetrics",
    "FilecoinAdapter",
    "FilecoinMetrics",
    "SolanaMetrics",
    "SolanaRpcAdapter",
    "SuiAdapter",
    "SuiMetrics",
]
