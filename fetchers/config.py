"""
Fetchers - Configuration.

============================================================
PER-PROVIDER TRANSPORT SETTINGS
============================================================

Each provider gets one FetcherConfig:
- base_url
- rate_limit (requests per minute)
- timeout (seconds per call)
- optional api_key and headers

Configuration can be loaded from:
- Default values
- Environment variables (a .env file is honoured)
- YAML config file

Environment variables, per provider (upper-cased name):
- <PROVIDER>_BASE_URL
- <PROVIDER>_RATE_LIMIT
- <PROVIDER>_TIMEOUT
- <PROVIDER>_API_KEY
Global:
- FETCHER_SAMPLE_SIZE

============================================================
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from data_sources.models import DataSourceProvider
from fetchers.exceptions import ConfigurationError


logger = logging.getLogger(__name__)

load_dotenv()


# =============================================================
# SINGLE PROVIDER
# =============================================================


@dataclass(frozen=True)
class FetcherConfig:
    """Transport settings for one provider."""
    base_url: str
    rate_limit: float = 30.0  # requests per minute
    timeout: float = 30.0     # seconds
    api_key: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.rate_limit <= 0:
            raise ConfigurationError(
                f"rate_limit must be positive, got {self.rate_limit}",
                config_key="rate_limit",
            )
        if self.timeout <= 0:
            raise ConfigurationError(
                f"timeout must be positive, got {self.timeout}",
                config_key="timeout",
            )

    @property
    def min_interval(self) -> float:
        """Minimum spacing between requests, in seconds."""
        return 60.0 / self.rate_limit

    def to_dict(self) -> Dict:
        """Convert to dictionary (api_key masked)."""
        return {
            "base_url": self.base_url,
            "rate_limit": self.rate_limit,
            "timeout": self.timeout,
            "api_key": "***" if self.api_key else None,
        }


# =============================================================
# PROVIDER DEFAULTS
# =============================================================


DEFAULT_PROVIDER_CONFIGS: Dict[DataSourceProvider, FetcherConfig] = {
    # Public mainnet-beta allows far more, stay conservative
    DataSourceProvider.SOLANA_RPC: FetcherConfig(
        base_url="https://api.mainnet-beta.solana.com",
        rate_limit=10,
        timeout=30.0,
    ),
    DataSourceProvider.COSMOS_LCD: FetcherConfig(
        base_url="https://rest.cosmos.directory/cosmoshub",
        rate_limit=30,
        timeout=30.0,
    ),
    DataSourceProvider.SUI_RPC: FetcherConfig(
        base_url="https://fullnode.mainnet.sui.io:443",
        rate_limit=30,
        timeout=30.0,
    ),
    DataSourceProvider.APTOS: FetcherConfig(
        base_url="https://api.mainnet.aptoslabs.com/v1",
        rate_limit=30,
        timeout=30.0,
    ),
    DataSourceProvider.FILFOX: FetcherConfig(
        base_url="https://filfox.info/api/v1",
        rate_limit=30,
        timeout=30.0,
    ),
    # No documented limit
    DataSourceProvider.BLOCKCHAIN: FetcherConfig(
        base_url="https://api.blockchain.info",
        rate_limit=30,
        timeout=30.0,
    ),
    # ~50 requests/day on the free tier
    DataSourceProvider.BITNODES: FetcherConfig(
        base_url="https://bitnodes.io",
        rate_limit=3,
        timeout=30.0,
    ),
}


# =============================================================
# MAIN CONFIGURATION
# =============================================================


@dataclass
class FetcherSettings:
    """All provider configs plus sampling settings."""
    providers: Dict[DataSourceProvider, FetcherConfig] = field(
        default_factory=lambda: dict(DEFAULT_PROVIDER_CONFIGS)
    )

    # Per-node detail calls per sampled metric
    sample_size: int = 40

    def for_provider(self, provider: DataSourceProvider) -> FetcherConfig:
        try:
            return self.providers[provider]
        except KeyError:
            raise ConfigurationError(
                f"No fetcher configuration for provider {provider.value}",
                provider=provider.value,
            ) from None

    @classmethod
    def from_env(cls) -> "FetcherSettings":
        """Load configuration from environment variables."""
        settings = cls()

        for provider, base in list(settings.providers.items()):
            prefix = provider.value.upper()
            overrides = {}

            if os.getenv(f"{prefix}_BASE_URL"):
                overrides["base_url"] = os.getenv(f"{prefix}_BASE_URL")
            if os.getenv(f"{prefix}_RATE_LIMIT"):
                overrides["rate_limit"] = float(os.getenv(f"{prefix}_RATE_LIMIT"))
            if os.getenv(f"{prefix}_TIMEOUT"):
                overrides["timeout"] = float(os.getenv(f"{prefix}_TIMEOUT"))
            if os.getenv(f"{prefix}_API_KEY"):
                overrides["api_key"] = os.getenv(f"{prefix}_API_KEY")

            if overrides:
                settings.providers[provider] = replace(base, **overrides)
                logger.debug(f"[{provider.value}] Config overridden from env: {sorted(overrides)}")

        if os.getenv("FETCHER_SAMPLE_SIZE"):
            settings.sample_size = int(os.getenv("FETCHER_SAMPLE_SIZE"))

        return settings

    @classmethod
    def from_yaml(cls, path: Path) -> "FetcherSettings":
        """
        Load configuration from YAML file.

        Expected layout:
            sample_size: 40
            providers:
              bitnodes:
                rate_limit: 3
                timeout: 30
        """
        try:
            import yaml
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}

            settings = cls()

            for name, values in (data.get('providers') or {}).items():
                provider = DataSourceProvider(name)
                base = settings.providers.get(provider)
                if base is None:
                    settings.providers[provider] = FetcherConfig(**values)
                else:
                    settings.providers[provider] = replace(base, **values)

            if 'sample_size' in data:
                settings.sample_size = int(data['sample_size'])

            return settings

        except Exception as e:
            logger.warning(f"Failed to load YAML config from {path}: {e}")
            return cls()

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "providers": {p.value: c.to_dict() for p, c in self.providers.items()},
            "sample_size": self.sample_size,
        }


# =============================================================
# GLOBAL CONFIG SINGLETON
# =============================================================


_default_settings: Optional[FetcherSettings] = None


def get_config() -> FetcherSettings:
    """Get the global fetcher configuration."""
    global _default_settings
    if _default_settings is None:
        _default_settings = FetcherSettings.from_env()
    return _default_settings


def set_config(settings: FetcherSettings) -> None:
    """Set the global fetcher configuration."""
    global _default_settings
    _default_settings = settings
