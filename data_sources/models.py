"""
Data Source Models - Declarative criterion-to-provider configuration.

Everything here is immutable: mappings are declared once and resolved
per (criterion, project) at read time.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional


class DataSourceProvider(Enum):
    """Upstream providers of decentralization data."""
    BITNODES = "bitnodes"            # Bitcoin reachable nodes
    ETHERNODES = "ethernodes"        # Ethereum node/client data
    SOLANABEACH = "solanabeach"      # Solana validator explorer
    SOLANA_RPC = "solana_rpc"        # Solana public JSON-RPC
    VALIDATORSAPP = "validatorsapp"  # Solana validators.app
    CHAINSPECT = "chainspect"        # Nakamoto coefficient dashboard
    RATED = "rated"                  # Ethereum operator data
    GITHUB = "github"                # Code contribution data
    SNAPSHOT = "snapshot"            # Governance voting data
    COINGECKO = "coingecko"          # Token/market data
    COINLORE = "coinlore"            # Token supply data
    BLOCKCHAIN = "blockchain"        # Bitcoin pool distribution
    COSMOS_LCD = "cosmos_lcd"        # Cosmos Hub REST
    SUI_RPC = "sui_rpc"              # Sui JSON-RPC
    APTOS = "aptos"                  # Aptos fullnode REST
    FILFOX = "filfox"                # Filecoin explorer
    MANUAL = "manual"                # Curated static input


class UpdateFrequency(Enum):
    """Data freshness requirements."""
    REALTIME = "realtime"
    DAILY = "daily"
    WEEKLY = "weekly"
    STATIC = "static"


@dataclass(frozen=True)
class DataSourceConfig:
    """Configuration for a single data source."""
    provider: DataSourceProvider
    # API endpoint or identifier, may contain {placeholders}
    endpoint: Optional[str] = None
    # Name of the value to extract from the response
    extractor: Optional[str] = None
    # Raw value -> criterion input
    transform: Optional[Callable[[Any], Optional[float]]] = field(default=None, compare=False)
    # Requests per minute
    rate_limit: Optional[int] = None
    requires_auth: bool = False

    @property
    def is_manual(self) -> bool:
        return self.provider == DataSourceProvider.MANUAL

    def format_endpoint(self, **identifiers: str) -> Optional[str]:
        """Fill endpoint placeholders such as {org} or {chainId}."""
        if self.endpoint is None:
            return None
        return self.endpoint.format(**identifiers)

    def apply_transform(self, raw: Any) -> Optional[float]:
        if raw is None:
            return None
        if self.transform is None:
            return raw
        return self.transform(raw)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "provider": self.provider.value,
            "endpoint": self.endpoint,
            "extractor": self.extractor,
            "rate_limit": self.rate_limit,
            "requires_auth": self.requires_auth,
        }


@dataclass(frozen=True)
class CriterionDataMapping:
    """Where one criterion's data comes from."""
    criterion_id: str
    primary: DataSourceConfig
    # Tried in order when the primary yields nothing usable
    fallbacks: tuple[DataSourceConfig, ...] = ()
    update_frequency: UpdateFrequency = UpdateFrequency.WEEKLY
    chain_specific: bool = False

    def source_chain(self) -> tuple[DataSourceConfig, ...]:
        """Primary followed by fallbacks, in the order they should be tried."""
        return (self.primary, *self.fallbacks)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "criterion_id": self.criterion_id,
            "primary": self.primary.to_dict(),
            "fallbacks": [f.to_dict() for f in self.fallbacks],
            "update_frequency": self.update_frequency.value,
            "chain_specific": self.chain_specific,
        }


@dataclass(frozen=True)
class ProjectIdentifiers:
    """Chain-specific identifiers used to fill endpoint placeholders."""
    github_org: Optional[str] = None
    github_repos: tuple[str, ...] = ()
    token_address: Optional[str] = None
    snapshot_space: Optional[str] = None
    chain_id: Optional[str] = None

    def placeholders(self) -> dict[str, str]:
        values = {
            "org": self.github_org,
            "repo": self.github_repos[0] if self.github_repos else None,
            "tokenAddress": self.token_address,
            "space": self.snapshot_space,
            "chainId": self.chain_id,
        }
        return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class ProjectDataSources:
    """Per-project overrides of the primary source for specific criteria."""
    project_id: str
    overrides: Mapping[str, DataSourceConfig] = field(default_factory=dict)
    identifiers: ProjectIdentifiers = field(default_factory=ProjectIdentifiers)

    def __post_init__(self) -> None:
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def override_for(self, criterion_id: str) -> Optional[DataSourceConfig]:
        return self.overrides.get(criterion_id)
