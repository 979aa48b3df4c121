"""
Source adapter implementations, one per upstream API.
"""

from data_sources.models import DataSourceProvider
from fetchers.adapter import BaseSourceAdapter
from fetchers.providers.aptos import AptosAdapter, AptosMetrics
from fetchers.providers.bitnodes import BitnodesAdapter, BitnodesMetrics, NodeDetail, parse_node_key
from fetchers.providers.blockchain import BlockchainInfoAdapter, BlockchainPoolMetrics
from fetchers.providers.cosmos import CosmosAdapter, CosmosMetrics
from fetchers.providers.filecoin import FilecoinAdapter, FilecoinMetrics
from fetchers.providers.solana import SolanaMetrics, SolanaRpcAdapter
from fetchers.providers.sui import SuiAdapter, SuiMetrics


ADAPTER_CLASSES: dict[DataSourceProvider, type[BaseSourceAdapter]] = {
    DataSourceProvider.SOLANA_RPC: SolanaRpcAdapter,
    DataSourceProvider.COSMOS_LCD: CosmosAdapter,
    DataSourceProvider.SUI_RPC: SuiAdapter,
    DataSourceProvider.APTOS: AptosAdapter,
    DataSourceProvider.FILFOX: FilecoinAdapter,
    DataSourceProvider.BLOCKCHAIN: BlockchainInfoAdapter,
    DataSourceProvider.BITNODES: BitnodesAdapter,
}


__all__ = [
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
    "NodeDetail",
    "SolanaMetrics",
    "SolanaRpcAdapter",
    "SuiAdapter",
    "SuiMetrics",
    "parse_node_key",
]
