"""
Solana RPC Adapter - Validator stake and cluster node data.

Uses the public mainnet-beta JSON-RPC endpoint. No API key required.

Rate limits:
- 100 requests / 10 seconds on the public endpoint
- Configured far lower; two calls cover every metric

Methods:
- getVoteAccounts: stake per vote account (lamports), current + delinquent
- getClusterNodes: gossip-visible nodes with their client version
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from analytics.concentration import (
    DEFAULT_ATTACK_FRACTION,
    WeightedEntity,
    analyze_concentration,
    largest_share_pct,
)
from analytics.units import parse_int_amount
from fetchers.adapter import BaseSourceAdapter
from fetchers.models import MetricsRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolanaMetrics(MetricsRecord):
    """Solana validator and node metrics."""

    CORE_METRICS = (
        "total_validators",
        "active_validators",
        "nakamoto_coefficient",
        "top5_concentration",
        "largest_validator_pct",
        "total_nodes",
        "client_versions",
    )
    SUCCESS_THRESHOLD = 5

    total_validators: Optional[int] = None
    active_validators: Optional[int] = None
    nakamoto_coefficient: Optional[int] = None
    top5_concentration: Optional[float] = None
    largest_validator_pct: Optional[float] = None
    total_nodes: Optional[int] = None
    client_versions: Optional[int] = None


def major_minor(version: str) -> str:
    """'1.18.22' -> '1.18'"""
    return ".".join(version.split(".")[:2])


class SolanaRpcAdapter(BaseSourceAdapter):
    """
    Solana JSON-RPC adapter.

    Concentration uses only current (non-delinquent) validators; the
    validator total counts both.
    """

    metrics_type = SolanaMetrics

    attack_fraction = DEFAULT_ATTACK_FRACTION

    async def collect(self) -> SolanaMetrics:
        results = await self.gather_fields(
            validators=self._validator_stats(),
            nodes=self._node_stats(),
        )
        return SolanaMetrics(
            **(results["validators"] or {}),
            **(results["nodes"] or {}),
        )

    async def _validator_stats(self) -> dict[str, Any]:
        data = self.unwrap(await self._client.rpc_call("getVoteAccounts"), "getVoteAccounts")
        current = self.dig(data, "current")
        delinquent = self.dig(data, "delinquent")

        stats: dict[str, Any] = {
            "total_validators": len(current) + len(delinquent),
            "active_validators": len(current),
        }

        entities = [
            WeightedEntity(
                identity=self.dig(account, "votePubkey"),
                weight=parse_int_amount(self.dig(account, "activatedStake")),
            )
            for account in current
        ]
        concentration = analyze_concentration(entities, self.attack_fraction)
        if concentration is None:
            logger.warning(f"[{self.name}] No active stake, concentration unavailable")
            return stats

        stats.update(
            nakamoto_coefficient=concentration.nakamoto_coefficient,
            top5_concentration=concentration.top5_pct,
            largest_validator_pct=largest_share_pct(entities),
        )
        return stats

    async def _node_stats(self) -> dict[str, Any]:
        nodes = self.unwrap(await self._client.rpc_call("getClusterNodes"), "getClusterNodes")

        versions = {
            major_minor(node["version"])
            for node in nodes
            if isinstance(node, dict) and node.get("version")
        }
        return {
            "total_nodes": len(nodes),
            "client_versions": len(versions),
        }
