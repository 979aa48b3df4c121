"""
Blockchain.info Adapter - Bitcoin mining pool distribution.

Endpoint:
- /pools?timespan=5days: pool name -> blocks mined in the window

Blocks of unidentified miners are reported under "Unknown". They count
toward the total but are not ranked as a pool, since they are not a
single operator.
"""

import logging
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Optional

from analytics.concentration import (
    ConsensusFamily,
    analyze_concentration,
    count_significant,
    rank_entities,
    weighted_entities,
)
from analytics.units import parse_int_amount, whole_percentage
from fetchers.adapter import BaseSourceAdapter
from fetchers.exceptions import NormalizationError
from fetchers.models import MetricsRecord


logger = logging.getLogger(__name__)


UNKNOWN_POOL = "Unknown"

# Share of blocks for a pool to count toward diversity
SIGNIFICANT_POOL_SHARE = Fraction(1, 100)


@dataclass(frozen=True)
class BlockchainPoolMetrics(MetricsRecord):
    """Bitcoin hash-power distribution by pool."""

    CORE_METRICS = (
        "top5_pool_pct",
        "largest_pool_pct",
        "pool_diversity",
    )

    top5_pool_pct: Optional[int] = None
    largest_pool_pct: Optional[int] = None
    pool_diversity: Optional[int] = None
    nakamoto_coefficient: Optional[int] = None
    total_blocks: Optional[int] = None


class BlockchainInfoAdapter(BaseSourceAdapter):
    """Blockchain.info pool-distribution adapter."""

    metrics_type = BlockchainPoolMetrics

    # Proof of work: a majority of hash power rewrites history
    attack_fraction = ConsensusFamily.MAJORITY.attack_fraction

    def __init__(self, *args: Any, timespan: str = "5days", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._timespan = timespan

    async def collect(self) -> BlockchainPoolMetrics:
        results = await self.gather_fields(pools=self._pool_stats())
        return BlockchainPoolMetrics(**(results["pools"] or {}))

    async def fetch_pool_distribution(self) -> dict[str, int]:
        data = self.unwrap(
            await self._client.request("/pools", params={"timespan": self._timespan}),
            "pool distribution",
        )
        if not isinstance(data, dict):
            raise NormalizationError(
                "Pool distribution is not an object",
                provider=self.name,
                raw_data=data,
            )
        return {name: parse_int_amount(blocks) for name, blocks in data.items()}

    async def _pool_stats(self) -> dict[str, Any]:
        pools = await self.fetch_pool_distribution()
        total = sum(pools.values())
        if total <= 0:
            logger.warning(f"[{self.name}] No blocks reported for {self._timespan}")
            return {}

        known = rank_entities(
            weighted_entities({k: v for k, v in pools.items() if k != UNKNOWN_POOL})
        )

        stats: dict[str, Any] = {
            "total_blocks": total,
            "top5_pool_pct": whole_percentage(sum(e.weight for e in known[:5]), total),
            "pool_diversity": count_significant(
                known, SIGNIFICANT_POOL_SHARE, total_weight=total
            ),
        }
        if known:
            stats["largest_pool_pct"] = whole_percentage(known[0].weight, total)

            concentration = analyze_concentration(
                known, self.attack_fraction, total_weight=total
            )
            if concentration is not None:
                stats["nakamoto_coefficient"] = concentration.nakamoto_coefficient

        return stats
