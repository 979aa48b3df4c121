"""
Filecoin Adapter - Storage provider power from the Filfox explorer.

Endpoints:
- /overview: active miners, network quality-adjusted power (bytes)
- /miner/top-miners/power?count=100: the 100 largest providers plus
  the network-wide total power

Only the top of the distribution is listed, so shares are computed
against the network total rather than the listed sum.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_FLOOR
from typing import Any, Optional

from analytics.concentration import (
    DEFAULT_ATTACK_FRACTION,
    WeightedEntity,
    analyze_concentration,
)
from analytics.units import divide_round, parse_int_amount
from fetchers.adapter import BaseSourceAdapter
from fetchers.models import MetricsRecord


logger = logging.getLogger(__name__)


PIB = 2 ** 50

TOP_MINERS_COUNT = 100


@dataclass(frozen=True)
class FilecoinMetrics(MetricsRecord):
    """Filecoin storage-power metrics."""

    CORE_METRICS = (
        "active_miners",
        "total_power_pib",
        "nakamoto_coefficient",
        "top5_concentration",
    )

    active_miners: Optional[int] = None
    total_power_pib: Optional[int] = None
    nakamoto_coefficient: Optional[int] = None
    top5_concentration: Optional[float] = None
    top10_concentration: Optional[float] = None


class FilecoinAdapter(BaseSourceAdapter):
    """Filfox REST adapter."""

    metrics_type = FilecoinMetrics

    attack_fraction = DEFAULT_ATTACK_FRACTION

    async def collect(self) -> FilecoinMetrics:
        results = await self.gather_fields(
            overview=self._overview(),
            distribution=self._miner_distribution(),
        )
        return FilecoinMetrics(
            **(results["overview"] or {}),
            **(results["distribution"] or {}),
        )

    async def _overview(self) -> dict[str, Any]:
        data = self.unwrap(await self._client.request("/overview"), "overview")
        power = parse_int_amount(self.dig(data, "totalQualityAdjPower"))
        return {
            "active_miners": parse_int_amount(self.dig(data, "activeMiners")),
            "total_power_pib": divide_round(power, PIB, ROUND_FLOOR),
        }

    async def _miner_distribution(self) -> dict[str, Any]:
        data = self.unwrap(
            await self._client.request(
                "/miner/top-miners/power",
                params={"count": str(TOP_MINERS_COUNT)},
            ),
            "top miners",
        )
        network_total = parse_int_amount(self.dig(data, "totalQualityAdjPower"))

        entities = [
            WeightedEntity(
                identity=self.dig(m, "address"),
                weight=parse_int_amount(self.dig(m, "qualityAdjPower")),
            )
            for m in self.dig(data, "miners")
        ]
        concentration = analyze_concentration(
            entities,
            self.attack_fraction,
            total_weight=network_total,
        )
        if concentration is None:
            return {}

        if concentration.nakamoto_coefficient is None:
            logger.warning(
                f"[{self.name}] Top {len(entities)} miners hold less than "
                f"{self.attack_fraction} of network power"
            )
        return {
            "nakamoto_coefficient": concentration.nakamoto_coefficient,
            "top5_concentration": concentration.top5_pct,
            "top10_concentration": concentration.top10_pct,
        }
