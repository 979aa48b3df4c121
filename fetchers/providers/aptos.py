"""
Aptos Adapter - Ledger info and the on-chain validator set.

Endpoints:
- '' (ledger root): block_height, epoch
- /accounts/0x1/resource/0x1::stake::ValidatorSet: active validators
  with voting power in octas (1 APT = 10^8 octas)
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
from analytics.units import parse_int_amount, to_whole_units
from fetchers.adapter import BaseSourceAdapter
from fetchers.models import MetricsRecord


logger = logging.getLogger(__name__)


OCTA_DECIMALS = 8

VALIDATOR_SET_RESOURCE = "/accounts/0x1/resource/0x1::stake::ValidatorSet"


@dataclass(frozen=True)
class AptosMetrics(MetricsRecord):
    """Aptos ledger and validator metrics."""

    CORE_METRICS = (
        "block_height",
        "active_validators",
        "total_staked",
        "nakamoto_coefficient",
        "top5_concentration",
    )

    block_height: Optional[int] = None
    epoch: Optional[int] = None
    active_validators: Optional[int] = None
    total_staked: Optional[int] = None
    nakamoto_coefficient: Optional[int] = None
    top5_concentration: Optional[float] = None
    top10_concentration: Optional[float] = None


class AptosAdapter(BaseSourceAdapter):
    """Aptos fullnode REST adapter."""

    metrics_type = AptosMetrics

    attack_fraction = DEFAULT_ATTACK_FRACTION

    async def collect(self) -> AptosMetrics:
        results = await self.gather_fields(
            ledger=self._ledger_info(),
            validators=self._validator_stats(),
        )
        return AptosMetrics(
            **(results["ledger"] or {}),
            **(results["validators"] or {}),
        )

    async def _ledger_info(self) -> dict[str, Any]:
        data = self.unwrap(await self._client.request(""), "ledger info")
        return {
            "block_height": parse_int_amount(self.dig(data, "block_height")),
            "epoch": parse_int_amount(self.dig(data, "epoch")),
        }

    async def _validator_stats(self) -> dict[str, Any]:
        data = self.unwrap(await self._client.request(VALIDATOR_SET_RESOURCE), "validator set")
        validators = self.dig(data, "data", "active_validators")

        entities = [
            WeightedEntity(
                identity=self.dig(v, "addr"),
                weight=parse_int_amount(self.dig(v, "voting_power")),
            )
            for v in validators
        ]
        total = sum(e.weight for e in entities)

        stats: dict[str, Any] = {
            "active_validators": len(validators),
            # Whole APT, truncated
            "total_staked": to_whole_units(total, OCTA_DECIMALS, ROUND_FLOOR),
        }

        concentration = analyze_concentration(entities, self.attack_fraction)
        if concentration is not None:
            stats.update(
                nakamoto_coefficient=concentration.nakamoto_coefficient,
                top5_concentration=concentration.top5_pct,
                top10_concentration=concentration.top10_pct,
            )
        return stats
