"""
Sui Adapter - System state over JSON-RPC.

A single suix_getLatestSuiSystemState call carries the whole active
validator set, so every metric comes from one payload.

Amounts are decimal strings in MIST (1 SUI = 10^9 MIST).
"""

import logging
from dataclasses import dataclass
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


MIST_DECIMALS = 9


@dataclass(frozen=True)
class SuiMetrics(MetricsRecord):
    """Sui epoch, stake and validator metrics."""

    CORE_METRICS = (
        "epoch",
        "total_validators",
        "total_stake",
        "top5_concentration",
        "nakamoto_coefficient",
    )

    epoch: Optional[int] = None
    protocol_version: Optional[int] = None
    total_validators: Optional[int] = None
    max_validators: Optional[int] = None
    total_stake: Optional[int] = None
    min_validator_stake: Optional[int] = None
    top5_concentration: Optional[float] = None
    nakamoto_coefficient: Optional[int] = None
    reference_gas_price: Optional[int] = None


class SuiAdapter(BaseSourceAdapter):
    """Sui fullnode JSON-RPC adapter."""

    metrics_type = SuiMetrics

    attack_fraction = DEFAULT_ATTACK_FRACTION

    async def collect(self) -> SuiMetrics:
        results = await self.gather_fields(state=self._system_state())
        return SuiMetrics(**(results["state"] or {}))

    async def _system_state(self) -> dict[str, Any]:
        state = self.unwrap(
            await self._client.rpc_call("suix_getLatestSuiSystemState"),
            "suix_getLatestSuiSystemState",
        )
        validators = self.dig(state, "activeValidators")

        stats: dict[str, Any] = {
            "epoch": parse_int_amount(self.dig(state, "epoch")),
            "protocol_version": parse_int_amount(self.dig(state, "protocolVersion")),
            "total_validators": len(validators),
            "max_validators": parse_int_amount(self.dig(state, "maxValidatorCount")),
            "total_stake": to_whole_units(
                parse_int_amount(self.dig(state, "totalStake")), MIST_DECIMALS
            ),
            "min_validator_stake": to_whole_units(
                parse_int_amount(self.dig(state, "minValidatorJoiningStake")), MIST_DECIMALS
            ),
            "reference_gas_price": parse_int_amount(self.dig(state, "referenceGasPrice")),
        }

        # Next-epoch stake is what the committee will actually hold
        entities = [
            WeightedEntity(
                identity=self.dig(v, "suiAddress"),
                weight=parse_int_amount(self.dig(v, "nextEpochStake")),
            )
            for v in validators
        ]
        concentration = analyze_concentration(entities, self.attack_fraction)
        if concentration is not None:
            stats.update(
                top5_concentration=concentration.top5_pct,
                nakamoto_coefficient=concentration.nakamoto_coefficient,
            )
        return stats
