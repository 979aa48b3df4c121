"""
Cosmos Hub Adapter - Cosmos SDK REST (LCD) endpoints.

Endpoints:
- /cosmos/base/tendermint/v1beta1/blocks/latest: height and chain id
- /cosmos/staking/v1beta1/pool: bonded / not-bonded supply (uatom)
- /cosmos/staking/v1beta1/validators: bonded set with tokens (uatom)

Amounts are decimal strings in uatom (1 ATOM = 10^6 uatom).
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


UATOM_DECIMALS = 6

# Hub active set is 180; the page must cover it in one call
VALIDATOR_PAGE_LIMIT = 500


@dataclass(frozen=True)
class CosmosMetrics(MetricsRecord):
    """Cosmos Hub chain and staking metrics."""

    CORE_METRICS = (
        "block_height",
        "active_validators",
        "total_bonded",
        "top5_concentration",
        "nakamoto_coefficient",
    )

    block_height: Optional[int] = None
    chain_id: Optional[str] = None
    active_validators: Optional[int] = None
    total_bonded: Optional[int] = None
    total_unbonded: Optional[int] = None
    top5_concentration: Optional[float] = None
    nakamoto_coefficient: Optional[int] = None


class CosmosAdapter(BaseSourceAdapter):
    """Cosmos Hub adapter over the public REST proxy."""

    metrics_type = CosmosMetrics

    attack_fraction = DEFAULT_ATTACK_FRACTION

    async def collect(self) -> CosmosMetrics:
        results = await self.gather_fields(
            block=self._latest_block(),
            pool=self._staking_pool(),
            validators=self._validator_stats(),
        )
        return CosmosMetrics(
            **(results["block"] or {}),
            **(results["pool"] or {}),
            **(results["validators"] or {}),
        )

    async def _latest_block(self) -> dict[str, Any]:
        data = self.unwrap(
            await self._client.request("/cosmos/base/tendermint/v1beta1/blocks/latest"),
            "latest block",
        )
        return {
            "block_height": parse_int_amount(self.dig(data, "block", "header", "height")),
            "chain_id": self.dig(data, "block", "header", "chain_id"),
        }

    async def _staking_pool(self) -> dict[str, Any]:
        data = self.unwrap(
            await self._client.request("/cosmos/staking/v1beta1/pool"),
            "staking pool",
        )
        bonded = parse_int_amount(self.dig(data, "pool", "bonded_tokens"))
        unbonded = parse_int_amount(self.dig(data, "pool", "not_bonded_tokens"))
        return {
            "total_bonded": to_whole_units(bonded, UATOM_DECIMALS),
            "total_unbonded": to_whole_units(unbonded, UATOM_DECIMALS),
        }

    async def _validator_stats(self) -> dict[str, Any]:
        data = self.unwrap(
            await self._client.request(
                "/cosmos/staking/v1beta1/validators",
                params={
                    "status": "BOND_STATUS_BONDED",
                    "pagination.limit": str(VALIDATOR_PAGE_LIMIT),
                },
            ),
            "bonded validators",
        )
        validators = self.dig(data, "validators")
        next_key = (data.get("pagination") or {}).get("next_key")
        if next_key:
            logger.warning(
                f"[{self.name}] Bonded set exceeds one page of {VALIDATOR_PAGE_LIMIT}; "
                f"concentration covers the first {len(validators)} validators only"
            )

        stats: dict[str, Any] = {"active_validators": len(validators)}

        entities = [
            WeightedEntity(
                identity=self.dig(v, "operator_address"),
                weight=parse_int_amount(self.dig(v, "tokens")),
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
