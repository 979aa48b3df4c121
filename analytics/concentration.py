"""
Analytics - Concentration Analysis.

============================================================
RESPONSIBILITY
============================================================
Reduces a weighted-entity list (validators by stake, mining pools by
blocks, voters by voting power) to:

- Nakamoto coefficient: fewest entities whose combined weight reaches
  the attack fraction of total weight
- Top-5 / top-10 share of total weight (percent, one decimal)

============================================================
INVARIANTS
============================================================
- Weights are non-negative ints; sums never touch floats
- Result does not depend on input order
- Zero total weight yields None, never a division by zero
- Top (n - 1) entities stay strictly below the threshold

============================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Any, Iterable, Mapping, Optional, Union

from analytics.units import percentage


logger = logging.getLogger(__name__)


FractionLike = Union[Fraction, int, float, str]


# ============================================================
# ATTACK THRESHOLDS
# ============================================================

class ConsensusFamily(Enum):
    """Share of weight needed to disrupt consensus."""

    BFT = Fraction(1, 3)
    """Tendermint/HotStuff style: one third halts finality."""

    MAJORITY = Fraction(1, 2)
    """Longest-chain style: a majority rewrites history."""

    @property
    def attack_fraction(self) -> Fraction:
        return self.value


DEFAULT_ATTACK_FRACTION = ConsensusFamily.BFT.attack_fraction


def _as_fraction(value: FractionLike) -> Fraction:
    fraction = Fraction(value)
    if not 0 < fraction <= 1:
        raise ValueError(f"attack fraction must be within (0, 1], got {value}")
    return fraction


# ============================================================
# MODELS
# ============================================================

@dataclass(frozen=True)
class WeightedEntity:
    """A validator, pool or voter and its weight."""
    identity: str
    weight: int

    def __post_init__(self) -> None:
        if isinstance(self.weight, bool) or not isinstance(self.weight, int):
            raise TypeError(f"weight must be an int, got {type(self.weight).__name__}")
        if self.weight < 0:
            raise ValueError(f"weight must be non-negative, got {self.weight} for {self.identity}")


@dataclass(frozen=True)
class ConcentrationResult:
    """Concentration summary of one weighted-entity list."""
    # None only when an explicit total exceeds what the listed entities can reach
    nakamoto_coefficient: Optional[int]
    top5_pct: float
    top10_pct: float
    entity_count: int
    total_weight: int
    attack_fraction: Fraction = DEFAULT_ATTACK_FRACTION

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "nakamoto_coefficient": self.nakamoto_coefficient,
            "top5_pct": self.top5_pct,
            "top10_pct": self.top10_pct,
            "entity_count": self.entity_count,
            "total_weight": str(self.total_weight),
            "attack_fraction": str(self.attack_fraction),
        }


# ============================================================
# HELPERS
# ============================================================

def weighted_entities(weights: Mapping[str, int]) -> list[WeightedEntity]:
    """Build entities from an identity -> weight mapping."""
    return [WeightedEntity(identity=str(k), weight=v) for k, v in weights.items()]


def rank_entities(entities: Iterable[WeightedEntity]) -> list[WeightedEntity]:
    """Heaviest first; equal weights ordered by identity."""
    return sorted(entities, key=lambda e: (-e.weight, e.identity))


def _resolve_total(ranked: list[WeightedEntity], total_weight: Optional[int]) -> int:
    listed = sum(e.weight for e in ranked)
    if total_weight is None:
        return listed
    if total_weight < listed:
        raise ValueError(
            f"total_weight {total_weight} is smaller than the listed weight {listed}"
        )
    return total_weight


def nakamoto_coefficient(
    ranked: list[WeightedEntity],
    total: int,
    attack_fraction: FractionLike = DEFAULT_ATTACK_FRACTION,
) -> Optional[int]:
    """
    Count of top entities needed to reach attack_fraction * total.

    Args:
        ranked: Entities sorted heaviest first
        total: Total weight (> 0)
        attack_fraction: Share of weight that disrupts consensus

    Returns:
        Coefficient (>= 1), or None if the listed entities never reach
        the threshold
    """
    fraction = _as_fraction(attack_fraction)
    cumulative = 0

    for count, entity in enumerate(ranked, start=1):
        cumulative += entity.weight
        # cumulative >= total * f, kept in integers
        if cumulative * fraction.denominator >= total * fraction.numerator:
            return count

    return None


def top_n_pct(ranked: list[WeightedEntity], n: int, total: int) -> float:
    """Share (%) of total weight held by the n heaviest entities."""
    return percentage(sum(e.weight for e in ranked[:n]), total)


# ============================================================
# ANALYZER
# ============================================================

def analyze_concentration(
    entities: Iterable[WeightedEntity],
    attack_fraction: FractionLike = DEFAULT_ATTACK_FRACTION,
    total_weight: Optional[int] = None,
) -> Optional[ConcentrationResult]:
    """
    Nakamoto coefficient and top-N shares for a weighted-entity list.

    Args:
        entities: Entities in any order
        attack_fraction: Threshold share, 1/3 for BFT chains by default
        total_weight: Network-wide total when the list is only the top
            of a larger population (e.g. top 100 miners)

    Returns:
        ConcentrationResult, or None when total weight is zero
    """
    fraction = _as_fraction(attack_fraction)
    ranked = rank_entities(entities)
    total = _resolve_total(ranked, total_weight)

    if total <= 0:
        logger.debug(f"Concentration undefined for {len(ranked)} entities with zero weight")
        return None

    return ConcentrationResult(
        nakamoto_coefficient=nakamoto_coefficient(ranked, total, fraction),
        top5_pct=top_n_pct(ranked, 5, total),
        top10_pct=top_n_pct(ranked, 10, total),
        entity_count=len(ranked),
        total_weight=total,
        attack_fraction=fraction,
    )


def largest_share_pct(
    entities: Iterable[WeightedEntity],
    total_weight: Optional[int] = None,
) -> Optional[float]:
    """Share (%) held by the single heaviest entity, None for zero weight."""
    ranked = rank_entities(entities)
    total = _resolve_total(ranked, total_weight)
    if total <= 0 or not ranked:
        return None
    return top_n_pct(ranked, 1, total)


def count_significant(
    entities: Iterable[WeightedEntity],
    min_share: FractionLike = Fraction(1, 100),
    total_weight: Optional[int] = None,
) -> Optional[int]:
    """Number of entities holding at least min_share of total weight."""
    share = Fraction(min_share)
    ranked = rank_entities(entities)
    total = _resolve_total(ranked, total_weight)
    if total <= 0:
        return None
    return sum(
        1 for e in ranked
        if e.weight * share.denominator >= total * share.numerator
    )


class ConcentrationAnalyzer:
    """
    Analyzer bound to one attack fraction.

    Usage:
        analyzer = ConcentrationAnalyzer(ConsensusFamily.BFT)
        result = analyzer.analyze(validators)
    """

    def __init__(
        self,
        attack_fraction: Union[ConsensusFamily, FractionLike] = DEFAULT_ATTACK_FRACTION,
    ) -> None:
        if isinstance(attack_fraction, ConsensusFamily):
            attack_fraction = attack_fraction.attack_fraction
        self._attack_fraction = _as_fraction(attack_fraction)

    @property
    def attack_fraction(self) -> Fraction:
        return self._attack_fraction

    def analyze(
        self,
        entities: Iterable[WeightedEntity],
        total_weight: Optional[int] = None,
    ) -> Optional[ConcentrationResult]:
        return analyze_concentration(entities, self._attack_fraction, total_weight)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(attack_fraction={self._attack_fraction})>"
