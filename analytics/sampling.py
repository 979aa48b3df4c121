"""
Analytics - Population Sampling.

============================================================
WHEN TO SAMPLE
============================================================
Some providers expose a cheap bulk listing (node ids) but charge one
request per member for detail (ASN, country). Under a daily budget of
a few dozen calls, full enumeration is impossible, so a bounded random
sample is queried and the estimate carries a reduced confidence.

============================================================
CONFIDENCE
============================================================
confidence = min(cap, success_count / sample_size), cap < 1.0

A sampled value is never presented as certain. Zero resolved members
means no estimate at all (None), not a zero.

============================================================
"""

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Optional,
    Sequence,
    TypeVar,
)

from analytics.units import whole_percentage


logger = logging.getLogger(__name__)


T = TypeVar("T")
D = TypeVar("D")

PopulationLoader = Callable[[], Awaitable[Optional[Sequence[T]]]]
DetailFetcher = Callable[[T], Awaitable[Optional[D]]]
Aggregator = Callable[[list[D]], Optional[float]]


DEFAULT_CONFIDENCE_CAP = 0.8


def sample_confidence(success_count: int, sample_size: int, cap: float = DEFAULT_CONFIDENCE_CAP) -> float:
    """Confidence for an estimate built from success_count of sample_size draws."""
    if sample_size <= 0:
        raise ValueError("sample_size must be positive")
    if not 0.0 < cap < 1.0:
        raise ValueError(f"confidence cap must be within (0, 1), got {cap}")
    return min(cap, success_count / sample_size)


# ============================================================
# MODELS
# ============================================================

@dataclass(frozen=True)
class SampleEstimate:
    """Estimated value and its confidence."""
    value: float
    confidence: float
    success_count: int = 0
    sample_size: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "value": self.value,
            "confidence": self.confidence,
            "success_count": self.success_count,
            "sample_size": self.sample_size,
        }


@dataclass
class SampleDraw(Generic[D]):
    """Details resolved for one random draw from the population."""
    resolved: list[D] = field(default_factory=list)
    requested: int = 0
    drawn: int = 0
    population_size: int = 0

    @property
    def success_count(self) -> int:
        return len(self.resolved)

    @property
    def failure_count(self) -> int:
        return self.drawn - self.success_count


# ============================================================
# AGGREGATORS
# ============================================================

def share_matching(predicate: Callable[[D], bool]) -> Aggregator:
    """Percentage (whole number) of resolved members matching predicate."""

    def aggregate(resolved: list[D]) -> Optional[float]:
        if not resolved:
            return None
        matching = sum(1 for item in resolved if predicate(item))
        return whole_percentage(matching, len(resolved))

    return aggregate


def top_n_share(key: Callable[[D], Optional[str]], n: int = 5) -> Aggregator:
    """
    Percentage (whole number) of resolved members falling in the n most
    common key values. Members without a key count only in the
    denominator.
    """

    def aggregate(resolved: list[D]) -> Optional[float]:
        if not resolved:
            return None
        counts = Counter(k for k in (key(item) for item in resolved) if k)
        top = sum(count for _, count in counts.most_common(n))
        return whole_percentage(top, len(resolved))

    return aggregate


# ============================================================
# ESTIMATOR
# ============================================================

class SamplingEstimator(Generic[T, D]):
    """
    Bounded random-sample estimator.

    One bulk call loads the population; a shuffled prefix of at most
    sample_size members is queried one by one. Individual detail
    failures are tolerated and reduce confidence.

    Usage:
        estimator = SamplingEstimator(
            population_loader=load_node_keys,
            detail_fetcher=fetch_node,
            aggregate=share_matching(is_cloud_hosted),
        )
        estimate = await estimator.estimate(40)
    """

    def __init__(
        self,
        population_loader: PopulationLoader,
        detail_fetcher: DetailFetcher,
        aggregate: Optional[Aggregator] = None,
        confidence_cap: float = DEFAULT_CONFIDENCE_CAP,
        rng: Optional[random.Random] = None,
        name: str = "sampling",
    ) -> None:
        if not 0.0 < confidence_cap < 1.0:
            raise ValueError(f"confidence cap must be within (0, 1), got {confidence_cap}")
        self._population_loader = population_loader
        self._detail_fetcher = detail_fetcher
        self._aggregate = aggregate
        self._confidence_cap = confidence_cap
        self._rng = rng or random.Random()
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def draw(self, sample_size: int) -> Optional[SampleDraw]:
        """
        Load the population and resolve details for a random sample.

        Returns:
            SampleDraw, or None when the population is unavailable or empty
        """
        if sample_size <= 0:
            raise ValueError("sample_size must be positive")

        population = await self._population_loader()
        if not population:
            logger.warning(f"[{self._name}] Population unavailable, no sample drawn")
            return None

        members = list(population)
        self._rng.shuffle(members)
        sample = members[:min(sample_size, len(members))]

        draw = SampleDraw(
            requested=sample_size,
            drawn=len(sample),
            population_size=len(members),
        )

        # Sequential: detail calls share one rate budget
        for member in sample:
            detail = await self._detail_fetcher(member)
            if detail is not None:
                draw.resolved.append(detail)

        logger.debug(
            f"[{self._name}] Resolved {draw.success_count}/{draw.drawn} sampled members "
            f"from a population of {draw.population_size}"
        )
        return draw

    def summarize(
        self,
        draw: Optional[SampleDraw],
        aggregate: Optional[Aggregator] = None,
        confidence_cap: Optional[float] = None,
    ) -> Optional[SampleEstimate]:
        """Reduce a draw to an estimate; several aggregates may share one draw."""
        if draw is None or draw.success_count == 0:
            return None

        aggregate = aggregate or self._aggregate
        if aggregate is None:
            raise ValueError("no aggregate configured")

        value = aggregate(draw.resolved)
        if value is None:
            return None

        cap = self._confidence_cap if confidence_cap is None else confidence_cap
        return SampleEstimate(
            value=value,
            confidence=sample_confidence(draw.success_count, draw.requested, cap),
            success_count=draw.success_count,
            sample_size=draw.requested,
        )

    async def estimate(self, sample_size: int) -> Optional[SampleEstimate]:
        """Draw a sample and aggregate it with the configured aggregate."""
        return self.summarize(await self.draw(sample_size))
