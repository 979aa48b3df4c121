"""
Analytics Package - Pure reductions over fetched data.

Quick Start:
    from analytics import ConcentrationAnalyzer, ConsensusFamily, weighted_entities

    analyzer = ConcentrationAnalyzer(ConsensusFamily.BFT)
    result = analyzer.analyze(weighted_entities({"a": 50, "b": 20, "c": 30}))

    print(result.nakamoto_coefficient)   # 1
    print(result.top5_pct)               # 100.0

Weights are Python ints end to end; percentages are rounded half-up
to one decimal only at the very end.
"""

from analytics.concentration import (
    DEFAULT_ATTACK_FRACTION,
    ConcentrationAnalyzer,
    ConcentrationResult,
    ConsensusFamily,
    WeightedEntity,
    analyze_concentration,
    count_significant,
    largest_share_pct,
    nakamoto_coefficient,
    rank_entities,
    top_n_pct,
    weighted_entities,
)
from analytics.sampling import (
    SampleDraw,
    SampleEstimate,
    SamplingEstimator,
    sample_confidence,
    share_matching,
    top_n_share,
)
from analytics.units import (
    divide_round,
    parse_int_amount,
    percentage,
    round_half_up,
    to_whole_units,
    whole_percentage,
)


__all__ = [
    # Concentration
    "DEFAULT_ATTACK_FRACTION",
    "ConcentrationAnalyzer",
    "ConcentrationResult",
    "ConsensusFamily",
    "WeightedEntity",
    "analyze_concentration",
    "count_significant",
    "largest_share_pct",
    "nakamoto_coefficient",
    "rank_entities",
    "top_n_pct",
    "weighted_entities",

    # Sampling
    "SampleDraw",
    "SampleEstimate",
    "SamplingEstimator",
    "sample_confidence",
    "share_matching",
    "top_n_share",

    # Units
    "divide_round",
    "parse_int_amount",
    "percentage",
    "round_half_up",
    "to_whole_units",
    "whole_percentage",
]
