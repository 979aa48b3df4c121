"""
Scoring Engine - Project Scoring.

============================================================
RESPONSIBILITY
============================================================
Turns per-criterion raw values into the final project scores.

1. Raw value -> 0-10 sub-score via the criterion's mapping table
2. Category score = mean of applicable sub-scores
3. Total = weighted sum of the three category scores
4. Kill switch: admin-halt sub-score below threshold caps the total

============================================================
N/A HANDLING
============================================================
- None: criterion not applicable, reported with an N/A note and
  excluded from its category mean
- Missing key: criterion not assessed, not reported at all
- A category with no applicable criteria scores 0.0

Values are never rejected. A value outside every mapping range is
logged and scored by the edge rules of score_from_mapping().

============================================================
"""

import logging
import math
from typing import Iterable, Mapping, Optional, Sequence

from analytics.units import round_half_up
from scoring_engine.config import ScoringConfig, get_config
from scoring_engine.criteria import get_all_criteria
from scoring_engine.models import (
    Category,
    Criterion,
    CriterionScore,
    ProjectScores,
    ScoreMapping,
)


logger = logging.getLogger(__name__)


NOT_APPLICABLE_NOTE = "N/A - Not applicable"


def _round(value: float, places: int) -> float:
    return float(round_half_up(value, places))


def score_from_mapping(value: float, mappings: Sequence[ScoreMapping]) -> float:
    """
    Score a raw value against a mapping table.

    Ranges are tried in ascending order of min_value; the first with
    min <= value < max wins. A value at or above the highest max gets
    that range's end score; anything else (below every range, or in a
    gap) scores 0.
    """
    ordered = sorted(mappings, key=lambda m: m.min_value)

    for mapping in ordered:
        if mapping.contains(value):
            return mapping.interpolate(value)

    if ordered and value >= ordered[-1].max_value:
        return float(ordered[-1].end_score)

    return 0.0


def _in_table(value: float, mappings: Sequence[ScoreMapping]) -> bool:
    return any(m.contains(value) for m in mappings)


def calculate_category_score(
    criteria: Iterable[Criterion],
    scores: Mapping[str, Optional[float]],
) -> float:
    """Mean of the category's applicable sub-scores; 0.0 when none apply."""
    valid = [scores[c.id] for c in criteria if scores.get(c.id) is not None]
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


def calculate_total_score(
    chain_score: float,
    control_score: float,
    fairness_score: float,
    config: Optional[ScoringConfig] = None,
) -> float:
    """TotalScore = 0.4 * Chain + 0.4 * Control + 0.2 * Fairness (by default)."""
    weights = (config or get_config()).weights
    return (
        weights.chain * chain_score
        + weights.control * control_score
        + weights.fairness * fairness_score
    )


class ScoringEngine:
    """
    Category-weighted scorer with kill-switch cap.

    Usage:
        engine = ScoringEngine()
        scores = engine.calculate_project_scores({"A1": 12, "B5": 0, "C1": None})

        print(scores.total_score, scores.kill_switch_active)
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        criteria: Optional[Sequence[Criterion]] = None,
    ) -> None:
        self._config = config or get_config()
        self._criteria = list(criteria) if criteria is not None else get_all_criteria()

        ids = [c.id for c in self._criteria]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate criterion ids")

    @property
    def config(self) -> ScoringConfig:
        return self._config

    @property
    def criteria(self) -> list[Criterion]:
        return list(self._criteria)

    def score_criterion(self, criterion: Criterion, raw_value: Optional[float]) -> CriterionScore:
        """Unrounded sub-score of one criterion."""
        if isinstance(raw_value, float) and math.isnan(raw_value):
            logger.warning(f"[{criterion.id}] Raw value is NaN, treating as N/A")
            raw_value = None

        if raw_value is None:
            return CriterionScore(
                criterion_id=criterion.id,
                raw_value=None,
                score=None,
                notes=NOT_APPLICABLE_NOTE,
            )

        if not _in_table(raw_value, criterion.mappings):
            logger.warning(
                f"[{criterion.id}] Value {raw_value} is outside every mapping range, "
                f"scoring by edge rule"
            )

        return CriterionScore(
            criterion_id=criterion.id,
            raw_value=raw_value,
            score=score_from_mapping(raw_value, criterion.mappings),
        )

    def calculate_project_scores(
        self,
        raw_values: Mapping[str, Optional[float]],
    ) -> ProjectScores:
        """
        Calculate all scores for a project.

        Args:
            raw_values: criterion id -> raw value; None marks N/A

        Returns:
            ProjectScores with every figure rounded half-up
        """
        places = self._config.round_places

        unknown = set(raw_values) - {c.id for c in self._criteria}
        if unknown:
            logger.warning(f"Ignoring values for unknown criteria: {sorted(unknown)}")

        criterion_scores: list[CriterionScore] = []
        scores: dict[str, Optional[float]] = {}

        for criterion in self._criteria:
            if criterion.id not in raw_values:
                continue

            result = self.score_criterion(criterion, raw_values[criterion.id])
            scores[criterion.id] = result.score
            criterion_scores.append(
                CriterionScore(
                    criterion_id=result.criterion_id,
                    raw_value=result.raw_value,
                    score=None if result.score is None else _round(result.score, places),
                    notes=result.notes,
                )
            )

        # Category means use unrounded sub-scores
        category_scores = {
            category: calculate_category_score(
                [c for c in self._criteria if c.category == category],
                scores,
            )
            for category in Category
        }

        uncapped = calculate_total_score(
            category_scores[Category.CHAIN],
            category_scores[Category.CONTROL],
            category_scores[Category.FAIRNESS],
            self._config,
        )
        total = uncapped

        kill_switch = self._config.kill_switch
        halt_score = scores.get(kill_switch.criterion_id)
        kill_switch_active = (
            kill_switch.enabled
            and halt_score is not None
            and halt_score < kill_switch.threshold
        )
        if kill_switch_active:
            total = min(total, kill_switch.cap)
            logger.info(
                f"Kill switch active: {kill_switch.criterion_id} scored {halt_score}, "
                f"total capped at {kill_switch.cap} (uncapped {uncapped:.2f})"
            )

        return ProjectScores(
            chain_score=_round(category_scores[Category.CHAIN], places),
            control_score=_round(category_scores[Category.CONTROL], places),
            fairness_score=_round(category_scores[Category.FAIRNESS], places),
            total_score=_round(total, places),
            uncapped_score=_round(uncapped, places),
            kill_switch_active=kill_switch_active,
            criterion_scores=tuple(criterion_scores),
        )


def calculate_project_scores(
    raw_values: Mapping[str, Optional[float]],
    config: Optional[ScoringConfig] = None,
) -> ProjectScores:
    """Score a project with the default criteria catalogue."""
    return ScoringEngine(config).calculate_project_scores(raw_values)
