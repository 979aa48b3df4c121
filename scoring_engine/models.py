"""
Scoring Engine - Models.

Criteria, their value-to-score mappings, and the score records the
engine produces. All records are immutable.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Category(Enum):
    """Score category a criterion belongs to."""
    CHAIN = "chain"          # Technical/economic decentralization
    CONTROL = "control"      # Power and control structures
    FAIRNESS = "fairness"    # Launch, distribution, governance


class Direction(Enum):
    """How raw values relate to scores."""
    HIGHER_IS_BETTER = "higher_is_better"
    LOWER_IS_BETTER = "lower_is_better"


ScoreValue = Union[float, tuple[float, float]]


@dataclass(frozen=True)
class ScoreMapping:
    """
    One range of a criterion's value-to-score table.

    Values in [min_value, max_value) score `score`; a (start, end) pair
    is interpolated linearly across the range.
    """
    min_value: float
    max_value: float
    score: ScoreValue
    label: str = ""

    def __post_init__(self) -> None:
        if self.max_value <= self.min_value:
            raise ValueError(
                f"max_value must exceed min_value, got [{self.min_value}, {self.max_value})"
            )

    @property
    def is_range(self) -> bool:
        return isinstance(self.score, tuple)

    @property
    def start_score(self) -> float:
        return self.score[0] if self.is_range else self.score

    @property
    def end_score(self) -> float:
        return self.score[1] if self.is_range else self.score

    def contains(self, value: float) -> bool:
        return self.min_value <= value < self.max_value

    def interpolate(self, value: float) -> float:
        """Score for a value inside this range."""
        if not self.is_range:
            return float(self.score)
        if math.isinf(self.max_value):
            # Open-ended range has no width to interpolate over
            return float(self.start_score)
        position = (value - self.min_value) / (self.max_value - self.min_value)
        return self.start_score + position * (self.end_score - self.start_score)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "min": self.min_value,
            "max": None if math.isinf(self.max_value) else self.max_value,
            "score": list(self.score) if self.is_range else self.score,
            "label": self.label,
        }


@dataclass(frozen=True)
class Criterion:
    """A scoring input (A1 ... C3)."""
    id: str
    name: str
    category: Category
    mappings: tuple[ScoreMapping, ...]
    direction: Direction = Direction.HIGHER_IS_BETTER
    description: str = ""

    def __post_init__(self) -> None:
        if not self.mappings:
            raise ValueError(f"Criterion {self.id} has no score mappings")

    def sorted_mappings(self) -> list[ScoreMapping]:
        return sorted(self.mappings, key=lambda m: m.min_value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "direction": self.direction.value,
            "description": self.description,
            "mappings": [m.to_dict() for m in self.mappings],
        }


@dataclass(frozen=True)
class CriterionScore:
    """Score of one criterion for one project. score is None when N/A."""
    criterion_id: str
    raw_value: Optional[float]
    score: Optional[float]
    notes: Optional[str] = None

    @property
    def is_applicable(self) -> bool:
        return self.score is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "criterion_id": self.criterion_id,
            "raw_value": self.raw_value,
            "score": self.score,
        }
        if self.notes:
            data["notes"] = self.notes
        return data


@dataclass(frozen=True)
class ProjectScores:
    """
    Final scores of one project.

    total_score equals uncapped_score unless the kill switch is active,
    in which case it is capped.
    """
    chain_score: float
    control_score: float
    fairness_score: float
    total_score: float
    uncapped_score: float
    kill_switch_active: bool = False
    criterion_scores: tuple[CriterionScore, ...] = field(default_factory=tuple)

    def score_for(self, criterion_id: str) -> Optional[CriterionScore]:
        for score in self.criterion_scores:
            if score.criterion_id == criterion_id:
                return score
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "chain_score": self.chain_score,
            "control_score": self.control_score,
            "fairness_score": self.fairness_score,
            "total_score": self.total_score,
            "uncapped_score": self.uncapped_score,
            "kill_switch_active": self.kill_switch_active,
            "criterion_scores": [s.to_dict() for s in self.criterion_scores],
        }
