"""
Scoring Engine Package.

Turns per-criterion raw values into a weighted decentralization score.

Modules:
- models: Criterion, ScoreMapping and score records
- criteria: The A1-C3 criteria catalogue
- config: Category weights and kill-switch settings
- scoring: Mapping evaluation, category means, total and kill switch
"""

from scoring_engine.config import (
    CategoryWeights,
    KillSwitchConfig,
    ScoringConfig,
    get_config,
    set_config,
)
from scoring_engine.criteria import (
    CHAIN_CRITERIA,
    CONTROL_CRITERIA,
    FAIRNESS_CRITERIA,
    get_all_criteria,
    get_criteria_by_category,
    get_criterion_by_id,
)
from scoring_engine.models import (
    Category,
    Criterion,
    CriterionScore,
    Direction,
    ProjectScores,
    ScoreMapping,
)
from scoring_engine.scoring import (
    NOT_APPLICABLE_NOTE,
    ScoringEngine,
    calculate_category_score,
    calculate_project_scores,
    calculate_total_score,
    score_from_mapping,
)


__all__ = [
    # Config
    "CategoryWeights",
    "KillSwitchConfig",
    "ScoringConfig",
    "get_config",
    "set_config",

    # Criteria
    "CHAIN_CRITERIA",
    "CONTROL_CRITERIA",
    "FAIRNESS_CRITERIA",
    "get_all_criteria",
    "get_criteria_by_category",
    "get_criterion_by_id",

    # Models
    "Category",
    "Criterion",
    "CriterionScore",
    "Direction",
    "ProjectScores",
    "ScoreMapping",

    # Scoring
    "NOT_APPLICABLE_NOTE",
    "ScoringEngine",
    "calculate_category_score",
    "calculate_project_scores",
    "calculate_total_score",
    "score_from_mapping",
]
