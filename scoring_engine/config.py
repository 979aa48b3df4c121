"""
Scoring Engine - Configuration.

============================================================
SCORING PARAMETERS
============================================================

Category weights (normalized to sum to 1.0):
- chain: 0.4
- control: 0.4
- fairness: 0.2

Kill switch:
- criterion: B5 (Admin Halt Capability)
- threshold: sub-score below 1.0 activates the switch
- cap: total score clamped to 1.0

Configuration can be loaded from:
- Default values
- Environment variables (SCORING_WEIGHT_*, SCORING_KILL_SWITCH_*)
- YAML config file

============================================================
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from scoring_engine.models import Category


logger = logging.getLogger(__name__)

load_dotenv()


# =============================================================
# CATEGORY WEIGHTS
# =============================================================


@dataclass
class CategoryWeights:
    """Weights of the three category scores in the total."""
    chain: float = 0.4
    control: float = 0.4
    fairness: float = 0.2

    def __post_init__(self) -> None:
        if min(self.chain, self.control, self.fairness) < 0:
            raise ValueError("Category weights must be non-negative")

        total = self.chain + self.control + self.fairness
        if total <= 0:
            raise ValueError("Category weights must not all be zero")

        if abs(total - 1.0) > 1e-9:
            logger.warning(f"Category weights sum to {total}, normalizing")
            self.chain /= total
            self.control /= total
            self.fairness /= total

    def for_category(self, category: Category) -> float:
        return getattr(self, Category(category).value)

    def to_dict(self) -> Dict[str, float]:
        return {
            "chain": self.chain,
            "control": self.control,
            "fairness": self.fairness,
        }


# =============================================================
# KILL SWITCH
# =============================================================


@dataclass
class KillSwitchConfig:
    """Cap applied when a single entity can halt the chain."""
    criterion_id: str = "B5"
    threshold: float = 1.0   # sub-score strictly below activates
    cap: float = 1.0
    enabled: bool = True

    def to_dict(self) -> Dict:
        return {
            "criterion_id": self.criterion_id,
            "threshold": self.threshold,
            "cap": self.cap,
            "enabled": self.enabled,
        }


# =============================================================
# MAIN CONFIGURATION
# =============================================================


@dataclass
class ScoringConfig:
    """Complete scoring configuration."""
    weights: CategoryWeights = field(default_factory=CategoryWeights)
    kill_switch: KillSwitchConfig = field(default_factory=KillSwitchConfig)

    # Decimal places of every reported score
    round_places: int = 1

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        """Load configuration from environment variables."""
        defaults = CategoryWeights()
        weights = CategoryWeights(
            chain=float(os.getenv("SCORING_WEIGHT_CHAIN", defaults.chain)),
            control=float(os.getenv("SCORING_WEIGHT_CONTROL", defaults.control)),
            fairness=float(os.getenv("SCORING_WEIGHT_FAIRNESS", defaults.fairness)),
        )

        kill_switch = KillSwitchConfig(
            criterion_id=os.getenv("SCORING_KILL_SWITCH_CRITERION", "B5"),
            threshold=float(os.getenv("SCORING_KILL_SWITCH_THRESHOLD", "1.0")),
            cap=float(os.getenv("SCORING_KILL_SWITCH_CAP", "1.0")),
            enabled=os.getenv("SCORING_KILL_SWITCH_ENABLED", "true").lower() == "true",
        )

        return cls(weights=weights, kill_switch=kill_switch)

    @classmethod
    def from_yaml(cls, path: Path) -> "ScoringConfig":
        """
        Load configuration from YAML file.

        Expected layout:
            weights:
              chain: 0.4
              control: 0.4
              fairness: 0.2
            kill_switch:
              criterion_id: B5
              threshold: 1.0
              cap: 1.0
        """
        try:
            import yaml
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}

            return cls(
                weights=CategoryWeights(**data.get('weights', {})),
                kill_switch=KillSwitchConfig(**data.get('kill_switch', {})),
                round_places=int(data.get('round_places', 1)),
            )

        except Exception as e:
            logger.warning(f"Failed to load YAML config from {path}: {e}")
            return cls()

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            "weights": self.weights.to_dict(),
            "kill_switch": self.kill_switch.to_dict(),
            "round_places": self.round_places,
        }


# =============================================================
# GLOBAL CONFIG SINGLETON
# =============================================================


_default_config: Optional[ScoringConfig] = None


def get_config() -> ScoringConfig:
    """Get the global scoring configuration."""
    global _default_config
    if _default_config is None:
        _default_config = ScoringConfig.from_env()
    return _default_config


def set_config(config: ScoringConfig) -> None:
    """Set the global scoring configuration."""
    global _default_config
    _default_config = config
