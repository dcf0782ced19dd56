"""
Engine Configuration

Dataclass-based configuration for the referee and its evaluators.
"""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .personalities import PERSONALITIES, PersonalityWeights, get_personality

WEIGHT_FIELDS = (
    "win_weight",
    "block_weight",
    "center_weight",
    "disruption_weight",
    "escalated_block_weight",
    "escalation_threshold",
)


@dataclass
class EngineConfig:
    """Configuration for move selection."""

    # Minimax search depth in plies
    search_depth: int = 4

    # Personalities that each contribute one minimax proposal
    personalities: list[str] = field(default_factory=lambda: list(PERSONALITIES))

    # Validator rejections tolerated before falling back to a full safety scan
    max_reproposals: int = 6

    # Per-personality weight overrides, e.g. {"adaptive": {"block_weight": 700}}
    weight_overrides: dict[str, dict[str, float]] = field(default_factory=dict)

    def __post_init__(self):
        if self.search_depth < 1:
            raise ValueError(f"search_depth must be >= 1, got {self.search_depth}")
        if self.max_reproposals < 0:
            raise ValueError(f"max_reproposals must be >= 0, got {self.max_reproposals}")
        if not self.personalities:
            raise ValueError("At least one personality is required")
        for name in list(self.personalities) + list(self.weight_overrides):
            get_personality(name)
        for name, overrides in self.weight_overrides.items():
            unknown = set(overrides) - set(WEIGHT_FIELDS)
            if unknown:
                raise ValueError(f"Unknown weight fields for {name}: {sorted(unknown)}")

    def weights_for(self, name: str) -> PersonalityWeights:
        """Personality weights with any configured overrides applied."""
        weights = get_personality(name)
        overrides = self.weight_overrides.get(weights.name)
        if overrides:
            weights = weights.with_overrides(**overrides)
        return weights

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EngineConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        engine = data.get("engine", data)
        return cls(
            search_depth=engine.get("search_depth", 4),
            personalities=engine.get("personalities") or list(PERSONALITIES),
            max_reproposals=engine.get("max_reproposals", 6),
            weight_overrides=engine.get("weight_overrides") or {},
        )

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        data = {
            "engine": {
                "search_depth": self.search_depth,
                "personalities": list(self.personalities),
                "max_reproposals": self.max_reproposals,
                "weight_overrides": {k: dict(v) for k, v in self.weight_overrides.items()},
            }
        }
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
