"""
Personality Profiles

The four minimax personalities are one evaluator with different weights.
Only "adaptive" changes a weight at runtime, and only the block weight.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PersonalityWeights:
    """Weights over the four static-evaluation features."""

    name: str
    win_weight: float
    block_weight: float
    center_weight: float
    disruption_weight: float
    # Block weight used once opponent threats exceed escalation_threshold
    escalated_block_weight: float | None = None
    escalation_threshold: int = 2

    def block_weight_for(self, opponent_threats: int) -> float:
        if self.escalated_block_weight is not None and opponent_threats > self.escalation_threshold:
            return self.escalated_block_weight
        return self.block_weight

    def with_overrides(self, **overrides) -> "PersonalityWeights":
        """Returns a copy with the given fields replaced."""
        return replace(self, **overrides)


AGGRESSIVE = PersonalityWeights(
    name="aggressive",
    win_weight=1000,
    block_weight=500,
    center_weight=2.0,
    disruption_weight=1.5,
)

DEFENSIVE = PersonalityWeights(
    name="defensive",
    win_weight=800,
    block_weight=1200,
    center_weight=1.2,
    disruption_weight=2.0,
)

STRATEGIC = PersonalityWeights(
    name="strategic",
    win_weight=900,
    block_weight=800,
    center_weight=1.5,
    disruption_weight=1.8,
)

ADAPTIVE = PersonalityWeights(
    name="adaptive",
    win_weight=850,
    block_weight=600,
    center_weight=1.3,
    disruption_weight=1.6,
    escalated_block_weight=1000,
)

PERSONALITIES: dict[str, PersonalityWeights] = {
    p.name: p for p in (AGGRESSIVE, DEFENSIVE, STRATEGIC, ADAPTIVE)
}


def get_personality(name: "str | PersonalityWeights") -> PersonalityWeights:
    """Look up a personality by name (case-insensitive)."""
    if isinstance(name, PersonalityWeights):
        return name
    key = name.strip().lower()
    if key not in PERSONALITIES:
        raise ValueError(f"Unknown personality: {name!r} (expected one of {sorted(PERSONALITIES)})")
    return PERSONALITIES[key]
