"""
Decision Types

Common output shapes shared by every evaluator: urgency levels, structured
reasoning traces and the Decision / MoveDecision records the referee merges.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Iterator

from quadrax.board import Move

if TYPE_CHECKING:
    from .validator import ValidationVerdict


class Urgency(IntEnum):
    """How pressing a recommended move is. Ordered, so max() works."""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3


class RuleTag(str, Enum):
    """Which rule produced a trace entry."""

    IMMEDIATE_WIN = "immediate_win"
    CRITICAL_BLOCK = "critical_block"
    DESPERATE_COUNTER = "desperate_counter"
    LIKELY_LOST = "likely_lost"
    FORMATION_PREVENTION = "formation_prevention"
    FORK_PREVENTION = "fork_prevention"
    SAFETY_FILTER = "safety_filter"
    POSITIONAL_CONTROL = "positional_control"
    LEAST_BAD = "least_bad"
    MINIMAX = "minimax"
    SCORER = "scorer"
    REFEREE_SELECTED = "referee_selected"
    VALIDATION_REJECTED = "validation_rejected"
    SAFETY_SCAN = "safety_scan"
    NO_SAFE_MOVE = "no_safe_move"


@dataclass(frozen=True)
class TraceEntry:
    tag: RuleTag
    detail: str = ""

    def render(self) -> str:
        label = self.tag.value.upper().replace("_", " ")
        return f"{label}: {self.detail}" if self.detail else label


@dataclass
class ReasoningTrace:
    """
    Ordered record of the rules that fired while choosing a move.

    Control flow only appends entries; turning them into text is left to
    render() so callers can display or inspect the tags separately.
    """

    entries: list[TraceEntry] = field(default_factory=list)

    def add(self, tag: RuleTag, detail: str = "") -> "ReasoningTrace":
        self.entries.append(TraceEntry(tag, detail))
        return self

    def extend(self, other: "ReasoningTrace") -> "ReasoningTrace":
        self.entries.extend(other.entries)
        return self

    @property
    def tags(self) -> list[RuleTag]:
        return [entry.tag for entry in self.entries]

    def render(self, separator: str = "\n") -> str:
        return separator.join(entry.render() for entry in self.entries)

    def __contains__(self, tag: RuleTag) -> bool:
        return any(entry.tag is tag for entry in self.entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class Decision:
    """A single evaluator's proposal."""

    move: Move
    confidence: float
    trace: ReasoningTrace
    source: str
    urgency: Urgency = Urgency.LOW

    def __post_init__(self):
        self.confidence = min(1.0, max(0.0, float(self.confidence)))


@dataclass
class MoveDecision:
    """Final answer returned by the referee for one turn."""

    move: Move
    reasoning: ReasoningTrace
    confidence: float
    urgency: Urgency
    source: str
    verdict: "ValidationVerdict | None" = None

    def to_dict(self) -> dict:
        return {
            "move": str(self.move),
            "confidence": round(self.confidence, 4),
            "urgency": self.urgency.name,
            "source": self.source,
            "reasoning": [
                {"tag": entry.tag.value, "detail": entry.detail} for entry in self.reasoning
            ],
            "verdict": self.verdict.to_dict() if self.verdict is not None else None,
        }
