"""
QuadraX Decision Engine

Move selection and validation on top of the quadrax board model:
- Heuristic scorer, minimax personalities and the master strategy pipeline
- Hybrid validator that vets every proposed move
- Referee that arbitrates between them
"""

from quadrax.board import Board, Move, Phase, Player, parse_move
from quadrax.game import get_legal_moves
from quadrax.oracle import check_win
from quadrax.oracle import find_winning_move as _find_winning_move

from .config import EngineConfig
from .decision import Decision, MoveDecision, ReasoningTrace, RuleTag, TraceEntry, Urgency
from .master_strategy import MasterStrategy, StrategicAnalysis, ThreatForecast
from .minimax import SearchResult, evaluate_position, search
from .personalities import PERSONALITIES, PersonalityWeights, get_personality
from .referee import Referee
from .scoring import score_move
from .session import GameSessions
from .validator import DangerLevel, HybridValidator, Recommendation, ValidationVerdict


def select_move(
    board: Board,
    phase: Phase | str,
    mover: Player,
    search_depth: int | None = None,
    personality: str | None = None,
    config: EngineConfig | None = None,
) -> MoveDecision:
    """Single entry point for one engine turn."""
    return Referee(config).select_move(
        board, phase, mover, search_depth=search_depth, personality=personality
    )


def validate_move(board: Board, phase: Phase | str, proposed_move, mover: Player) -> ValidationVerdict:
    """Vet a human or engine move before it is committed."""
    return HybridValidator().validate(board, phase, parse_move(proposed_move), mover)


def find_winning_move(
    board: Board,
    player: Player,
    legal_moves: list[Move] | None = None,
    phase: Phase | str = Phase.PLACEMENT,
) -> Move | None:
    """First winning move in generation order (all legal moves by default)."""
    phase = Phase.parse(phase)
    if legal_moves is None:
        legal_moves = get_legal_moves(board, phase, player)
    return _find_winning_move(board, player, [parse_move(m) for m in legal_moves], phase)


__all__ = [
    # Facade
    "select_move",
    "validate_move",
    "check_win",
    "find_winning_move",
    # Referee & validator
    "Referee",
    "HybridValidator",
    "ValidationVerdict",
    "DangerLevel",
    "Recommendation",
    # Evaluators
    "MasterStrategy",
    "StrategicAnalysis",
    "ThreatForecast",
    "search",
    "SearchResult",
    "evaluate_position",
    "score_move",
    "PersonalityWeights",
    "PERSONALITIES",
    "get_personality",
    # Decisions
    "Decision",
    "MoveDecision",
    "ReasoningTrace",
    "TraceEntry",
    "RuleTag",
    "Urgency",
    # Config & sessions
    "EngineConfig",
    "GameSessions",
]
