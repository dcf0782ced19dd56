"""
Hybrid Validator

Independent second opinion on a proposed move. Five threat tests run on the
board the move produces; the worst danger level observed decides whether the
move is approved, rejected outright, or sent back for an alternative.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum, IntEnum

from quadrax.board import EMPTY, Board, Move, Phase, Player, apply_move, empty_cells, opponent_of, player_cells
from quadrax.errors import IllegalMoveError
from quadrax.game import get_legal_moves, is_legal_move, phase_after, turn_phase
from quadrax.oracle import check_win, find_all_winning_moves
from quadrax.patterns import completion_cell, one_move_threats, scan_threats
from quadrax.validation import require_valid_position

logger = logging.getLogger(__name__)

CRITICAL_PRIORITY = 150
MULTI_THREAT_COUNT = 2
FUTURE_RISK_COMBINATIONS = 3


class DangerLevel(IntEnum):
    SAFE = 0
    RISKY = 1
    DANGEROUS = 2
    FATAL = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class Recommendation(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    FIND_ALTERNATIVE = "find_alternative"


@dataclass(frozen=True)
class ValidationVerdict:
    """Outcome of validating one move."""

    danger_level: DangerLevel
    triggered_checks: tuple[str, ...]
    recommendation: Recommendation
    details: tuple[str, ...] = ()

    @property
    def is_approved(self) -> bool:
        return self.recommendation is Recommendation.APPROVE

    def to_dict(self) -> dict:
        return {
            "danger_level": self.danger_level.label,
            "triggered_checks": list(self.triggered_checks),
            "recommendation": self.recommendation.value,
            "details": list(self.details),
        }


def _recommend(level: DangerLevel) -> Recommendation:
    if level is DangerLevel.FATAL:
        return Recommendation.REJECT
    if level is DangerLevel.DANGEROUS:
        return Recommendation.FIND_ALTERNATIVE
    return Recommendation.APPROVE


def shared_completion_cells(board: Board, player: Player) -> dict[int, int]:
    """Completion cells claimed by two or more one-move-away patterns."""
    counts = Counter(completion_cell(board, p) for p in one_move_threats(board, player))
    return {cell: n for cell, n in counts.items() if cell is not None and n >= 2}


def future_relocation_risk(board: Board, player: Player) -> list[str]:
    """
    Relocations of `player`'s pieces that each yield two or more
    one-move-away patterns at once.
    """
    risky = []
    targets = empty_cells(board)
    for origin in player_cells(board, player):
        for target in targets:
            relocated = board[:]
            relocated[origin] = EMPTY
            relocated[target] = player
            count = len(one_move_threats(relocated, player))
            if count >= MULTI_THREAT_COUNT:
                risky.append(f"{origin}->{target} creates {count} threats")
    return risky


class HybridValidator:
    """
    Runs the five threat tests on the position after a proposed move.

    Verdicts depend only on the inputs, so validating the same move twice
    always yields the same verdict.
    """

    def validate(
        self,
        board: Board,
        phase: Phase | str,
        move: Move,
        mover: Player,
    ) -> ValidationVerdict:
        """
        Validate `move` for `mover`.

        Raises:
            InvalidBoardError: Malformed board.
            IllegalMoveError: The move is not in the legal set.
        """
        phase = Phase.parse(phase)
        require_valid_position(board, phase, mover)
        board = list(board)
        if not is_legal_move(board, phase, mover, move):
            raise IllegalMoveError(
                f"Move {move} is not legal for player {mover}", phase=phase.value
            )

        after = apply_move(board, move, mover)
        if check_win(after, mover):
            return ValidationVerdict(
                DangerLevel.SAFE, (), Recommendation.APPROVE, (f"{move} wins for player {mover}",)
            )

        opponent = opponent_of(mover)
        next_phase = phase_after(after, phase)
        level = DangerLevel.SAFE
        triggered: list[str] = []
        details: list[str] = []

        # 1. Immediate opponent win
        replies = find_all_winning_moves(after, opponent, get_legal_moves(after, next_phase, opponent))
        if replies:
            triggered.append("IMMEDIATE_OPPONENT_WIN")
            details.append(f"player {opponent} wins with " + ", ".join(str(r) for r in replies))
            level = DangerLevel.FATAL

        # 2. Critical threat priority
        records = scan_threats(after, opponent)
        if records and records[0].priority >= CRITICAL_PRIORITY:
            top = records[0]
            triggered.append(f"CRITICAL_THREAT_PRIORITY_{top.priority}")
            details.append(f"{top.pattern.label} has priority {top.priority}")
            level = max(level, DangerLevel.DANGEROUS)

        # 3. Multiple simultaneous threats
        threats = one_move_threats(after, opponent)
        if len(threats) >= MULTI_THREAT_COUNT:
            triggered.append(f"MULTIPLE_THREATS_{len(threats)}")
            details.append("threats: " + ", ".join(p.label for p in threats))
            level = max(level, DangerLevel.DANGEROUS)

        # 4. Fork setup
        shared = shared_completion_cells(after, opponent)
        if shared:
            triggered.append("FORK_SETUP_DETECTED")
            details.extend(f"fork at {cell} ({n} patterns)" for cell, n in sorted(shared.items()))
            level = max(level, DangerLevel.DANGEROUS)

        # 5. Future movement threats
        if turn_phase(board, phase, mover) is Phase.PLACEMENT:
            combinations = future_relocation_risk(after, opponent)
            if len(combinations) >= FUTURE_RISK_COMBINATIONS:
                triggered.append("FUTURE_MOVEMENT_THREAT")
                details.extend(combinations[:5])
                level = max(level, DangerLevel.RISKY)

        verdict = ValidationVerdict(level, tuple(triggered), _recommend(level), tuple(details))
        if verdict.is_approved:
            logger.debug(f"Validated {move} for player {mover}: {level.label}")
        else:
            logger.info(
                f"Validator flagged {move} for player {mover}: {level.label} ({', '.join(triggered)})"
            )
        return verdict
