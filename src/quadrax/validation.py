"""
Position Validation Utilities

Rejects malformed board snapshots before any evaluator sees them.
"""

from dataclasses import dataclass

from .board import CELL_COUNT, PIECES_PER_PLAYER, Board, Phase, Player, count_pieces
from .errors import ConsistencyViolationError, InvalidBoardError
from .oracle import check_win


@dataclass
class ValidationResult:
    """Result of validating a board or position."""

    is_valid: bool
    errors: list[str]
    warnings: list[str]

    def __bool__(self) -> bool:
        return self.is_valid


def validate_board(board: Board) -> ValidationResult:
    """
    Validate that a board is a well-formed QuadraX snapshot.

    Checks:
    - Board has exactly 16 cells
    - Only valid cell values (0, 1, 2)
    - No player has more than 4 pieces
    - At most one player occupies a winning pattern
    """
    errors = []
    warnings = []

    if not isinstance(board, (list, tuple)):
        errors.append(f"Board must be a sequence, got {type(board).__name__}")
        return ValidationResult(False, errors, warnings)

    if len(board) != CELL_COUNT:
        errors.append(f"Invalid board length: {len(board)} (expected {CELL_COUNT})")
        return ValidationResult(False, errors, warnings)

    for cell, value in enumerate(board):
        if isinstance(value, bool) or value not in (0, 1, 2):
            errors.append(f"Invalid cell value at {cell}: {value!r}")

    if errors:
        return ValidationResult(False, errors, warnings)

    for player in (1, 2):
        pieces = count_pieces(board, player)
        if pieces > PIECES_PER_PLAYER:
            errors.append(f"Player {player} has {pieces} pieces (max {PIECES_PER_PLAYER})")

    if errors:
        return ValidationResult(False, errors, warnings)

    if check_win(board, 1) and check_win(board, 2):
        errors.append("Both players occupy a winning pattern")
    elif check_win(board, 1) or check_win(board, 2):
        warnings.append("Board already contains a completed pattern")

    return ValidationResult(len(errors) == 0, errors, warnings)


def validate_position(board: Board, phase: Phase, mover: Player) -> ValidationResult:
    """
    Validate a board together with the phase and the side to move.

    Movement requires both players to have all 4 pieces on the board.
    Placement requires the mover to still have a piece in hand unless the
    opponent is still placing (the mover then moves instead).
    """
    result = validate_board(board)
    errors = list(result.errors)
    warnings = list(result.warnings)

    if not result.is_valid:
        return ValidationResult(False, errors, warnings)

    if isinstance(mover, bool) or mover not in (1, 2):
        errors.append(f"Invalid mover: {mover!r}")
        return ValidationResult(False, errors, warnings)

    p1_count = count_pieces(board, 1)
    p2_count = count_pieces(board, 2)

    if phase is Phase.MOVEMENT:
        if p1_count != PIECES_PER_PLAYER or p2_count != PIECES_PER_PLAYER:
            errors.append(
                f"Movement phase requires {PIECES_PER_PLAYER} pieces each: P1={p1_count}, P2={p2_count}"
            )
    elif p1_count == PIECES_PER_PLAYER and p2_count == PIECES_PER_PLAYER:
        warnings.append("All pieces placed; the game is in the movement phase")

    return ValidationResult(len(errors) == 0, errors, warnings)


def require_valid_position(board: Board, phase: Phase, mover: Player) -> None:
    """
    Raise if the position is malformed.

    Raises:
        ConsistencyViolationError: Both players hold a winning pattern.
        InvalidBoardError: Any other problem.
    """
    result = validate_position(board, phase, mover)
    if result.is_valid:
        return
    if any("Both players" in error for error in result.errors):
        raise ConsistencyViolationError("Both players occupy a winning pattern")
    raise InvalidBoardError("; ".join(result.errors))
