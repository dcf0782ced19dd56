"""
QuadraX Board Model

Board representation, win patterns, the win oracle and move generation for
both game phases.
"""

from .board import (
    BOARD_SIZE,
    CELL_COUNT,
    CENTER_CELLS,
    CORNER_CELLS,
    EMPTY,
    PIECES_PER_PLAYER,
    Board,
    Move,
    Movement,
    Phase,
    Placement,
    Player,
    apply_move,
    board_from_string,
    board_to_array,
    board_to_string,
    count_pieces,
    empty_board,
    empty_cells,
    opponent_of,
    parse_move,
    player_cells,
    target_cell,
)
from .errors import (
    ConsistencyViolationError,
    IllegalMoveError,
    InvalidBoardError,
    NoLegalMovesError,
    QuadraXError,
)
from .game import QuadraXGame, get_game_result, get_legal_moves, is_legal_move, phase_after, turn_phase
from .oracle import (
    WinDetails,
    check_for_win_details,
    check_win,
    count_immediate_wins,
    find_all_winning_moves,
    find_winning_move,
    threat_level,
    winning_cells,
)
from .patterns import (
    ALL_PATTERNS,
    LINES,
    SQUARES,
    PatternKind,
    ThreatRecord,
    WinPattern,
    one_move_threats,
    scan_threats,
)
from .validation import ValidationResult, require_valid_position, validate_board, validate_position

__all__ = [
    # Board
    "BOARD_SIZE",
    "CELL_COUNT",
    "CENTER_CELLS",
    "CORNER_CELLS",
    "EMPTY",
    "PIECES_PER_PLAYER",
    "Board",
    "Move",
    "Movement",
    "Phase",
    "Placement",
    "Player",
    "apply_move",
    "board_from_string",
    "board_to_array",
    "board_to_string",
    "count_pieces",
    "empty_board",
    "empty_cells",
    "opponent_of",
    "parse_move",
    "player_cells",
    "target_cell",
    # Errors
    "QuadraXError",
    "InvalidBoardError",
    "IllegalMoveError",
    "NoLegalMovesError",
    "ConsistencyViolationError",
    # Game
    "QuadraXGame",
    "get_game_result",
    "get_legal_moves",
    "is_legal_move",
    "phase_after",
    "turn_phase",
    # Oracle
    "WinDetails",
    "check_win",
    "check_for_win_details",
    "count_immediate_wins",
    "find_all_winning_moves",
    "find_winning_move",
    "threat_level",
    "winning_cells",
    # Patterns
    "ALL_PATTERNS",
    "SQUARES",
    "LINES",
    "PatternKind",
    "WinPattern",
    "ThreatRecord",
    "one_move_threats",
    "scan_threats",
    # Validation
    "ValidationResult",
    "validate_board",
    "validate_position",
    "require_valid_position",
]
