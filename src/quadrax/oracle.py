"""
Win Oracle

Pure win and threat detection for both pattern families. Every function
here is side-effect free and bounded by 19 pattern checks of 4 cells.
"""

from dataclasses import dataclass
from typing import Iterable

from .board import EMPTY, Board, Move, Phase, Player, apply_move, opponent_of
from .errors import ConsistencyViolationError
from .patterns import ALL_PATTERNS, LINES, SQUARES, PatternKind, WinPattern


@dataclass(frozen=True)
class WinDetails:
    """Who won and with which pattern."""

    winner: Player
    pattern_kind: PatternKind
    cells: tuple[int, int, int, int]


def _holds(board: Board, pattern: WinPattern, player: int) -> bool:
    cells = pattern.cells
    return (
        board[cells[0]] == player
        and board[cells[1]] == player
        and board[cells[2]] == player
        and board[cells[3]] == player
    )


def check_win(board: Board, player: Player) -> bool:
    """Returns True if `player` fully occupies any square or line."""
    for pattern in ALL_PATTERNS:
        if _holds(board, pattern, player):
            return True
    return False


def check_for_win_details(board: Board, player: Player | None = None) -> WinDetails | None:
    """
    Finds the first completed pattern, squares before lines.

    Args:
        board: Board to inspect
        player: Restrict the scan to one player (None = both)

    Returns:
        WinDetails for the first pattern found, or None.

    Raises:
        ConsistencyViolationError: When scanning both players and each of
            them holds a winning pattern.
    """
    candidates: tuple[Player, ...] = (player,) if player is not None else (1, 2)
    found: WinDetails | None = None

    for family in (SQUARES, LINES):
        for pattern in family:
            for check_player in candidates:
                if _holds(board, pattern, check_player):
                    details = WinDetails(check_player, pattern.kind, pattern.cells)
                    if player is not None:
                        return details
                    if found is None:
                        found = details
                    elif found.winner != check_player:
                        raise ConsistencyViolationError(
                            "Both players occupy a winning pattern",
                            first=list(found.cells),
                            second=list(pattern.cells),
                        )
    return found


def find_winning_move(
    board: Board,
    player: Player,
    legal_moves: Iterable[Move],
    phase: Phase | str = Phase.PLACEMENT,
) -> Move | None:
    """
    Returns the first move, in the given order, that wins for `player`.

    When several moves win, which one is returned depends only on the order
    of `legal_moves`; callers must not rely on any other preference.

    `phase` is only checked for validity: the moves already carry their
    placement or movement shape. An unknown phase raises ValueError.
    """
    Phase.parse(phase)
    for move in legal_moves:
        if check_win(apply_move(board, move, player), player):
            return move
    return None


def find_all_winning_moves(
    board: Board,
    player: Player,
    legal_moves: Iterable[Move],
) -> list[Move]:
    """Returns every winning move in generation order."""
    return [m for m in legal_moves if check_win(apply_move(board, m, player), player)]


def winning_cells(board: Board, player: Player) -> set[int]:
    """
    Empty cells that would complete a pattern for `player`.

    A pattern qualifies when `player` holds three of its cells and the fourth
    is empty. With four pieces per side the completing piece always comes
    from outside the pattern, so each cell here is one distinct winning
    reply.
    """
    cells: set[int] = set()
    for pattern in ALL_PATTERNS:
        own = 0
        gap = -1
        for cell in pattern.cells:
            value = board[cell]
            if value == player:
                own += 1
            elif value == EMPTY:
                gap = cell
        if own == 3 and gap >= 0:
            cells.add(gap)
    return cells


def count_immediate_wins(board: Board, player: Player) -> int:
    """Number of distinct winning replies available to `player`."""
    return len(winning_cells(board, player))


def threat_level(board: Board, player: Player) -> float:
    """
    How threatening the position is for `player` on a 0-1 scale.

    Uncontested 3-of-4 squares score 0.9 and lines 0.85; uncontested
    2-of-4 squares score 0.6 and lines 0.5. The maximum over all patterns
    is returned.
    """
    other = opponent_of(player)
    level = 0.0
    for pattern in ALL_PATTERNS:
        own = sum(1 for c in pattern.cells if board[c] == player)
        opp = sum(1 for c in pattern.cells if board[c] == other)
        if opp:
            continue
        is_square = pattern.kind is PatternKind.SQUARE
        if own == 3:
            level = max(level, 0.9 if is_square else 0.85)
        elif own == 2:
            level = max(level, 0.6 if is_square else 0.5)
    return level
