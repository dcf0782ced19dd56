"""
Win Pattern Tables

The 19 four-cell winning patterns of QuadraX: 9 overlapping 2x2 squares
(primary win condition) followed by 10 lines (4 rows, 4 columns and the two
long diagonals). Squares always come first so every scan checks the dominant
win path before the rare line wins.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .board import CELL_COUNT, EMPTY, Board, Player, board_to_array, opponent_of


class PatternKind(str, Enum):
    SQUARE = "square"
    LINE = "line"


@dataclass(frozen=True)
class WinPattern:
    """An immutable group of four cells that wins when fully occupied."""

    kind: PatternKind
    index: int
    cells: tuple[int, int, int, int]

    @property
    def label(self) -> str:
        return f"{self.kind.value}_{self.index}"

    def __contains__(self, cell: int) -> bool:
        return cell in self.cells


SQUARE_CELLS: tuple[tuple[int, int, int, int], ...] = (
    (0, 1, 4, 5), (1, 2, 5, 6), (2, 3, 6, 7),
    (4, 5, 8, 9), (5, 6, 9, 10), (6, 7, 10, 11),
    (8, 9, 12, 13), (9, 10, 13, 14), (10, 11, 14, 15),
)

LINE_CELLS: tuple[tuple[int, int, int, int], ...] = (
    (0, 1, 2, 3), (4, 5, 6, 7), (8, 9, 10, 11), (12, 13, 14, 15),  # rows
    (0, 4, 8, 12), (1, 5, 9, 13), (2, 6, 10, 14), (3, 7, 11, 15),  # columns
    (0, 5, 10, 15), (3, 6, 9, 12),  # diagonals
)

SQUARES: tuple[WinPattern, ...] = tuple(
    WinPattern(PatternKind.SQUARE, i, cells) for i, cells in enumerate(SQUARE_CELLS)
)
LINES: tuple[WinPattern, ...] = tuple(
    WinPattern(PatternKind.LINE, i, cells) for i, cells in enumerate(LINE_CELLS)
)
ALL_PATTERNS: tuple[WinPattern, ...] = SQUARES + LINES

# Patterns containing each cell, in table order
PATTERNS_BY_CELL: tuple[tuple[WinPattern, ...], ...] = tuple(
    tuple(p for p in ALL_PATTERNS if cell in p.cells) for cell in range(CELL_COUNT)
)


def _build_incidence_matrix() -> np.ndarray:
    matrix = np.zeros((len(ALL_PATTERNS), CELL_COUNT), dtype=np.int8)
    for row, pattern in enumerate(ALL_PATTERNS):
        matrix[row, list(pattern.cells)] = 1
    matrix.setflags(write=False)
    return matrix


# Row i marks the cells of ALL_PATTERNS[i]
PATTERN_MATRIX: np.ndarray = _build_incidence_matrix()

# Priority scale used to rank blocking urgency
SQUARE_BASE_PRIORITY = 100
LINE_BASE_PRIORITY = 90
NEAR_COMPLETE_BONUS = 50
SETUP_BONUS = 20


def occupancy_counts(board: Board, value: int) -> np.ndarray:
    """Returns, per pattern, how many of its cells hold `value`."""
    mask = (board_to_array(board).ravel() == value).astype(np.int8)
    return PATTERN_MATRIX @ mask


@dataclass(frozen=True)
class ThreatRecord:
    """How close one player is to completing a single pattern."""

    pattern: WinPattern
    own: int
    opponent: int
    empty: int

    @property
    def contested(self) -> bool:
        return self.opponent > 0

    @property
    def is_one_move_away(self) -> bool:
        return self.own == 3 and self.empty == 1

    @property
    def priority(self) -> int:
        """
        Blocking urgency on an absolute scale.

        Squares start at 100 and lines at 90. An uncontested 3-of-4 adds 50
        (so only a near-complete square reaches 150) and an uncontested
        2-of-4 adds 20. Contested or empty patterns carry no priority.
        """
        if self.contested or self.own == 0:
            return 0
        base = SQUARE_BASE_PRIORITY if self.pattern.kind is PatternKind.SQUARE else LINE_BASE_PRIORITY
        if self.own == 3 and self.empty == 1:
            return base + NEAR_COMPLETE_BONUS
        if self.own == 2 and self.empty == 2:
            return base + SETUP_BONUS
        return base


def scan_threats(board: Board, player: Player) -> list[ThreatRecord]:
    """
    Builds a ThreatRecord for every pattern from `player`'s point of view.

    Records are sorted by priority, highest first; ties keep table order
    (squares before lines).
    """
    own = occupancy_counts(board, player)
    opp = occupancy_counts(board, opponent_of(player))
    empty = occupancy_counts(board, EMPTY)
    records = [
        ThreatRecord(pattern, int(own[i]), int(opp[i]), int(empty[i]))
        for i, pattern in enumerate(ALL_PATTERNS)
    ]
    return sorted(records, key=lambda r: r.priority, reverse=True)


def one_move_threats(board: Board, player: Player) -> list[WinPattern]:
    """Patterns where `player` holds 3 cells and the 4th is empty."""
    threats = []
    for pattern in ALL_PATTERNS:
        own = empty = 0
        for cell in pattern.cells:
            value = board[cell]
            if value == player:
                own += 1
            elif value == EMPTY:
                empty += 1
        if own == 3 and empty == 1:
            threats.append(pattern)
    return threats


def completion_cell(board: Board, pattern: WinPattern) -> int | None:
    """Returns the single empty cell of a pattern, if there is exactly one."""
    empties = [cell for cell in pattern.cells if board[cell] == EMPTY]
    return empties[0] if len(empties) == 1 else None
