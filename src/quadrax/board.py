"""
Board Representation

Canonical QuadraX board model: a flat 16-cell list in row-major order
(cell = row * 4 + column). Cell values are 0 (empty), 1 (player A) and
2 (player B), the same layout the game client sends over the wire.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, TypeAlias, Union

import numpy as np

from .errors import IllegalMoveError

# Board dimensions
BOARD_SIZE = 4
CELL_COUNT = BOARD_SIZE * BOARD_SIZE
PIECES_PER_PLAYER = 4

EMPTY = 0

# Type aliases
Board: TypeAlias = list[int]  # 16 cells, 0=empty, 1=player A, 2=player B
Player: TypeAlias = Literal[1, 2]

# Cell groups used by positional heuristics
CENTER_CELLS: tuple[int, ...] = (5, 6, 9, 10)
CORNER_CELLS: tuple[int, ...] = (0, 3, 12, 15)


class Phase(str, Enum):
    """Game phase. Movement starts once both players have placed 4 pieces."""

    PLACEMENT = "placement"
    MOVEMENT = "movement"

    @classmethod
    def parse(cls, value: "Phase | str") -> "Phase":
        if isinstance(value, Phase):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown phase: {value!r}") from None


@dataclass(frozen=True)
class Placement:
    """Drop a new piece on an empty cell."""

    cell: int

    def __str__(self) -> str:
        return str(self.cell)


@dataclass(frozen=True)
class Movement:
    """Relocate one of the mover's pieces to any empty cell."""

    from_cell: int
    to_cell: int

    def __str__(self) -> str:
        return f"{self.from_cell}->{self.to_cell}"


Move: TypeAlias = Union[Placement, Movement]


def target_cell(move: Move) -> int:
    """Returns the cell a move puts a piece on."""
    if isinstance(move, Placement):
        return move.cell
    return move.to_cell


def parse_move(value: "Move | int | str | dict | tuple") -> Move:
    """
    Builds a Move from the loose shapes callers tend to pass around.

    Accepts a Move, an int (placement), "a->b" / "a-b" strings, a
    {"from": a, "to": b} mapping, or an (a, b) tuple.
    """
    if isinstance(value, (Placement, Movement)):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot interpret move: {value!r}")
    if isinstance(value, int):
        return Placement(value)
    if isinstance(value, dict):
        return Movement(int(value["from"]), int(value["to"]))
    if isinstance(value, tuple) and len(value) == 2:
        return Movement(int(value[0]), int(value[1]))
    if isinstance(value, str):
        text = value.strip()
        for separator in ("->", "-", ":"):
            if separator in text:
                origin, _, destination = text.partition(separator)
                return Movement(int(origin), int(destination))
        return Placement(int(text))
    raise ValueError(f"Cannot interpret move: {value!r}")


def opponent_of(player: Player) -> Player:
    """Returns the other player."""
    return 2 if player == 1 else 1


def empty_board() -> Board:
    """Creates an empty board."""
    return [EMPTY] * CELL_COUNT


def player_cells(board: Board, player: int) -> list[int]:
    """Returns the cells holding the given value, ascending."""
    return [cell for cell, value in enumerate(board) if value == player]


def empty_cells(board: Board) -> list[int]:
    """Returns the empty cells, ascending."""
    return player_cells(board, EMPTY)


def count_pieces(board: Board, player: int) -> int:
    """Counts the pieces a player has on the board."""
    return sum(1 for value in board if value == player)


def apply_move(board: Board, move: Move, player: Player) -> Board:
    """
    Applies a move and returns a new board (does not modify the original).

    Raises:
        IllegalMoveError: If the target is occupied or, for a movement, the
            source does not hold one of `player`'s pieces.
    """
    new_board = board[:]
    if isinstance(move, Placement):
        if not 0 <= move.cell < CELL_COUNT or board[move.cell] != EMPTY:
            raise IllegalMoveError(f"Cell {move.cell} is not empty", player=player)
        new_board[move.cell] = player
        return new_board

    if not 0 <= move.from_cell < CELL_COUNT or board[move.from_cell] != player:
        raise IllegalMoveError(
            f"Cell {move.from_cell} does not hold a piece of player {player}",
            move=str(move),
        )
    if not 0 <= move.to_cell < CELL_COUNT or board[move.to_cell] != EMPTY:
        raise IllegalMoveError(f"Cell {move.to_cell} is not empty", move=str(move))
    new_board[move.from_cell] = EMPTY
    new_board[move.to_cell] = player
    return new_board


def board_to_array(board: Board) -> np.ndarray:
    """Returns the board as a (4, 4) int8 array."""
    return np.asarray(board, dtype=np.int8).reshape(BOARD_SIZE, BOARD_SIZE)


def board_from_string(text: str) -> Board:
    """
    Parses a board from a 16-character string.

    Digits 0/1/2 are taken literally; '.', 'X' and 'O' are accepted as
    aliases for empty, player 1 and player 2. Whitespace, commas and '|'
    separators are ignored.
    """
    aliases = {".": 0, "X": 1, "O": 2}
    board: Board = []
    for char in text:
        if char in " ,|\n\t[]":
            continue
        if char.upper() in aliases:
            board.append(aliases[char.upper()])
        elif char.isdigit():
            board.append(int(char))
        else:
            raise ValueError(f"Invalid board character: {char!r}")
    if len(board) != CELL_COUNT:
        raise ValueError(f"Board string has {len(board)} cells (expected {CELL_COUNT})")
    return board


def board_to_string(board: Board) -> str:
    """Returns a human-readable string representation of the board."""
    symbols = {EMPTY: ".", 1: "X", 2: "O"}
    lines = []
    for row in range(BOARD_SIZE):
        cells = board[row * BOARD_SIZE : (row + 1) * BOARD_SIZE]
        lines.append(" ".join(symbols.get(value, "?") for value in cells))
    return "\n".join(lines)
