"""
QuadraX Game Logic

Move generation and game flow for both phases. Placement drops a piece on
any empty cell; movement relocates one of the mover's pieces to any empty
cell, with no adjacency restriction.
"""

from typing import Literal

from .board import (
    PIECES_PER_PLAYER,
    Board,
    Move,
    Movement,
    Phase,
    Placement,
    Player,
    apply_move,
    board_to_string,
    count_pieces,
    empty_board,
    empty_cells,
    opponent_of,
    player_cells,
)
from .errors import IllegalMoveError
from .oracle import check_for_win_details

# Movement-phase games can cycle forever; the arena calls them drawn here
DEFAULT_MAX_MOVES = 64


def turn_phase(board: Board, phase: Phase, player: Player) -> Phase:
    """
    Phase in which `player`'s next move is made.

    A player that has already placed all of its pieces moves in the movement
    phase, even if the opponent is still placing.
    """
    if phase is Phase.MOVEMENT or count_pieces(board, player) >= PIECES_PER_PLAYER:
        return Phase.MOVEMENT
    return Phase.PLACEMENT


def phase_after(board: Board, phase: Phase) -> Phase:
    """Phase of the game once `board` has been reached. Never reverts."""
    if phase is Phase.MOVEMENT:
        return Phase.MOVEMENT
    if (
        count_pieces(board, 1) >= PIECES_PER_PLAYER
        and count_pieces(board, 2) >= PIECES_PER_PLAYER
    ):
        return Phase.MOVEMENT
    return Phase.PLACEMENT


def get_legal_moves(board: Board, phase: Phase, player: Player) -> list[Move]:
    """
    Returns every legal move for `player` in generation order.

    Placement: each empty cell, ascending. Movement: each (own cell, empty
    cell) pair, ordered by source then destination.
    """
    if turn_phase(board, phase, player) is Phase.PLACEMENT:
        return [Placement(cell) for cell in empty_cells(board)]

    targets = empty_cells(board)
    return [Movement(origin, target) for origin in player_cells(board, player) for target in targets]


def is_legal_move(board: Board, phase: Phase, player: Player, move: Move) -> bool:
    """Checks membership in the legal move set."""
    return move in get_legal_moves(board, phase, player)


def get_game_result(board: Board) -> Literal["player1_win", "player2_win", "ongoing"]:
    """
    Determines the current game state.

    Returns:
        "player1_win": Player 1 has won
        "player2_win": Player 2 has won
        "ongoing": Game is still in progress
    """
    details = check_for_win_details(board)
    if details is None:
        return "ongoing"
    return "player1_win" if details.winner == 1 else "player2_win"


class QuadraXGame:
    """
    Manages a QuadraX game state.

    Tracks the board, side to move, phase and move history in memory only.
    """

    def __init__(self, max_moves: int = DEFAULT_MAX_MOVES):
        self.max_moves = max_moves
        self.board: Board = empty_board()
        self.current_player: Player = 1
        self.phase: Phase = Phase.PLACEMENT
        self.move_history: list[Move] = []
        self.winner: Player | None = None
        self.is_draw: bool = False

    def reset(self) -> None:
        """Resets the game to initial state."""
        self.board = empty_board()
        self.current_player = 1
        self.phase = Phase.PLACEMENT
        self.move_history = []
        self.winner = None
        self.is_draw = False

    def get_legal_moves(self) -> list[Move]:
        """Returns list of valid moves for the side to move."""
        if self.is_terminal():
            return []
        return get_legal_moves(self.board, self.phase, self.current_player)

    def play(self, move: Move) -> None:
        """
        Applies a move for the side to move.

        Raises:
            IllegalMoveError: If the game is over or the move is not legal.
        """
        if self.is_terminal():
            raise IllegalMoveError("Game is already over", move=str(move))
        if move not in self.get_legal_moves():
            raise IllegalMoveError(
                f"Move {move} is not legal for player {self.current_player}",
                phase=self.phase.value,
            )

        self.board = apply_move(self.board, move, self.current_player)
        self.move_history.append(move)
        self.phase = phase_after(self.board, self.phase)

        details = check_for_win_details(self.board)
        if details is not None:
            self.winner = details.winner
        elif len(self.move_history) >= self.max_moves:
            self.is_draw = True

        self.current_player = opponent_of(self.current_player)

    def make_move(self, move: Move) -> bool:
        """
        Makes a move if it is legal.

        Returns:
            True if the move was made successfully, False if invalid.
        """
        try:
            self.play(move)
        except IllegalMoveError:
            return False
        return True

    def is_terminal(self) -> bool:
        """Returns True if the game is over."""
        return self.winner is not None or self.is_draw

    def get_result(self) -> float:
        """
        Returns the game result from player 1's perspective.

        Returns:
            1.0 if player 1 wins, -1.0 if player 2 wins, 0.0 otherwise.
        """
        if self.winner == 1:
            return 1.0
        elif self.winner == 2:
            return -1.0
        else:
            return 0.0

    def copy(self) -> "QuadraXGame":
        """Returns a deep copy of the game."""
        game = QuadraXGame(max_moves=self.max_moves)
        game.board = self.board[:]
        game.current_player = self.current_player
        game.phase = self.phase
        game.move_history = self.move_history[:]
        game.winner = self.winner
        game.is_draw = self.is_draw
        return game

    @classmethod
    def from_moves(cls, moves: list[Move], max_moves: int = DEFAULT_MAX_MOVES) -> "QuadraXGame":
        """Creates a game from a sequence of moves."""
        game = cls(max_moves=max_moves)
        for move in moves:
            if not game.make_move(move):
                raise IllegalMoveError(
                    f"Invalid move {move} at position {len(game.move_history)}"
                )
        return game

    def __str__(self) -> str:
        """Returns a string representation of the board."""
        lines = [board_to_string(self.board)]
        lines.append(f"Phase: {self.phase.value}, current player: {self.current_player}")
        if self.winner:
            lines.append(f"Winner: Player {self.winner}")
        elif self.is_draw:
            lines.append("Result: Draw")
        return "\n".join(lines)

