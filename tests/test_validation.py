"""Tests for position validation and the error hierarchy."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quadrax.board import Phase, empty_board
from quadrax.errors import (
    ConsistencyViolationError,
    IllegalMoveError,
    InvalidBoardError,
    NoLegalMovesError,
    QuadraXError,
)
from quadrax.validation import require_valid_position, validate_board, validate_position


def make_board(p1=(), p2=()):
    board = empty_board()
    for cell in p1:
        board[cell] = 1
    for cell in p2:
        board[cell] = 2
    return board


class TestValidateBoard:
    """Test board validation."""

    def test_valid_empty(self):
        result = validate_board(empty_board())
        assert result.is_valid
        assert bool(result)
        assert result.errors == []

    def test_wrong_length(self):
        result = validate_board([0] * 15)
        assert not result
        assert "length" in result.errors[0]

    def test_bad_values(self):
        board = empty_board()
        board[3] = 7
        result = validate_board(board)
        assert not result.is_valid
        assert "cell value at 3" in result.errors[0]

    def test_not_a_sequence(self):
        assert not validate_board("0" * 16)

    def test_too_many_pieces(self):
        result = validate_board(make_board(p1=[0, 1, 2, 5, 6]))
        assert not result.is_valid
        assert "5 pieces" in result.errors[0]

    def test_both_players_won(self):
        result = validate_board(make_board(p1=[0, 1, 2, 3], p2=[12, 13, 14, 15]))
        assert not result.is_valid

    def test_finished_game_warns(self):
        result = validate_board(make_board(p1=[0, 1, 4, 5]))
        assert result.is_valid
        assert result.warnings


class TestValidatePosition:
    """Test phase-aware validation."""

    def test_movement_needs_all_pieces(self):
        result = validate_position(make_board(p1=[0, 1, 2], p2=[4, 5, 6, 7]), Phase.MOVEMENT, 1)
        assert not result.is_valid

    def test_movement_valid(self):
        board = make_board(p1=[0, 2, 8, 10], p2=[1, 3, 9, 11])
        assert validate_position(board, Phase.MOVEMENT, 2)

    def test_uneven_placement_allowed(self):
        """Placement positions need not alternate strictly."""
        assert validate_position(make_board(p2=[0, 1, 4]), Phase.PLACEMENT, 1)

    def test_bad_mover(self):
        assert not validate_position(empty_board(), Phase.PLACEMENT, 3)

    def test_boolean_mover(self):
        result = validate_position(empty_board(), Phase.PLACEMENT, True)
        assert not result.is_valid
        assert "Invalid mover" in result.errors[0]

    def test_tuple_board(self):
        assert validate_position(tuple(make_board(p1=[0], p2=[5])), Phase.PLACEMENT, 1)


class TestRequireValidPosition:
    """Test the raising wrapper."""

    def test_valid_passes(self):
        require_valid_position(empty_board(), Phase.PLACEMENT, 1)

    def test_invalid_board(self):
        with pytest.raises(InvalidBoardError):
            require_valid_position([0] * 10, Phase.PLACEMENT, 1)

    def test_consistency_violation(self):
        board = make_board(p1=[0, 1, 2, 3], p2=[12, 13, 14, 15])
        with pytest.raises(ConsistencyViolationError):
            require_valid_position(board, Phase.MOVEMENT, 1)


class TestErrors:
    """Test the error hierarchy."""

    def test_hierarchy(self):
        assert issubclass(InvalidBoardError, QuadraXError)
        assert issubclass(InvalidBoardError, ValueError)
        assert issubclass(IllegalMoveError, ValueError)
        assert issubclass(NoLegalMovesError, RuntimeError)
        assert issubclass(ConsistencyViolationError, QuadraXError)

    def test_context_in_message(self):
        error = IllegalMoveError("Cell 5 is not empty", player=1)
        assert str(error) == "Cell 5 is not empty (player=1)"
        assert error.code == "ILLEGAL_MOVE"
        assert error.context == {"player": 1}

    def test_plain_message(self):
        assert str(NoLegalMovesError("stuck")) == "stuck"
