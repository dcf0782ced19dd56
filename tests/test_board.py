"""Tests for the board model, win patterns and win oracle."""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quadrax.board import (
    Movement,
    Phase,
    Placement,
    apply_move,
    board_from_string,
    board_to_array,
    board_to_string,
    empty_board,
    parse_move,
    target_cell,
)
from quadrax.errors import ConsistencyViolationError, IllegalMoveError
from quadrax.game import get_legal_moves
from quadrax.oracle import (
    check_for_win_details,
    check_win,
    count_immediate_wins,
    find_all_winning_moves,
    find_winning_move,
    threat_level,
    winning_cells,
)
from quadrax.patterns import (
    ALL_PATTERNS,
    LINES,
    PATTERN_MATRIX,
    SQUARES,
    PatternKind,
    ThreatRecord,
    occupancy_counts,
    one_move_threats,
    scan_threats,
)


def make_board(p1=(), p2=()):
    board = empty_board()
    for cell in p1:
        board[cell] = 1
    for cell in p2:
        board[cell] = 2
    return board


def brute_force_win(board, player) -> bool:
    """Independent win check on the 4x4 grid."""
    grid = np.asarray(board).reshape(4, 4) == player
    for r in range(3):
        for c in range(3):
            if grid[r : r + 2, c : c + 2].all():
                return True
    if grid.all(axis=1).any() or grid.all(axis=0).any():
        return True
    return bool(np.diag(grid).all() or np.diag(np.fliplr(grid)).all())


class TestPatterns:
    """Test the pattern tables."""

    def test_counts(self):
        """9 squares and 10 lines, squares first."""
        assert len(SQUARES) == 9
        assert len(LINES) == 10
        assert ALL_PATTERNS[:9] == SQUARES
        assert all(p.kind is PatternKind.SQUARE for p in SQUARES)
        assert all(p.kind is PatternKind.LINE for p in LINES)

    def test_squares_are_2x2(self):
        """Every square spans two adjacent rows and columns."""
        for square in SQUARES:
            rows = {c // 4 for c in square.cells}
            cols = {c % 4 for c in square.cells}
            assert len(rows) == 2 and max(rows) - min(rows) == 1
            assert len(cols) == 2 and max(cols) - min(cols) == 1

    def test_patterns_distinct(self):
        """No pattern appears twice."""
        assert len({frozenset(p.cells) for p in ALL_PATTERNS}) == 19

    def test_incidence_matrix(self):
        """Matrix rows mark exactly the pattern cells and cannot be written."""
        assert PATTERN_MATRIX.shape == (19, 16)
        assert (PATTERN_MATRIX.sum(axis=1) == 4).all()
        with pytest.raises(ValueError):
            PATTERN_MATRIX[0, 0] = 0

    def test_occupancy_counts(self):
        """Counts per pattern match a manual count."""
        board = make_board(p1=[0, 1, 4])
        counts = occupancy_counts(board, 1)
        assert counts[0] == 3  # square (0,1,4,5)
        assert counts[len(SQUARES)] == 2  # row 0

    def test_label(self):
        """Labels combine kind and index."""
        assert SQUARES[4].label == "square_4"
        assert 10 in SQUARES[4]


class TestThreatRecords:
    """Test threat records and their priority scale."""

    def test_near_complete_square(self):
        """Uncontested 3-of-4 square reaches 150."""
        record = ThreatRecord(SQUARES[0], own=3, opponent=0, empty=1)
        assert record.priority == 150
        assert record.is_one_move_away

    def test_near_complete_line(self):
        """Uncontested 3-of-4 line stays below 150."""
        record = ThreatRecord(LINES[0], own=3, opponent=0, empty=1)
        assert record.priority == 140

    def test_setup(self):
        """Uncontested 2-of-4 adds 20."""
        assert ThreatRecord(SQUARES[0], own=2, opponent=0, empty=2).priority == 120

    def test_contested(self):
        """Contested patterns have no priority."""
        assert ThreatRecord(SQUARES[0], own=3, opponent=1, empty=0).priority == 0

    def test_scan_sorted(self):
        """scan_threats puts the most urgent pattern first."""
        board = make_board(p2=[0, 1, 4])
        records = scan_threats(board, 2)
        assert records[0].pattern == SQUARES[0]
        assert records[0].priority == 150
        priorities = [r.priority for r in records]
        assert priorities == sorted(priorities, reverse=True)

    def test_one_move_threats(self):
        """Only 3-own-1-empty patterns count."""
        board = make_board(p1=[0, 1, 2, 4])
        labels = {p.label for p in one_move_threats(board, 1)}
        assert labels == {"square_0", "line_0"}


class TestCheckWin:
    """Test win detection."""

    def test_empty_board(self):
        """No winner on empty board."""
        board = empty_board()
        assert not check_win(board, 1)
        assert not check_win(board, 2)

    def test_every_pattern(self):
        """Filling any pattern wins for that player only."""
        for pattern in ALL_PATTERNS:
            board = make_board(p1=pattern.cells)
            assert check_win(board, 1), pattern.label
            assert not check_win(board, 2)

    def test_three_of_four(self):
        """Three cells of a square are not a win."""
        assert not check_win(make_board(p1=[0, 1, 4]), 1)

    def test_matches_brute_force(self):
        """check_win agrees with an independent grid scan on random boards."""
        rng = np.random.default_rng(7)
        for _ in range(2000):
            board = [int(v) for v in rng.integers(0, 3, size=16)]
            for player in (1, 2):
                assert check_win(board, player) == brute_force_win(board, player), board


class TestWinDetails:
    """Test detailed win reporting."""

    def test_square_details(self):
        """Square wins report the square's cells."""
        details = check_for_win_details(make_board(p1=[5, 6, 9, 10]))
        assert details.winner == 1
        assert details.pattern_kind is PatternKind.SQUARE
        assert details.cells == (5, 6, 9, 10)

    def test_line_details(self):
        """Line wins are found after the squares."""
        details = check_for_win_details(make_board(p2=[3, 6, 9, 12]))
        assert details.winner == 2
        assert details.pattern_kind is PatternKind.LINE

    def test_no_winner(self):
        """None when nobody has won."""
        assert check_for_win_details(make_board(p1=[0, 1], p2=[2, 3])) is None

    def test_both_players_win(self):
        """Two winners is a consistency violation."""
        board = make_board(p1=[0, 1, 2, 3], p2=[12, 13, 14, 15])
        with pytest.raises(ConsistencyViolationError):
            check_for_win_details(board)

    def test_single_player_scan(self):
        """Restricting to one player skips the consistency check."""
        board = make_board(p1=[0, 1, 2, 3], p2=[12, 13, 14, 15])
        assert check_for_win_details(board, 2).winner == 2


class TestFindWinningMove:
    """Test winning move search."""

    def setup_method(self):
        # Player 1 wins by 2->5 (square) or 4->3 (row)
        self.board = make_board(p1=[0, 1, 2, 4], p2=[8, 10, 13, 15])

    def test_first_in_generation_order(self):
        """The first winning move in generation order is returned."""
        legal = get_legal_moves(self.board, Phase.MOVEMENT, 1)
        assert find_winning_move(self.board, 1, legal, Phase.MOVEMENT) == Movement(2, 5)

    def test_all_winning_moves(self):
        """Every winning move is listed in generation order."""
        legal = get_legal_moves(self.board, Phase.MOVEMENT, 1)
        assert find_all_winning_moves(self.board, 1, legal) == [Movement(2, 5), Movement(4, 3)]

    def test_order_follows_input(self):
        """Reversing the candidates reverses the preference."""
        legal = get_legal_moves(self.board, Phase.MOVEMENT, 1)
        assert find_winning_move(self.board, 1, reversed(legal), "movement") == Movement(4, 3)

    def test_no_winner(self):
        """None when no move wins."""
        board = make_board(p1=[0, 15])
        legal = get_legal_moves(board, Phase.PLACEMENT, 1)
        assert find_winning_move(board, 1, legal) is None

    def test_placement_win(self):
        """Completing a square during placement."""
        board = make_board(p1=[0, 1, 4])
        legal = get_legal_moves(board, Phase.PLACEMENT, 1)
        assert find_winning_move(board, 1, legal) == Placement(5)

    def test_unknown_phase(self):
        """The phase only has to be valid; the moves decide the result."""
        legal = get_legal_moves(self.board, Phase.MOVEMENT, 1)
        assert find_winning_move(self.board, 1, legal, Phase.PLACEMENT) == Movement(2, 5)
        with pytest.raises(ValueError):
            find_winning_move(self.board, 1, legal, "endgame")

    def test_winning_cells(self):
        """Winning cells count distinct completions."""
        assert winning_cells(self.board, 1) == {3, 5}
        assert count_immediate_wins(self.board, 1) == 2
        assert count_immediate_wins(self.board, 2) == 0


class TestThreatLevel:
    """Test the 0-1 threat scale."""

    def test_empty(self):
        assert threat_level(empty_board(), 1) == 0.0

    def test_square_three(self):
        assert threat_level(make_board(p1=[0, 1, 4]), 1) == 0.9

    def test_line_three(self):
        """A 3-of-4 row outranks the 2-of-4 squares it overlaps."""
        assert threat_level(make_board(p1=[0, 1, 2]), 1) == 0.85

    def test_square_two(self):
        assert threat_level(make_board(p1=[0, 1]), 1) == 0.6

    def test_contested(self):
        """Contested patterns are ignored."""
        assert threat_level(make_board(p1=[0, 1, 4], p2=[5]), 1) == 0.5


class TestBoardHelpers:
    """Test board utilities and move parsing."""

    def test_parse_move_shapes(self):
        """Moves parse from ints, strings, dicts and tuples."""
        assert parse_move(5) == Placement(5)
        assert parse_move("5") == Placement(5)
        assert parse_move("6->9") == Movement(6, 9)
        assert parse_move("6-9") == Movement(6, 9)
        assert parse_move({"from": 6, "to": 9}) == Movement(6, 9)
        assert parse_move((6, 9)) == Movement(6, 9)
        assert parse_move(Movement(1, 2)) == Movement(1, 2)

    def test_parse_move_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_move(True)
        with pytest.raises(ValueError):
            parse_move("a->b")

    def test_move_str(self):
        assert str(Placement(5)) == "5"
        assert str(Movement(6, 9)) == "6->9"
        assert target_cell(Movement(6, 9)) == 9

    def test_apply_does_not_mutate(self):
        """apply_move returns a new board."""
        board = empty_board()
        new_board = apply_move(board, Placement(3), 1)
        assert board[3] == 0
        assert new_board[3] == 1

    def test_apply_movement(self):
        """Movement vacates the source."""
        board = make_board(p1=[0])
        new_board = apply_move(board, Movement(0, 15), 1)
        assert new_board[0] == 0 and new_board[15] == 1

    def test_apply_errors(self):
        """Occupied targets and foreign sources are illegal."""
        board = make_board(p1=[0], p2=[1])
        with pytest.raises(IllegalMoveError):
            apply_move(board, Placement(1), 1)
        with pytest.raises(IllegalMoveError):
            apply_move(board, Movement(1, 5), 1)
        with pytest.raises(IllegalMoveError):
            apply_move(board, Movement(0, 1), 1)

    def test_string_roundtrip(self):
        """board_from_string reads digits and symbols."""
        board = make_board(p1=[0, 5], p2=[15])
        assert board_from_string("1000 0100 0000 0002") == board
        assert board_from_string(board_to_string(board)) == board

    def test_string_errors(self):
        with pytest.raises(ValueError):
            board_from_string("123")
        with pytest.raises(ValueError):
            board_from_string("z" * 16)

    def test_to_array(self):
        array = board_to_array(make_board(p1=[5]))
        assert array.shape == (4, 4)
        assert array[1, 1] == 1
