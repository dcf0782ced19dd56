"""Tests for the master strategy rule pipeline."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from engine.decision import RuleTag, Urgency
from engine.master_strategy import (
    MasterStrategy,
    ThreatForecast,
    forecast_move,
    potential_formation_score,
)
from quadrax.board import Movement, Phase, Placement, apply_move, empty_board
from quadrax.errors import InvalidBoardError, NoLegalMovesError
from quadrax.game import get_legal_moves
from quadrax.oracle import threat_level, winning_cells


def make_board(p1=(), p2=()):
    board = empty_board()
    for cell in p1:
        board[cell] = 1
    for cell in p2:
        board[cell] = 2
    return board


@pytest.fixture
def strategy():
    return MasterStrategy()


class TestForcedStages:
    """Test stages 1 and 2."""

    def test_immediate_win(self, strategy):
        board = make_board(p1=[0, 1, 4], p2=[14, 15])
        analysis = strategy.analyze(board, Phase.PLACEMENT, 1)
        assert analysis.recommended_move == Placement(5)
        assert analysis.rule is RuleTag.IMMEDIATE_WIN
        assert analysis.confidence == 1.0
        assert analysis.forced

    def test_critical_block(self, strategy):
        board = make_board(p2=[0, 1, 4])
        analysis = strategy.analyze(board, Phase.PLACEMENT, 1)
        assert analysis.recommended_move == Placement(5)
        assert analysis.rule is RuleTag.CRITICAL_BLOCK
        assert analysis.urgency is Urgency.CRITICAL
        assert analysis.confidence == 0.95

    def test_win_beats_block(self, strategy):
        """Winning takes precedence over blocking."""
        board = make_board(p1=[8, 9, 12], p2=[0, 1, 4])
        assert strategy.analyze(board, Phase.PLACEMENT, 1).recommended_move == Placement(13)

    def test_desperate_counter(self, strategy):
        """Against two winning cells, build a 3-of-4 of our own."""
        board = make_board(p1=[9, 10, 12, 15], p2=[0, 1, 2, 4])
        analysis = strategy.analyze(board, Phase.MOVEMENT, 1)
        assert analysis.rule is RuleTag.DESPERATE_COUNTER
        assert analysis.recommended_move == Movement(9, 11)
        after = apply_move(board, analysis.recommended_move, 1)
        assert threat_level(after, 1) >= 0.85

    def test_likely_lost(self, strategy):
        """No counter available: least damaging move, low confidence."""
        board = make_board(p2=[0, 1, 2, 4])
        analysis = strategy.analyze(board, Phase.PLACEMENT, 1)
        assert analysis.rule is RuleTag.LIKELY_LOST
        assert analysis.recommended_move.cell in (3, 5)
        assert analysis.confidence == 0.1

    def test_find_forced_move_none(self, strategy):
        assert strategy.find_forced_move(empty_board(), Phase.PLACEMENT, 1) is None


class TestPreventionStages:
    """Test stages 3 and 4."""

    def test_formation_prevention(self, strategy):
        board = make_board(p1=[0], p2=[5, 6])
        analysis = strategy.analyze(board, Phase.PLACEMENT, 1)
        assert analysis.rule is RuleTag.FORMATION_PREVENTION
        assert analysis.urgency is Urgency.HIGH
        assert analysis.recommended_move == Placement(1)

    def test_formation_prevention_skipped_in_movement(self, strategy):
        """Full-handed movers do not run the placement-only stage."""
        board = make_board(p1=[0, 3, 12, 15], p2=[5, 6, 13, 14])
        analysis = strategy.analyze(board, Phase.MOVEMENT, 1)
        assert analysis.rule is not RuleTag.FORMATION_PREVENTION

    def test_fork_prevention(self, strategy):
        board = make_board(p1=[12], p2=[0, 3, 10])
        analysis = strategy.analyze(board, Phase.PLACEMENT, 1)
        assert analysis.rule is RuleTag.FORK_PREVENTION
        assert analysis.recommended_move.cell in (5, 6)
        assert analysis.urgency is Urgency.HIGH


class TestPositionalStages:
    """Test stages 5 and 6."""

    def test_opening_takes_center(self, strategy):
        analysis = strategy.analyze(empty_board(), Phase.PLACEMENT, 1)
        assert analysis.recommended_move == Placement(5)
        assert analysis.rule is RuleTag.POSITIONAL_CONTROL
        assert analysis.urgency is Urgency.LOW
        assert analysis.confidence == 0.6

    def test_exclude(self, strategy):
        analysis = strategy.analyze(empty_board(), Phase.PLACEMENT, 1, exclude=[Placement(5)])
        assert analysis.recommended_move != Placement(5)
        assert analysis.recommended_move.cell in (6, 9, 10)

    def test_recommendation_is_legal(self, strategy):
        board = make_board(p1=[0, 6, 9, 15], p2=[1, 4, 11, 14])
        analysis = strategy.analyze(board, Phase.MOVEMENT, 2)
        assert analysis.recommended_move in get_legal_moves(board, Phase.MOVEMENT, 2)

    def test_to_decision(self, strategy):
        decision = strategy.analyze(empty_board(), Phase.PLACEMENT, 1).to_decision()
        assert decision.source == "master_strategy"
        assert RuleTag.POSITIONAL_CONTROL in decision.trace

    @pytest.fixture
    def positional_only(self, strategy, monkeypatch):
        """Strategy with the prevention stages switched off."""
        monkeypatch.setattr(strategy, "_formation_prevention", lambda *args: None)
        monkeypatch.setattr(strategy, "_fork_prevention", lambda *args: None)
        return strategy

    def test_low_risk_beats_center(self, positional_only):
        """The open center cell leaves two threats, so an edge that halves them wins."""
        board = make_board(p1=[9], p2=[5, 6])
        analysis = positional_only.analyze(board, Phase.PLACEMENT, 1)
        forecasts = {f.move: f for f in analysis.forecasts}
        assert forecasts[Placement(10)].high_risk
        assert analysis.recommended_move.cell in (1, 2, 4, 7)
        assert forecasts[analysis.recommended_move].one_move_threats == 1
        assert analysis.rule is RuleTag.POSITIONAL_CONTROL

    def test_rejected_moves_filtered(self, positional_only):
        """Three open patterns around the pair reject moves that touch none of them."""
        board = make_board(p2=[5, 6])
        analysis = positional_only.analyze(board, Phase.PLACEMENT, 1)
        forecasts = {f.move: f for f in analysis.forecasts}
        assert forecasts[Placement(15)].rejected
        assert not forecasts[analysis.recommended_move].rejected
        assert analysis.recommended_move.cell in (9, 10)
        assert RuleTag.SAFETY_FILTER in analysis.trace


class TestForecasts:
    """Test threat forecasting."""

    def test_forecast_counts_wins(self):
        board = make_board(p2=[0, 1, 2, 4])
        forecast = forecast_move(board, Phase.PLACEMENT, Placement(15), 1)
        assert forecast.immediate_wins == 2
        assert forecast.rejected

    def test_forecast_thresholds(self):
        assert not ThreatForecast(Placement(0), 1, 2).rejected
        assert ThreatForecast(Placement(0), 0, 3).rejected
        assert ThreatForecast(Placement(0), 0, 2).high_risk
        assert ThreatForecast(Placement(0), 1, 2).damage == 12

    def test_potential_formation(self):
        """Patterns the opponent has entered contribute nothing."""
        assert potential_formation_score(empty_board(), Placement(5), 1) == 28
        board = make_board(p2=[0])
        assert potential_formation_score(board, Placement(5), 1) == 20


class TestErrors:
    def test_invalid_board(self, strategy):
        with pytest.raises(InvalidBoardError):
            strategy.analyze([0] * 9, Phase.PLACEMENT, 1)

    def test_everything_excluded(self, strategy):
        board = empty_board()
        with pytest.raises(NoLegalMovesError):
            strategy.analyze(board, Phase.PLACEMENT, 1, exclude=get_legal_moves(board, Phase.PLACEMENT, 1))

    def test_block_clears_threat(self, strategy):
        board = make_board(p1=[15], p2=[0, 1, 4])
        analysis = strategy.analyze(board, Phase.PLACEMENT, 1)
        assert not winning_cells(apply_move(board, analysis.recommended_move, 1), 2)

    def test_tuple_board(self, strategy):
        board = tuple(make_board(p1=[15], p2=[0, 1, 4]))
        assert strategy.analyze(board, Phase.PLACEMENT, 1).recommended_move == Placement(5)
        assert strategy.find_forced_move(board, Phase.PLACEMENT, 1).rule is RuleTag.CRITICAL_BLOCK
