"""
Master Strategy Analyzer

Deterministic rule pipeline that exploits the fixed piece count. Stages run
in strict priority order and the first one that fires decides the move:

1. Immediate win
2. Critical block (or desperate counter-attack against a fork)
3. Pre-emptive formation prevention (placement turns only)
4. Fork-setup prevention
5. Move-safety filtering
6. Strategic positional control
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from quadrax.board import (
    CENTER_CELLS,
    CORNER_CELLS,
    EMPTY,
    Board,
    Move,
    Movement,
    Phase,
    Player,
    apply_move,
    count_pieces,
    opponent_of,
    target_cell,
)
from quadrax.errors import NoLegalMovesError
from quadrax.game import get_legal_moves, phase_after, turn_phase
from quadrax.oracle import check_win, find_winning_move, threat_level, winning_cells
from quadrax.patterns import LINES, PATTERNS_BY_CELL, SQUARES, PatternKind, one_move_threats
from quadrax.validation import require_valid_position

from .decision import Decision, ReasoningTrace, RuleTag, Urgency

logger = logging.getLogger(__name__)

# Own threat level a counter-attack must reach to force a reply
DESPERATE_COUNTER_THRESHOLD = 0.85

# Safety filter limits
MAX_IMMEDIATE_WINS = 1
MAX_ONE_MOVE_THREATS = 2
HIGH_RISK_THREATS = 2

URGENCY_CONFIDENCE = {
    Urgency.CRITICAL: 0.95,
    Urgency.HIGH: 0.9,
    Urgency.MEDIUM: 0.75,
    Urgency.LOW: 0.6,
}
WIN_CONFIDENCE = 1.0
LOST_CONFIDENCE = 0.1


@dataclass(frozen=True)
class ThreatForecast:
    """What the opponent can do after one of our moves."""

    move: Move
    immediate_wins: int
    one_move_threats: int

    @property
    def rejected(self) -> bool:
        return (
            self.immediate_wins > MAX_IMMEDIATE_WINS
            or self.one_move_threats > MAX_ONE_MOVE_THREATS
        )

    @property
    def high_risk(self) -> bool:
        return self.one_move_threats == HIGH_RISK_THREATS

    @property
    def damage(self) -> int:
        """Least-bad ordering key: wins dominate threats."""
        return 10 * self.immediate_wins + self.one_move_threats


@dataclass
class StrategicAnalysis:
    """Result of running the rule pipeline on one position."""

    recommended_move: Move
    trace: ReasoningTrace
    urgency: Urgency
    rule: RuleTag
    forced: bool = False
    forecasts: list[ThreatForecast] = field(default_factory=list)

    @property
    def confidence(self) -> float:
        if self.rule is RuleTag.IMMEDIATE_WIN:
            return WIN_CONFIDENCE
        if self.rule in (RuleTag.LIKELY_LOST, RuleTag.LEAST_BAD):
            return LOST_CONFIDENCE
        return URGENCY_CONFIDENCE[self.urgency]

    def to_decision(self) -> Decision:
        return Decision(
            move=self.recommended_move,
            confidence=self.confidence,
            trace=self.trace,
            source="master_strategy",
            urgency=self.urgency,
        )


def forecast_move(board: Board, phase: Phase, move: Move, player: Player) -> ThreatForecast:
    """
    Simulates `move` and every opponent reply to it.

    Counts the opponent's immediate winning replies, and the distinct
    one-move-away patterns the opponent can hold after any non-winning reply.
    """
    opponent = opponent_of(player)
    after = apply_move(board, move, player)
    immediate = len(winning_cells(after, opponent))

    reply_phase = phase_after(after, phase)
    threatened: set[str] = set()
    for reply in get_legal_moves(after, reply_phase, opponent):
        response = apply_move(after, reply, opponent)
        if check_win(response, opponent):
            continue
        threatened.update(p.label for p in one_move_threats(response, opponent))

    return ThreatForecast(move, immediate, len(threatened))


def _vacated(board: Board, move: Move) -> Board:
    if isinstance(move, Movement):
        base = board[:]
        base[move.from_cell] = EMPTY
        return base
    return board


def potential_formation_score(board: Board, move: Move, player: Player) -> int:
    """Σ over opponent-free patterns containing the target of own + empty cells."""
    opponent = opponent_of(player)
    base = _vacated(board, move)
    total = 0
    for pattern in PATTERNS_BY_CELL[target_cell(move)]:
        values = [base[c] for c in pattern.cells]
        if opponent in values:
            continue
        total += sum(1 for v in values if v == player or v == EMPTY)
    return total


def _cell_rank(cell: int) -> int:
    if cell in CENTER_CELLS:
        return 0
    if cell in CORNER_CELLS:
        return 1
    return 2


class MasterStrategy:
    """
    Rule-based analyzer. Stateless; one instance can serve any number of
    games.
    """

    name = "master_strategy"

    def analyze(
        self,
        board: Board,
        phase: Phase | str,
        player: Player,
        exclude: Iterable[Move] = (),
    ) -> StrategicAnalysis:
        """
        Runs the full pipeline and returns the recommended move.

        Raises:
            InvalidBoardError: Malformed board or piece counts.
            NoLegalMovesError: Every legal move is excluded.
        """
        phase = Phase.parse(phase)
        require_valid_position(board, phase, player)
        board = list(board)
        legal = self._candidates(board, phase, player, exclude)

        forced = self._forced(board, phase, player, legal)
        if forced is not None:
            return forced

        for stage in (self._formation_prevention, self._fork_prevention):
            result = stage(board, phase, player, legal)
            if result is not None:
                return result

        return self._filter_and_position(board, phase, player, legal)

    def find_forced_move(
        self,
        board: Board,
        phase: Phase | str,
        player: Player,
        exclude: Iterable[Move] = (),
    ) -> StrategicAnalysis | None:
        """Runs only the win and critical-block stages."""
        phase = Phase.parse(phase)
        require_valid_position(board, phase, player)
        board = list(board)
        legal = self._candidates(board, phase, player, exclude)
        return self._forced(board, phase, player, legal)

    def _candidates(
        self, board: Board, phase: Phase, player: Player, exclude: Iterable[Move]
    ) -> list[Move]:
        excluded = set(exclude)
        legal = [m for m in get_legal_moves(board, phase, player) if m not in excluded]
        if not legal:
            logger.error(f"No candidate moves for player {player} in {phase.value} phase")
            raise NoLegalMovesError(
                "No candidate moves available", player=player, phase=phase.value
            )
        return legal

    # ------------------------------------------------------------------
    # Stages 1-2
    # ------------------------------------------------------------------

    def _forced(
        self, board: Board, phase: Phase, player: Player, legal: list[Move]
    ) -> StrategicAnalysis | None:
        trace = ReasoningTrace()

        win = find_winning_move(board, player, legal, phase)
        if win is not None:
            trace.add(RuleTag.IMMEDIATE_WIN, f"{win} completes a pattern")
            logger.debug(f"Stage 1: immediate win {win}")
            return StrategicAnalysis(win, trace, Urgency.CRITICAL, RuleTag.IMMEDIATE_WIN, forced=True)

        opponent = opponent_of(player)
        threats = winning_cells(board, opponent)
        if not threats:
            return None

        if len(threats) == 1:
            (cell,) = threats
            blocks = [m for m in legal if target_cell(m) == cell]
            if blocks:
                forecasts = [self._quick_forecast(board, m, player) for m in blocks]
                best = min(forecasts, key=lambda f: f.damage)
                trace.add(RuleTag.CRITICAL_BLOCK, f"opponent wins at {cell}; blocking with {best.move}")
                logger.debug(f"Stage 2: critical block at {cell} via {best.move}")
                return StrategicAnalysis(
                    best.move, trace, Urgency.CRITICAL, RuleTag.CRITICAL_BLOCK, forced=True
                )

        cells = ", ".join(str(c) for c in sorted(threats))
        if len(threats) >= 2:
            for move in legal:
                if threat_level(apply_move(board, move, player), player) >= DESPERATE_COUNTER_THRESHOLD:
                    trace.add(
                        RuleTag.DESPERATE_COUNTER,
                        f"opponent threatens {cells}; counter-attacking with {move}",
                    )
                    logger.debug(f"Stage 2: desperate counter {move}")
                    return StrategicAnalysis(
                        move, trace, Urgency.CRITICAL, RuleTag.DESPERATE_COUNTER, forced=True
                    )

        forecasts = [self._quick_forecast(board, m, player) for m in legal]
        best = min(forecasts, key=lambda f: f.damage)
        trace.add(RuleTag.LIKELY_LOST, f"opponent threatens {cells}; least damaging move {best.move}")
        logger.info(f"Position likely lost for player {player}; playing {best.move}")
        return StrategicAnalysis(best.move, trace, Urgency.CRITICAL, RuleTag.LIKELY_LOST, forced=True)

    def _quick_forecast(self, board: Board, move: Move, player: Player) -> ThreatForecast:
        opponent = opponent_of(player)
        after = apply_move(board, move, player)
        return ThreatForecast(
            move, len(winning_cells(after, opponent)), len(one_move_threats(after, opponent))
        )

    # ------------------------------------------------------------------
    # Stages 3-4
    # ------------------------------------------------------------------

    def _formation_prevention(
        self, board: Board, phase: Phase, player: Player, legal: list[Move]
    ) -> StrategicAnalysis | None:
        if turn_phase(board, phase, player) is not Phase.PLACEMENT:
            return None

        opponent = opponent_of(player)
        targets = {target_cell(m): m for m in legal}
        forming = [
            square
            for square in SQUARES
            if sum(1 for c in square.cells if board[c] == opponent) >= 2
            and not any(board[c] == player for c in square.cells)
        ]
        if not forming:
            return None

        # Stable: patterns touching the center first
        forming.sort(key=lambda sq: 0 if any(c in CENTER_CELLS for c in sq.cells) else 1)

        for square in forming:
            vacant = [c for c in square.cells if c in targets]
            vacant.sort(key=lambda c: 0 if c in CENTER_CELLS else 1)
            for cell in vacant:
                move = targets[cell]
                if self._concedes_win(board, move, player):
                    continue
                trace = ReasoningTrace().add(
                    RuleTag.FORMATION_PREVENTION,
                    f"opponent building {square.label}; contesting {cell}",
                )
                logger.debug(f"Stage 3: contest {square.label} at {cell}")
                return StrategicAnalysis(move, trace, Urgency.HIGH, RuleTag.FORMATION_PREVENTION)
        return None

    def _fork_prevention(
        self, board: Board, phase: Phase, player: Player, legal: list[Move]
    ) -> StrategicAnalysis | None:
        opponent = opponent_of(player)
        if count_pieces(board, opponent) < 3:
            return None

        counts: dict[int, int] = {}
        for move in legal:
            cell = target_cell(move)
            if cell in counts:
                continue
            count = 0
            for pattern in PATTERNS_BY_CELL[cell]:
                opp = sum(1 for c in pattern.cells if board[c] == opponent)
                needed = 1 if pattern.kind is PatternKind.SQUARE else 2
                if opp >= needed:
                    count += 1
            counts[cell] = count

        ranked = sorted((c for c in counts if counts[c] >= 2), key=lambda c: counts[c], reverse=True)
        for cell in ranked:
            options = [
                self._quick_forecast(board, m, player) for m in legal if target_cell(m) == cell
            ]
            options = [f for f in options if f.immediate_wins == 0]
            if not options:
                continue
            best = min(options, key=lambda f: f.damage)
            trace = ReasoningTrace().add(
                RuleTag.FORK_PREVENTION,
                f"cell {cell} intersects {counts[cell]} opponent patterns; playing {best.move}",
            )
            logger.debug(f"Stage 4: fork prevention at {cell} via {best.move}")
            return StrategicAnalysis(best.move, trace, Urgency.HIGH, RuleTag.FORK_PREVENTION)
        return None

    def _concedes_win(self, board: Board, move: Move, player: Player) -> bool:
        return bool(winning_cells(apply_move(board, move, player), opponent_of(player)))

    # ------------------------------------------------------------------
    # Stages 5-6
    # ------------------------------------------------------------------

    def _filter_and_position(
        self, board: Board, phase: Phase, player: Player, legal: list[Move]
    ) -> StrategicAnalysis:
        forecasts = [forecast_move(board, phase, m, player) for m in legal]
        trace = ReasoningTrace()

        retained = [f for f in forecasts if not f.rejected]
        rejected = len(forecasts) - len(retained)
        if rejected:
            trace.add(RuleTag.SAFETY_FILTER, f"rejected {rejected} of {len(forecasts)} moves")
        logger.debug(f"Stage 5: {len(retained)} of {len(forecasts)} moves survive the safety filter")

        if not retained:
            best = min(forecasts, key=lambda f: f.damage)
            trace.add(
                RuleTag.LEAST_BAD,
                f"{best.move} concedes {best.immediate_wins} wins and {best.one_move_threats} threats",
            )
            return StrategicAnalysis(
                best.move, trace, Urgency.CRITICAL, RuleTag.LEAST_BAD, forecasts=forecasts
            )

        pool = [f for f in retained if f.immediate_wins == 0 and not f.high_risk]
        if not pool:
            pool = [f for f in retained if f.immediate_wins == 0]
        if not pool:
            pool = retained

        ranked = sorted(
            pool,
            key=lambda f: (
                _cell_rank(target_cell(f.move)),
                -potential_formation_score(board, f.move, player),
                f.one_move_threats,
            ),
        )
        best = ranked[0]
        urgency = self._positional_urgency(board, player)
        trace.add(
            RuleTag.POSITIONAL_CONTROL,
            f"{best.move} (potential {potential_formation_score(board, best.move, player)})",
        )
        logger.debug(f"Stage 6: positional control {best.move} urgency={urgency.name}")
        return StrategicAnalysis(
            best.move, trace, urgency, RuleTag.POSITIONAL_CONTROL, forecasts=forecasts
        )

    def _positional_urgency(self, board: Board, player: Player) -> Urgency:
        opponent = opponent_of(player)
        for pattern in SQUARES + LINES:
            own = sum(1 for c in pattern.cells if board[c] == player)
            opp = sum(1 for c in pattern.cells if board[c] == opponent)
            if own == 3 and opp == 0:
                return Urgency.CRITICAL

        building = 0
        for square in SQUARES:
            own = sum(1 for c in square.cells if board[c] == player)
            opp = sum(1 for c in square.cells if board[c] == opponent)
            if opp >= 2 and own == 0:
                building += 1
        if building >= 2:
            return Urgency.HIGH
        if building == 1:
            return Urgency.MEDIUM
        return Urgency.LOW
