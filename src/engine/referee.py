"""
Referee

Arbitrates between the evaluators and guards the result with the hybrid
validator. One select_move() call covers a full decision cycle:

    forced move? -> propose -> validate -> approved
                                        -> rejected: exclude, re-propose
                                        -> no safe move: least-bad fallback
"""

import logging
from typing import Iterable

from quadrax.board import Board, Move, Phase, Player, apply_move, opponent_of
from quadrax.errors import NoLegalMovesError
from quadrax.game import get_legal_moves
from quadrax.oracle import count_immediate_wins
from quadrax.patterns import one_move_threats
from quadrax.validation import require_valid_position

from .config import EngineConfig
from .decision import Decision, MoveDecision, ReasoningTrace, RuleTag, Urgency
from .master_strategy import MasterStrategy, StrategicAnalysis
from .minimax import search
from .personalities import get_personality
from .scoring import score_move, score_to_confidence
from .validator import HybridValidator, ValidationVerdict

logger = logging.getLogger(__name__)

FORCED_BLOCK_CONFIDENCE = 0.95
NO_SAFE_MOVE_CONFIDENCE = 0.1


class Referee:
    """
    Selects and validates one move per call. Holds configuration only, so
    a single instance may be shared across games.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        strategy: MasterStrategy | None = None,
        validator: HybridValidator | None = None,
    ):
        self.config = config or EngineConfig()
        self.strategy = strategy or MasterStrategy()
        self.validator = validator or HybridValidator()

    def select_move(
        self,
        board: Board,
        phase: Phase | str,
        mover: Player,
        search_depth: int | None = None,
        personality: str | None = None,
    ) -> MoveDecision:
        """
        Choose a move for `mover`.

        Args:
            board: 16-cell board (not modified)
            phase: Current phase
            mover: Side to move
            search_depth: Minimax depth (default: config.search_depth)
            personality: Restrict minimax proposals to one personality

        Returns:
            MoveDecision. A position with no safe move still yields a move,
            tagged NO_SAFE_MOVE with CRITICAL urgency and low confidence.

        Raises:
            InvalidBoardError: Malformed board.
            NoLegalMovesError: No legal move exists.
        """
        phase = Phase.parse(phase)
        require_valid_position(board, phase, mover)
        board = list(board)
        legal = get_legal_moves(board, phase, mover)
        if not legal:
            logger.error(f"No legal moves for player {mover} in {phase.value} phase")
            raise NoLegalMovesError("No legal moves available", player=mover, phase=phase.value)

        depth = search_depth if search_depth is not None else self.config.search_depth
        names = [get_personality(personality).name] if personality else list(self.config.personalities)
        trace = ReasoningTrace()

        forced = self.strategy.find_forced_move(board, phase, mover)
        if forced is not None:
            decision = self._resolve_forced(board, phase, mover, forced, trace)
            if decision is not None:
                return decision

        excluded: set[Move] = set()
        validated: dict[Move, ValidationVerdict] = {}
        attempts = 0
        pending: list[Decision] = []

        while attempts <= self.config.max_reproposals and len(excluded) < len(legal):
            pending = [d for d in pending if d.move not in excluded]
            if not pending:
                pending = self._propose(board, phase, mover, excluded, depth, names)
            if not pending:
                break

            proposal = max(pending, key=lambda d: d.confidence)
            verdict = self.validator.validate(board, phase, proposal.move, mover)
            validated[proposal.move] = verdict
            attempts += 1

            if verdict.is_approved:
                trace.extend(proposal.trace)
                trace.add(
                    RuleTag.REFEREE_SELECTED,
                    f"{proposal.source} proposed {proposal.move} ({proposal.confidence:.2f})",
                )
                logger.info(
                    f"Player {mover} plays {proposal.move} from {proposal.source} "
                    f"(confidence {proposal.confidence:.2f}, {verdict.danger_level.label})"
                )
                return MoveDecision(
                    move=proposal.move,
                    reasoning=trace,
                    confidence=proposal.confidence,
                    urgency=proposal.urgency,
                    source=proposal.source,
                    verdict=verdict,
                )

            excluded.add(proposal.move)
            trace.add(
                RuleTag.VALIDATION_REJECTED,
                f"{proposal.source} proposed {proposal.move}: {verdict.danger_level.label} "
                f"({', '.join(verdict.triggered_checks)})",
            )
            logger.warning(
                f"Rejected {proposal.move} from {proposal.source}: {verdict.recommendation.value}"
            )

        safe = self._safety_scan(board, phase, mover, legal, validated, trace)
        if safe is not None:
            return safe

        return self._least_bad(board, phase, mover, legal, validated, trace)

    def validate_move(
        self, board: Board, phase: Phase | str, move: Move, mover: Player
    ) -> ValidationVerdict:
        return self.validator.validate(board, phase, move, mover)

    def _resolve_forced(
        self,
        board: Board,
        phase: Phase,
        mover: Player,
        forced: StrategicAnalysis,
        trace: ReasoningTrace,
    ) -> MoveDecision | None:
        if forced.rule is RuleTag.IMMEDIATE_WIN:
            trace.extend(forced.trace)
            logger.info(f"Player {mover} wins with {forced.recommended_move}")
            return MoveDecision(
                move=forced.recommended_move,
                reasoning=trace,
                confidence=1.0,
                urgency=Urgency.CRITICAL,
                source="master_strategy",
                verdict=self.validator.validate(board, phase, forced.recommended_move, mover),
            )

        if forced.rule is RuleTag.CRITICAL_BLOCK:
            verdict = self.validator.validate(board, phase, forced.recommended_move, mover)
            if verdict.is_approved:
                trace.extend(forced.trace)
                logger.info(f"Player {mover} blocks with {forced.recommended_move}")
                return MoveDecision(
                    move=forced.recommended_move,
                    reasoning=trace,
                    confidence=FORCED_BLOCK_CONFIDENCE,
                    urgency=Urgency.CRITICAL,
                    source="master_strategy",
                    verdict=verdict,
                )
            trace.add(
                RuleTag.VALIDATION_REJECTED,
                f"forced block {forced.recommended_move}: {verdict.danger_level.label}",
            )
        return None

    def _propose(
        self,
        board: Board,
        phase: Phase,
        mover: Player,
        excluded: Iterable[Move],
        depth: int,
        names: list[str],
    ) -> list[Decision]:
        """One Decision per evaluator. Master strategy first so it wins ties."""
        excluded = set(excluded)
        proposals: list[Decision] = []

        analysis = self.strategy.analyze(board, phase, mover, exclude=excluded)
        proposals.append(analysis.to_decision())

        for name in names:
            weights = self.config.weights_for(name)
            result = search(board, phase, mover, depth=depth, weights=weights, exclude=excluded)
            if result.best_move is None:
                continue
            detail = f"{name} depth {result.depth_reached}: {result.best_move} scores {result.score:.0f}"
            if result.is_blocking:
                detail += " (blocks)"
            proposals.append(
                Decision(
                    move=result.best_move,
                    confidence=result.confidence,
                    trace=ReasoningTrace().add(RuleTag.MINIMAX, detail),
                    source=f"minimax:{name}",
                    urgency=Urgency.CRITICAL if result.is_winning else Urgency.MEDIUM,
                )
            )

        candidates = [m for m in get_legal_moves(board, phase, mover) if m not in excluded]
        if candidates:
            scored = [(score_move(board, m, mover, phase), m) for m in candidates]
            best_score, best_move = max(scored, key=lambda item: item[0])
            proposals.append(
                Decision(
                    move=best_move,
                    confidence=score_to_confidence(best_score),
                    trace=ReasoningTrace().add(RuleTag.SCORER, f"{best_move} scores {best_score}"),
                    source="scorer",
                    urgency=Urgency.LOW,
                )
            )

        for proposal in proposals:
            logger.debug(f"Proposal {proposal.source}: {proposal.move} ({proposal.confidence:.2f})")
        return proposals

    def _safety_scan(
        self,
        board: Board,
        phase: Phase,
        mover: Player,
        legal: list[Move],
        validated: dict[Move, ValidationVerdict],
        trace: ReasoningTrace,
    ) -> MoveDecision | None:
        approved: list[tuple[int, Move, ValidationVerdict]] = []
        for move in legal:
            verdict = validated.get(move)
            if verdict is None:
                verdict = self.validator.validate(board, phase, move, mover)
                validated[move] = verdict
            if verdict.is_approved:
                approved.append((score_move(board, move, mover, phase), move, verdict))

        if not approved:
            return None

        score, move, verdict = max(approved, key=lambda item: item[0])
        trace.add(RuleTag.SAFETY_SCAN, f"{len(approved)} of {len(legal)} moves approved; {move} scores {score}")
        logger.info(f"Player {mover} plays {move} after safety scan")
        return MoveDecision(
            move=move,
            reasoning=trace,
            confidence=score_to_confidence(score),
            urgency=Urgency.HIGH,
            source="safety_scan",
            verdict=verdict,
        )

    def _least_bad(
        self,
        board: Board,
        phase: Phase,
        mover: Player,
        legal: list[Move],
        validated: dict[Move, ValidationVerdict],
        trace: ReasoningTrace,
    ) -> MoveDecision:
        opponent = opponent_of(mover)
        preferred = self.strategy.analyze(board, phase, mover).recommended_move

        damage = {}
        for move in legal:
            after = apply_move(board, move, mover)
            damage[move] = (count_immediate_wins(after, opponent), len(one_move_threats(after, opponent)))
        min_wins = min(wins for wins, _ in damage.values())

        def key(move: Move) -> tuple:
            wins, threats = damage[move]
            return (wins > min_wins, 10 * wins + threats, move != preferred)

        move = min(legal, key=key)
        wins, threats = damage[move]
        trace.add(
            RuleTag.NO_SAFE_MOVE,
            f"no approved move; {move} concedes {wins} wins and {threats} threats",
        )
        logger.warning(f"No safe move for player {mover}; falling back to {move}")
        return MoveDecision(
            move=move,
            reasoning=trace,
            confidence=NO_SAFE_MOVE_CONFIDENCE,
            urgency=Urgency.CRITICAL,
            source="least_bad",
            verdict=validated.get(move) or self.validator.validate(board, phase, move, mover),
        )
