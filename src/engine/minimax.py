"""
Minimax Search Engine

Depth-bounded alpha-beta search over both phases with a personality-weighted
static evaluator. Boards are copied per node; nothing is mutated in place.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable

from quadrax.board import (
    CENTER_CELLS,
    Board,
    Move,
    Phase,
    Player,
    apply_move,
    opponent_of,
)
from quadrax.game import get_legal_moves, phase_after
from quadrax.oracle import check_win, count_immediate_wins
from quadrax.patterns import SQUARES, one_move_threats

from .personalities import STRATEGIC, PersonalityWeights

logger = logging.getLogger(__name__)

WIN_SCORE = 10000
DEFAULT_DEPTH = 4

CENTER_UNIT = 50
DISRUPTION_UNIT = 25


@dataclass
class SearchResult:
    """Outcome of a root search."""

    best_move: Move | None
    score: float
    depth_reached: int
    is_winning: bool = False
    is_blocking: bool = False
    nodes: int = 0

    @property
    def confidence(self) -> float:
        """Maps the score onto [0, 1]; forced wins and losses sit at the ends."""
        if self.score >= WIN_SCORE:
            return 0.99
        if self.score <= -WIN_SCORE:
            return 0.05
        return 0.5 + 0.4 * math.tanh(self.score / 2000)


def disruption_score(board: Board, player: Player) -> int:
    """Credit for sitting inside squares the opponent is building."""
    opponent = opponent_of(player)
    total = 0
    for square in SQUARES:
        own = sum(1 for c in square.cells if board[c] == player)
        opp = sum(1 for c in square.cells if board[c] == opponent)
        if opp >= 2 and own >= 1:
            total += DISRUPTION_UNIT * opp
    return total


def evaluate_position(
    board: Board, player: Player, weights: PersonalityWeights = STRATEGIC
) -> float:
    """
    Static evaluation from `player`'s perspective.

    Combines own and opponent one-move-away pattern counts, center control
    and disruption of opponent squares.
    """
    opponent = opponent_of(player)
    own_wins = len(one_move_threats(board, player))
    opp_wins = len(one_move_threats(board, opponent))

    own_center = sum(1 for c in CENTER_CELLS if board[c] == player)
    opp_center = sum(1 for c in CENTER_CELLS if board[c] == opponent)
    center_delta = (own_center - opp_center) * CENTER_UNIT

    return (
        weights.win_weight * own_wins
        + weights.center_weight * center_delta
        + weights.disruption_weight * disruption_score(board, player)
        - weights.block_weight_for(opp_wins) * opp_wins
    )


def order_moves(
    board: Board,
    moves: list[Move],
    mover: Player,
    weights: PersonalityWeights,
) -> list[Move]:
    """Sorts moves by the mover's static evaluation, best first (stable)."""
    keyed = [
        (evaluate_position(apply_move(board, move, mover), mover, weights), move)
        for move in moves
    ]
    keyed.sort(key=lambda item: item[0], reverse=True)
    return [move for _, move in keyed]


def minimax_search(
    board: Board,
    phase: Phase,
    depth: int,
    alpha: float,
    beta: float,
    maximizing: bool,
    player: Player,
    current_player: Player,
    weights: PersonalityWeights = STRATEGIC,
    stats: dict | None = None,
) -> tuple[float, Move | None]:
    """Minimax search with alpha-beta pruning."""
    if stats is not None:
        stats["nodes"] = stats.get("nodes", 0) + 1

    # Terminal states
    if check_win(board, player):
        return float(WIN_SCORE + depth), None
    if check_win(board, opponent_of(player)):
        return float(-WIN_SCORE - depth), None

    if depth == 0:
        return evaluate_position(board, player, weights), None

    legal_moves = get_legal_moves(board, phase, current_player)
    if not legal_moves:
        return evaluate_position(board, player, weights), None

    if depth > 1:
        legal_moves = order_moves(board, legal_moves, current_player, weights)
    next_player = opponent_of(current_player)

    if maximizing:
        max_score = float("-inf")
        best_move = legal_moves[0]

        for move in legal_moves:
            new_board = apply_move(board, move, current_player)
            score, _ = minimax_search(
                new_board,
                phase_after(new_board, phase),
                depth - 1,
                alpha,
                beta,
                False,
                player,
                next_player,
                weights,
                stats,
            )

            if score > max_score:
                max_score = score
                best_move = move

            alpha = max(alpha, score)
            if beta <= alpha:
                break

        return max_score, best_move
    else:
        min_score = float("inf")
        best_move = legal_moves[0]

        for move in legal_moves:
            new_board = apply_move(board, move, current_player)
            score, _ = minimax_search(
                new_board,
                phase_after(new_board, phase),
                depth - 1,
                alpha,
                beta,
                True,
                player,
                next_player,
                weights,
                stats,
            )

            if score < min_score:
                min_score = score
                best_move = move

            beta = min(beta, score)
            if beta <= alpha:
                break

        return min_score, best_move


def search(
    board: Board,
    phase: Phase | str,
    player: Player,
    depth: int = DEFAULT_DEPTH,
    weights: PersonalityWeights = STRATEGIC,
    exclude: Iterable[Move] = (),
) -> SearchResult:
    """
    Searches `depth` plies for the best move of `player`.

    Args:
        board: Current board (not modified)
        phase: Current game phase
        player: Side to move
        depth: Search depth in plies (>= 1)
        weights: Personality weights for the static evaluator
        exclude: Root moves that must not be returned

    Returns:
        SearchResult; best_move is None when every root move is excluded.
    """
    phase = Phase.parse(phase)
    depth = max(1, depth)
    excluded = set(exclude)
    opponent = opponent_of(player)

    root_moves = [m for m in get_legal_moves(board, phase, player) if m not in excluded]
    if not root_moves:
        return SearchResult(best_move=None, score=0.0, depth_reached=0)

    if depth > 1:
        root_moves = order_moves(board, root_moves, player, weights)

    stats = {"nodes": 1}
    alpha = float("-inf")
    beta = float("inf")
    best_move = root_moves[0]
    best_score = float("-inf")

    for move in root_moves:
        child = apply_move(board, move, player)
        score, _ = minimax_search(
            child,
            phase_after(child, phase),
            depth - 1,
            alpha,
            beta,
            False,
            player,
            opponent,
            weights,
            stats,
        )
        if score > best_score:
            best_score = score
            best_move = move
        alpha = max(alpha, score)

    after = apply_move(board, best_move, player)
    result = SearchResult(
        best_move=best_move,
        score=best_score,
        depth_reached=depth,
        is_winning=check_win(after, player),
        is_blocking=count_immediate_wins(after, opponent) < count_immediate_wins(board, opponent),
        nodes=stats["nodes"],
    )
    logger.debug(
        f"[{weights.name}] depth={depth} best={best_move} score={best_score:.1f} nodes={result.nodes}"
    )
    return result
