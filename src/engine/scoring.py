"""
Heuristic Move Scorer

Scores a single candidate move without search. The setup-denial bonus and
the opponent-fork penalty stop greedy scoring from walking into forks.
"""

import logging
import math

from quadrax.board import (
    CENTER_CELLS,
    EMPTY,
    Board,
    Move,
    Movement,
    Phase,
    Player,
    apply_move,
    opponent_of,
    target_cell,
)
from quadrax.game import get_legal_moves, phase_after
from quadrax.oracle import check_win, winning_cells
from quadrax.patterns import PATTERNS_BY_CELL

logger = logging.getLogger(__name__)

# Scoring weights
CENTER_BONUS = 8
THREAT_BUILD_BONUS = 100
PRESENCE_BONUS = 25
IMMEDIATE_WIN_BONUS = 1000
BLOCK_WIN_BONUS = 500
BLOCK_SETUP_BONUS = 80
MULTI_THREAT_BONUS = 200
SETUP_DENIAL_BONUS = 1200
FORK_PENALTY = -1500
SAFETY_BONUS = 100


def _vacate_source(board: Board, move: Move) -> Board:
    if isinstance(move, Movement):
        vacated = board[:]
        vacated[move.from_cell] = EMPTY
        return vacated
    return board


def allows_opponent_fork(board: Board, phase: Phase, player: Player) -> int:
    """
    Largest number of winning continuations any opponent reply creates.

    `board` is the position after `player` has moved. Returns 0 when no
    reply reaches two continuations.
    """
    opponent = opponent_of(player)
    reply_phase = phase_after(board, phase)
    worst = 0
    for reply in get_legal_moves(board, reply_phase, opponent):
        after = apply_move(board, reply, opponent)
        continuations = len(winning_cells(after, opponent))
        if continuations >= 2:
            worst = max(worst, continuations)
    return worst


def score_move(board: Board, move: Move, player: Player, phase: Phase | str) -> int:
    """
    Heuristic score of `move` for `player`. Higher is better.

    Movement moves are scored on the board with the source cell vacated, so
    a piece never counts towards patterns it is leaving.
    """
    phase = Phase.parse(phase)
    opponent = opponent_of(player)
    cell = target_cell(move)
    base = _vacate_source(board, move)
    score = 0

    if cell in CENTER_CELLS:
        score += CENTER_BONUS

    # Graduated completion over patterns the opponent has not entered
    threats_created = 0
    for pattern in PATTERNS_BY_CELL[cell]:
        own = opp = 0
        for c in pattern.cells:
            if base[c] == player:
                own += 1
            elif base[c] == opponent:
                opp += 1
        if opp:
            continue
        if own == 2:
            score += THREAT_BUILD_BONUS
            threats_created += 1
        elif own == 1:
            score += PRESENCE_BONUS

    after = apply_move(board, move, player)
    if check_win(after, player):
        score += IMMEDIATE_WIN_BONUS

    if threats_created >= 2:
        score += MULTI_THREAT_BONUS

    # Denying opponent progress
    for pattern in PATTERNS_BY_CELL[cell]:
        opp = sum(1 for c in pattern.cells if base[c] == opponent)
        empty = sum(1 for c in pattern.cells if base[c] == EMPTY)
        if opp == 3 and empty == 1:
            score += BLOCK_WIN_BONUS
        elif opp == 2 and empty == 2:
            score += BLOCK_SETUP_BONUS

    # Would the opponent standing on this cell give them a fork?
    occupied_by_opponent = base[:]
    occupied_by_opponent[cell] = opponent
    denies_setup = len(winning_cells(occupied_by_opponent, opponent)) >= 2
    if denies_setup:
        score += SETUP_DENIAL_BONUS

    if not check_win(after, player):
        fork_size = allows_opponent_fork(after, phase, player)
        if fork_size and not denies_setup:
            logger.debug(f"Move {move} lets player {opponent} reach {fork_size} winning continuations")
            score += FORK_PENALTY
        elif not denies_setup:
            score += SAFETY_BONUS

    return score


def score_all_moves(
    board: Board, moves: list[Move], player: Player, phase: Phase | str
) -> list[tuple[Move, int]]:
    """Scores every move, best first. Ties keep generation order."""
    scored = [(move, score_move(board, move, player, phase)) for move in moves]
    return sorted(scored, key=lambda item: item[1], reverse=True)


def score_to_confidence(score: float) -> float:
    """Maps a heuristic score onto [0.1, 0.9]."""
    return min(0.9, max(0.1, 0.5 + 0.4 * math.tanh(score / 1000)))
