"""
Arena System for Match and Tournament Management

Plays agents against each other on QuadraXGame boards.
"""

import logging
import time
from dataclasses import dataclass
from typing import Literal

from quadrax.game import DEFAULT_MAX_MOVES, QuadraXGame

from .agents import Agent

logger = logging.getLogger(__name__)

GameOutcome = Literal["player1_win", "player2_win", "draw"]


@dataclass
class MatchResult:
    """Result of a match between two agents."""

    agent1_id: str
    agent2_id: str
    wins: dict[str, int]  # {agent1_id: count, agent2_id: count, 'draws': count}
    num_games: int
    total_moves: int = 0
    time_seconds: float = 0.0

    @property
    def agent1_wins(self) -> int:
        return self.wins.get(self.agent1_id, 0)

    @property
    def agent2_wins(self) -> int:
        return self.wins.get(self.agent2_id, 0)

    @property
    def draws(self) -> int:
        return self.wins.get("draws", 0)

    @property
    def agent1_score(self) -> float:
        """Score for agent1 (1 for win, 0.5 for draw, 0 for loss)."""
        return (self.agent1_wins + 0.5 * self.draws) / self.num_games

    @property
    def agent2_score(self) -> float:
        return (self.agent2_wins + 0.5 * self.draws) / self.num_games


@dataclass
class TournamentResult:
    """Result of a tournament between multiple agents."""

    results: list[MatchResult]
    agent_ids: list[str]
    time_seconds: float = 0.0

    def _tally(self, agent_id: str, own: bool) -> int:
        total = 0
        for result in self.results:
            if result.agent1_id == agent_id:
                total += result.agent1_wins if own else result.agent2_wins
            elif result.agent2_id == agent_id:
                total += result.agent2_wins if own else result.agent1_wins
        return total

    def get_match(self, agent1_id: str, agent2_id: str) -> MatchResult | None:
        """Get match result between two specific agents."""
        for result in self.results:
            if {result.agent1_id, result.agent2_id} == {agent1_id, agent2_id}:
                return result
        return None

    def get_wins(self, agent_id: str) -> int:
        return self._tally(agent_id, own=True)

    def get_losses(self, agent_id: str) -> int:
        return self._tally(agent_id, own=False)

    def get_draws(self, agent_id: str) -> int:
        return sum(r.draws for r in self.results if agent_id in (r.agent1_id, r.agent2_id))

    def get_points(self, agent_id: str) -> float:
        """1 point per win, half a point per draw."""
        return self.get_wins(agent_id) + 0.5 * self.get_draws(agent_id)

    def standings(self) -> list[tuple[str, float, int, int, int]]:
        """(id, points, wins, losses, draws), best first."""
        rows = [
            (
                agent_id,
                self.get_points(agent_id),
                self.get_wins(agent_id),
                self.get_losses(agent_id),
                self.get_draws(agent_id),
            )
            for agent_id in self.agent_ids
        ]
        rows.sort(key=lambda row: row[1], reverse=True)
        return rows


class Arena:
    """
    Manages matches between agents.

    Supports single matches and round-robin tournaments.
    """

    def __init__(self, agents: dict[str, Agent], max_moves: int = DEFAULT_MAX_MOVES):
        """
        Initialize the arena.

        Args:
            agents: Dictionary mapping agent IDs to Agent instances
            max_moves: Moves after which a game is declared drawn
        """
        self.agents = agents
        self.max_moves = max_moves

    def play_game(self, agent1: Agent, agent2: Agent) -> tuple[GameOutcome, int]:
        """
        Play a single game; agent1 moves first as player 1.

        Returns:
            Tuple of (result, total_moves)
        """
        game = QuadraXGame(max_moves=self.max_moves)
        agent1.reset()
        agent2.reset()

        while not game.is_terminal():
            agent = agent1 if game.current_player == 1 else agent2
            move = agent.get_move(game.board[:], game.phase, game.current_player)
            game.play(move)

        moves = len(game.move_history)
        if game.winner == 1:
            return "player1_win", moves
        if game.winner == 2:
            return "player2_win", moves
        return "draw", moves

    def run_match(
        self,
        agent1_id: str,
        agent2_id: str,
        num_games: int = 10,
        alternate_colors: bool = True,
    ) -> MatchResult:
        """
        Run a match between two agents.

        Args:
            agent1_id: ID of first agent
            agent2_id: ID of second agent
            num_games: Number of games to play
            alternate_colors: Whether to alternate who moves first

        Returns:
            MatchResult with win/loss/draw counts
        """
        agent1 = self.agents[agent1_id]
        agent2 = self.agents[agent2_id]

        wins: dict[str, int] = {agent1_id: 0, agent2_id: 0, "draws": 0}
        total_moves = 0
        start_time = time.time()

        for i in range(num_games):
            swapped = alternate_colors and i % 2 == 1
            if swapped:
                result, moves = self.play_game(agent2, agent1)
            else:
                result, moves = self.play_game(agent1, agent2)
            total_moves += moves

            if result == "draw":
                wins["draws"] += 1
            elif (result == "player1_win") != swapped:
                wins[agent1_id] += 1
            else:
                wins[agent2_id] += 1

        time_taken = time.time() - start_time
        logger.info(
            f"{agent1_id} vs {agent2_id}: {wins[agent1_id]}-{wins[agent2_id]}-{wins['draws']} "
            f"in {time_taken:.1f}s"
        )

        return MatchResult(
            agent1_id=agent1_id,
            agent2_id=agent2_id,
            wins=wins,
            num_games=num_games,
            total_moves=total_moves,
            time_seconds=time_taken,
        )

    def run_tournament(
        self,
        agent_ids: list[str] | None = None,
        num_games_per_match: int = 10,
    ) -> TournamentResult:
        """Run a round-robin tournament; each pair plays one match."""
        if agent_ids is None:
            agent_ids = list(self.agents.keys())

        results: list[MatchResult] = []
        start_time = time.time()

        for i, id1 in enumerate(agent_ids):
            for id2 in agent_ids[i + 1 :]:
                results.append(self.run_match(id1, id2, num_games=num_games_per_match))

        return TournamentResult(
            results=results,
            agent_ids=agent_ids,
            time_seconds=time.time() - start_time,
        )


def quick_match(agent1: Agent, agent2: Agent, num_games: int = 10) -> MatchResult:
    """Quick utility to run a match between two agents."""
    arena = Arena(agents={agent1.name: agent1, agent2.name: agent2})
    return arena.run_match(agent1.name, agent2.name, num_games=num_games)
