"""
Agent Implementations for Engine Evaluation

Provides agent base class and wrappers for the different move selectors:
- RandomAgent: Uniform random move selection
- GreedyAgent: Best heuristic score, no search
- MinimaxAgent: Alpha-beta search with one personality
- MasterStrategyAgent: Rule pipeline only
- RefereeAgent: Full engine (all evaluators plus validation)
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass

from engine import EngineConfig, MasterStrategy, Referee, get_personality, search
from engine.scoring import score_all_moves
from quadrax.board import Board, Move, Phase, Player
from quadrax.errors import NoLegalMovesError
from quadrax.game import get_legal_moves


@dataclass
class AgentInfo:
    """Information about an agent."""

    name: str
    description: str


class Agent(ABC):
    """
    Abstract base class for QuadraX agents.

    All agents must implement get_move() which returns a legal Move.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Returns the agent's name."""
        pass

    @property
    @abstractmethod
    def info(self) -> AgentInfo:
        """Returns information about the agent."""
        pass

    @abstractmethod
    def get_move(self, board: Board, phase: Phase, to_move: Player) -> Move:
        """
        Select a move for the given position.

        Args:
            board: Current board state (16 cells)
            phase: Current game phase
            to_move: Current player (1 or 2)

        Returns:
            A legal Move for `to_move`
        """
        pass

    def reset(self) -> None:
        """Reset any internal state. Called before each game."""
        pass


def _require_moves(board: Board, phase: Phase, to_move: Player) -> list[Move]:
    moves = get_legal_moves(board, phase, to_move)
    if not moves:
        raise NoLegalMovesError("No legal moves available", player=to_move)
    return moves


class RandomAgent(Agent):
    """Agent that plays uniformly random legal moves."""

    def __init__(self, seed: int | None = None):
        self._rng = random.Random(seed)

    @property
    def name(self) -> str:
        return "random"

    @property
    def info(self) -> AgentInfo:
        return AgentInfo(name="Random", description="Plays uniformly random legal moves")

    def get_move(self, board: Board, phase: Phase, to_move: Player) -> Move:
        return self._rng.choice(_require_moves(board, phase, to_move))


class GreedyAgent(Agent):
    """Agent that plays the highest-scoring move without lookahead."""

    @property
    def name(self) -> str:
        return "greedy"

    @property
    def info(self) -> AgentInfo:
        return AgentInfo(name="Greedy", description="Highest heuristic score, no search")

    def get_move(self, board: Board, phase: Phase, to_move: Player) -> Move:
        scored = score_all_moves(board, _require_moves(board, phase, to_move), to_move, phase)
        return scored[0][0]


class MinimaxAgent(Agent):
    """Minimax agent with alpha-beta pruning and a fixed personality."""

    def __init__(self, personality: str = "strategic", depth: int = 2):
        self.weights = get_personality(personality)
        self.depth = depth

    @property
    def name(self) -> str:
        return f"minimax-{self.weights.name}"

    @property
    def info(self) -> AgentInfo:
        return AgentInfo(
            name=f"Minimax ({self.weights.name})",
            description=f"Alpha-beta search to depth {self.depth}",
        )

    def get_move(self, board: Board, phase: Phase, to_move: Player) -> Move:
        result = search(board, phase, to_move, depth=self.depth, weights=self.weights)
        if result.best_move is None:
            raise NoLegalMovesError("No legal moves available", player=to_move)
        return result.best_move


class MasterStrategyAgent(Agent):
    """Agent that follows the master strategy rule pipeline."""

    def __init__(self):
        self.strategy = MasterStrategy()

    @property
    def name(self) -> str:
        return "master"

    @property
    def info(self) -> AgentInfo:
        return AgentInfo(name="Master Strategy", description="Deterministic rule pipeline")

    def get_move(self, board: Board, phase: Phase, to_move: Player) -> Move:
        return self.strategy.analyze(board, phase, to_move).recommended_move


class RefereeAgent(Agent):
    """Full engine: every evaluator, arbitrated and validated."""

    def __init__(self, config: EngineConfig | None = None):
        self.referee = Referee(config)

    @property
    def name(self) -> str:
        return "referee"

    @property
    def info(self) -> AgentInfo:
        return AgentInfo(
            name="Referee",
            description=f"All evaluators with validation (depth {self.referee.config.search_depth})",
        )

    def get_move(self, board: Board, phase: Phase, to_move: Player) -> Move:
        return self.referee.select_move(board, phase, to_move).move


def create_all_agents(search_depth: int = 2, seed: int | None = None) -> dict[str, Agent]:
    """
    Creates every agent type, keyed by name.

    Args:
        search_depth: Minimax depth for search-based agents
        seed: Seed for the random agent

    Returns:
        Dictionary mapping agent names to instances
    """
    agents: list[Agent] = [RandomAgent(seed=seed), GreedyAgent(), MasterStrategyAgent()]
    for personality in ("aggressive", "defensive", "strategic", "adaptive"):
        agents.append(MinimaxAgent(personality, depth=search_depth))
    agents.append(RefereeAgent(EngineConfig(search_depth=search_depth)))
    return {agent.name: agent for agent in agents}
