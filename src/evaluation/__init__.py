"""
Engine Evaluation Harness

Agents wrapping each move selector, and an arena to play them off.
"""

from .agents import (
    Agent,
    AgentInfo,
    RandomAgent,
    GreedyAgent,
    MinimaxAgent,
    MasterStrategyAgent,
    RefereeAgent,
    create_all_agents,
)
from .arena import Arena, MatchResult, TournamentResult, quick_match

__all__ = [
    # Agents
    "Agent",
    "AgentInfo",
    "RandomAgent",
    "GreedyAgent",
    "MinimaxAgent",
    "MasterStrategyAgent",
    "RefereeAgent",
    "create_all_agents",
    # Arena
    "Arena",
    "MatchResult",
    "TournamentResult",
    "quick_match",
]
