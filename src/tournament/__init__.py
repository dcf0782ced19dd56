"""
Tournament System

Round-robin tournaments between engine agents, run in parallel.
"""

from .config import TournamentConfig
from .runner import ParallelTournamentRunner, format_standings, run_tournament

__all__ = [
    "TournamentConfig",
    "ParallelTournamentRunner",
    "run_tournament",
    "format_standings",
]
