"""
Tournament Configuration

Configuration dataclass for tournament execution.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from quadrax.game import DEFAULT_MAX_MOVES


@dataclass
class TournamentConfig:
    """Configuration for tournament execution."""

    # Number of games per matchup
    games_per_match: int = 10

    # Number of parallel workers (None = auto-detect)
    parallel_workers: int | None = None

    # Specific agents to include (None = all)
    bot_filter: list[str] | None = None

    # Agents to exclude
    exclude_bots: list[str] | None = None

    # Random seed for reproducibility
    seed: int | None = None

    # Minimax depth for search-based agents; keep low, movement games are long
    search_depth: int = 2

    # Moves after which a game is drawn
    max_moves: int = DEFAULT_MAX_MOVES

    def get_workers(self) -> int:
        """Get number of workers, auto-detecting if not specified."""
        if self.parallel_workers is not None:
            return self.parallel_workers
        # Leave one core free for system
        return max(1, (os.cpu_count() or 2) - 1)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TournamentConfig":
        """Load the `tournament` section of a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data.get("tournament", {}))
