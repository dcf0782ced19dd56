"""
Parallel Tournament Runner

Executes round-robin tournaments between agents using multiprocessing.
"""

import logging
import sys
import time
from dataclasses import dataclass
from multiprocessing import Pool

from tqdm import tqdm

from evaluation.agents import Agent, create_all_agents
from evaluation.arena import Arena, MatchResult, TournamentResult
from quadrax.game import DEFAULT_MAX_MOVES

from .config import TournamentConfig

logger = logging.getLogger(__name__)


@dataclass
class MatchTask:
    """Task definition for parallel match execution."""

    agent1_id: str
    agent2_id: str
    num_games: int
    seed: int | None = None


# Per-process agent cache for worker processes
_worker_agents: dict[str, Agent] | None = None
_worker_depth: int = 2
_worker_max_moves: int = DEFAULT_MAX_MOVES


def _init_worker(search_depth: int, max_moves: int) -> None:
    """Initialize worker process with agents."""
    global _worker_agents, _worker_depth, _worker_max_moves
    _worker_depth = search_depth
    _worker_max_moves = max_moves
    _worker_agents = create_all_agents(search_depth)


def _execute_match(task: MatchTask) -> MatchResult:
    """Execute a single match in a worker process."""
    global _worker_agents

    if _worker_agents is None:
        _worker_agents = create_all_agents(_worker_depth)

    agents = create_all_agents(_worker_depth, seed=task.seed) if task.seed is not None else _worker_agents
    arena = Arena(
        {task.agent1_id: agents[task.agent1_id], task.agent2_id: agents[task.agent2_id]},
        max_moves=_worker_max_moves,
    )
    return arena.run_match(task.agent1_id, task.agent2_id, num_games=task.num_games)


class ParallelTournamentRunner:
    """
    Runs round-robin tournaments using parallel execution.

    Each match runs in its own worker task; agents are rebuilt per process.
    """

    def __init__(self, config: TournamentConfig):
        self.config = config
        self.agents = create_all_agents(config.search_depth)

    def get_bot_ids(self) -> list[str]:
        """Get list of agent IDs to include in the tournament."""
        ids = list(self.agents.keys())

        if self.config.bot_filter:
            unknown = set(self.config.bot_filter) - set(ids)
            if unknown:
                raise ValueError(f"Unknown agents: {sorted(unknown)}")
            ids = [i for i in ids if i in self.config.bot_filter]

        if self.config.exclude_bots:
            ids = [i for i in ids if i not in self.config.exclude_bots]

        return ids

    def run_tournament(self, bot_ids: list[str] | None = None) -> TournamentResult:
        """
        Run a tournament between the specified agents.

        Args:
            bot_ids: Agent IDs to include (default: use config)

        Returns:
            TournamentResult with every match
        """
        if bot_ids is None:
            bot_ids = self.get_bot_ids()

        if len(bot_ids) < 2:
            raise ValueError("Need at least 2 agents for a tournament")

        tasks = self._generate_tasks(bot_ids)
        logger.info(
            f"Running tournament with {len(bot_ids)} agents, {len(tasks)} matches, "
            f"{self.config.games_per_match} games per match, {self.config.get_workers()} workers"
        )

        start_time = time.time()
        results = self._run_parallel(tasks)

        return TournamentResult(
            results=results,
            agent_ids=bot_ids,
            time_seconds=time.time() - start_time,
        )

    def _generate_tasks(self, bot_ids: list[str]) -> list[MatchTask]:
        """Generate match tasks for a round-robin tournament."""
        tasks = []
        seed_counter = self.config.seed or 0

        for i, id1 in enumerate(bot_ids):
            for id2 in bot_ids[i + 1 :]:
                tasks.append(
                    MatchTask(
                        agent1_id=id1,
                        agent2_id=id2,
                        num_games=self.config.games_per_match,
                        seed=seed_counter if self.config.seed is not None else None,
                    )
                )
                seed_counter += 1

        return tasks

    def _run_parallel(self, tasks: list[MatchTask]) -> list[MatchResult]:
        """Run matches in parallel using multiprocessing."""
        num_workers = self.config.get_workers()
        sys.stdout.flush()

        with Pool(
            processes=num_workers,
            initializer=_init_worker,
            initargs=(self.config.search_depth, self.config.max_moves),
        ) as pool:
            results = list(
                tqdm(
                    pool.imap_unordered(_execute_match, tasks),
                    total=len(tasks),
                    desc="Matches",
                    unit="match",
                    file=sys.stderr,
                )
            )

        return results


def run_tournament(
    bot_ids: list[str] | None = None,
    games_per_match: int = 10,
    workers: int | None = None,
    search_depth: int = 2,
) -> TournamentResult:
    """Convenience function to run a tournament."""
    config = TournamentConfig(
        games_per_match=games_per_match,
        parallel_workers=workers,
        bot_filter=bot_ids,
        search_depth=search_depth,
    )
    return ParallelTournamentRunner(config).run_tournament()


def format_standings(result: TournamentResult) -> str:
    """Format tournament standings as a string."""
    lines = []
    lines.append("=" * 62)
    lines.append("TOURNAMENT RESULTS")
    lines.append("=" * 62)
    lines.append("")
    lines.append(f"Total matches: {len(result.results)}")
    lines.append(f"Total games: {sum(r.num_games for r in result.results)}")
    lines.append(f"Time: {result.time_seconds:.1f}s")
    lines.append("")
    lines.append("Final Standings:")
    lines.append("-" * 62)
    lines.append(f"{'Rank':<5} {'Agent':<22} {'Pts':>6} {'W':>5} {'L':>5} {'D':>5} {'Win%':>7}")
    lines.append("-" * 62)

    for rank, (agent_id, points, wins, losses, draws) in enumerate(result.standings(), 1):
        total = wins + losses + draws
        win_pct = points / total * 100 if total > 0 else 0
        lines.append(
            f"{rank:<5} {agent_id:<22} {points:>6.1f} {wins:>5} {losses:>5} {draws:>5} {win_pct:>6.1f}%"
        )

    lines.append("-" * 62)
    return "\n".join(lines)
