#!/usr/bin/env python3
"""
Local Agent Tournament

Round-robin tournament between the engine's move selectors.

Usage:
    # Quick tournament with default settings
    python scripts/tournament.py

    # Specific agents
    python scripts/tournament.py --bots random,greedy,master,referee --games 20

    # Exclude the slow full engine
    python scripts/tournament.py --exclude referee

    # Output to JSON
    python scripts/tournament.py --output results/tournament.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from evaluation.agents import create_all_agents
from tournament import ParallelTournamentRunner, TournamentConfig, format_standings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Run a round-robin tournament between QuadraX agents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Agent selection
    parser.add_argument("--bots", "-b", type=str, default=None, help="Comma-separated agent IDs to include")
    parser.add_argument("--exclude", "-x", type=str, default=None, help="Comma-separated agent IDs to exclude")
    parser.add_argument("--list-bots", action="store_true", help="List all available agents and exit")

    # Tournament settings
    parser.add_argument("--games", "-g", type=int, default=10, help="Games per matchup (default: 10)")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Parallel workers (default: auto)")
    parser.add_argument("--depth", "-d", type=int, default=2, help="Minimax depth (default: 2)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--config", "-c", type=str, default=None, help="YAML file with a `tournament` section")

    # Output
    parser.add_argument("--output", "-o", type=str, default=None, help="Output file path (JSON format)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.list_bots:
        print("Available agents:")
        print("-" * 60)
        for agent_id, agent in create_all_agents(args.depth).items():
            print(f"{agent_id:<22} {agent.info.description}")
        return 0

    if args.config:
        config = TournamentConfig.from_yaml(args.config)
    else:
        config = TournamentConfig(
            games_per_match=args.games,
            parallel_workers=args.workers,
            search_depth=args.depth,
            seed=args.seed,
        )

    if args.bots:
        config.bot_filter = [b.strip() for b in args.bots.split(",")]
    if args.exclude:
        config.exclude_bots = [b.strip() for b in args.exclude.split(",")]

    runner = ParallelTournamentRunner(config)
    try:
        bot_ids = runner.get_bot_ids()
    except ValueError as e:
        logger.error(str(e))
        print("Use --list-bots to see available agents")
        return 1

    if len(bot_ids) < 2:
        logger.error("Need at least 2 agents for a tournament")
        return 1

    logger.info(f"Agents: {', '.join(bot_ids)}")
    result = runner.run_tournament(bot_ids)

    print()
    print(format_standings(result))

    if args.output:
        output_data = {
            "config": {
                "games_per_match": config.games_per_match,
                "search_depth": config.search_depth,
                "bots": bot_ids,
                "seed": config.seed,
            },
            "time_seconds": result.time_seconds,
            "standings": [
                {
                    "rank": i + 1,
                    "id": agent_id,
                    "points": points,
                    "wins": wins,
                    "losses": losses,
                    "draws": draws,
                }
                for i, (agent_id, points, wins, losses, draws) in enumerate(result.standings())
            ],
            "matches": [
                {
                    "agent1": r.agent1_id,
                    "agent2": r.agent2_id,
                    "agent1_wins": r.agent1_wins,
                    "agent2_wins": r.agent2_wins,
                    "draws": r.draws,
                }
                for r in result.results
            ],
        }

        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w") as f:
            json.dump(output_data, f, indent=2)

        logger.info(f"Results saved to: {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
