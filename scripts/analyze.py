#!/usr/bin/env python3
"""
Analyze a QuadraX Position

Runs the full engine on one board and prints the decision with its
reasoning trace, or validates a single proposed move.

Usage:
    # Board as 16 digits (0 empty, 1/2 players), row-major
    python scripts/analyze.py 1100100000000000 --mover 1

    # Movement phase, restricted to one personality
    python scripts/analyze.py "1.2. .12. 2.1. ..12" --phase movement --mover 2 --personality defensive

    # Validate a proposed move instead of choosing one
    python scripts/analyze.py 2200200000000000 --mover 1 --validate 5
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from engine import EngineConfig, Referee, validate_move
from quadrax import QuadraXError, board_from_string, board_to_string, count_pieces
from quadrax.board import PIECES_PER_PLAYER, Phase

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def infer_phase(board: list[int]) -> Phase:
    if count_pieces(board, 1) == PIECES_PER_PLAYER and count_pieces(board, 2) == PIECES_PER_PLAYER:
        return Phase.MOVEMENT
    return Phase.PLACEMENT


def main():
    parser = argparse.ArgumentParser(description="Analyze a QuadraX position")
    parser.add_argument("board", type=str, help="16 cells: digits 0/1/2 or . X O")
    parser.add_argument("--mover", "-m", type=int, choices=[1, 2], required=True, help="Side to move")
    parser.add_argument(
        "--phase",
        "-p",
        choices=["placement", "movement"],
        default=None,
        help="Game phase (default: inferred from piece counts)",
    )
    parser.add_argument("--depth", "-d", type=int, default=None, help="Minimax search depth")
    parser.add_argument("--personality", type=str, default=None, help="Use a single minimax personality")
    parser.add_argument("--config", "-c", type=str, default=None, help="Engine YAML config")
    parser.add_argument("--validate", type=str, default=None, help="Validate this move (e.g. 5 or 6->9)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        board = board_from_string(args.board)
    except ValueError as e:
        logger.error(str(e))
        return 1

    phase = Phase.parse(args.phase) if args.phase else infer_phase(board)
    config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()

    print(board_to_string(board))
    print(f"Phase: {phase.value}, mover: {args.mover}")
    print()

    try:
        if args.validate:
            verdict = validate_move(board, phase, args.validate, args.mover)
            if args.json:
                print(json.dumps(verdict.to_dict(), indent=2))
            else:
                print(f"Recommendation: {verdict.recommendation.value} ({verdict.danger_level.label})")
                for check in verdict.triggered_checks:
                    print(f"  - {check}")
                for detail in verdict.details:
                    print(f"    {detail}")
            return 0

        decision = Referee(config).select_move(
            board, phase, args.mover, search_depth=args.depth, personality=args.personality
        )
    except QuadraXError as e:
        logger.error(f"{e.code}: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Bad move or personality: {e}")
        return 1

    if args.json:
        print(json.dumps(decision.to_dict(), indent=2))
    else:
        print(f"Move: {decision.move}")
        print(f"Confidence: {decision.confidence:.2f}  Urgency: {decision.urgency.name}  Source: {decision.source}")
        print()
        print(decision.reasoning.render())

    return 0


if __name__ == "__main__":
    sys.exit(main())
