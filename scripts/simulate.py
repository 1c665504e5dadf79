"""Play games with random legal moves to smoke-test the rules engine.

Run from the project root:
    python scripts/simulate.py --num-players 4 --seed 7
"""

import argparse
import logging
import random
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from engine.game_engine import GameEngine
from logging_config import setup_logging

logger = logging.getLogger(__name__)


def simulate(args):
    """Play ``args.num_games`` games and print a summary of each."""
    for game in range(args.num_games):
        seed = args.seed + game
        rng = random.Random(seed)
        engine = GameEngine()
        engine.reset([f"Player {i + 1}" for i in range(args.num_players)], seed=seed)

        steps = 0
        winner = None
        while not engine.is_game_over() and steps < args.max_steps:
            result = engine.step(rng.choice(engine.get_valid_actions()))
            if not result.success:
                logger.error("Legal action rejected: %s", result.info.get("reason"))
                break
            winner = result.info.get("winner", winner)
            steps += 1

        state = engine.state
        print(f"Game {game + 1} (seed {seed}): {steps} steps, round {state.round_number}, "
              f"step {state.step}, phase {state.phase.value}")
        for player in state.players:
            print(f"  {player.name}: {player.num_cities()} cities, {player.money} money, "
                  f"plants {[p.number for p in player.power_plants]}")
        if winner is not None:
            print(f"  Winner: {state.get_player(winner).name}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Play Power Grid games with random legal moves",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--num-games", type=int, default=1, help="Number of games to play")
    parser.add_argument("--num-players", type=int, default=4, help="Number of players in game")
    parser.add_argument("--seed", type=int, default=42, help="Base random seed")
    parser.add_argument("--max-steps", type=int, default=5000,
                        help="Stop a game after this many actions")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Console log level")
    parser.add_argument("--log-file", type=str, default=None,
                        help="Also write a DEBUG log to this file")

    args = parser.parse_args()
    setup_logging(args.log_level, log_file=args.log_file)
    simulate(args)
