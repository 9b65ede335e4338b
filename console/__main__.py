import argparse
import logging
from typing import Optional

from core.models import MAX_PLAYERS, MIN_PLAYERS, TableConfig
from .game import ConsoleGame


def main() -> None:
    parser = argparse.ArgumentParser(description="Five-card draw on the console")
    parser.add_argument("--players", type=int, help=f"Skip the prompt ({MIN_PLAYERS}-{MAX_PLAYERS})")
    parser.add_argument("--computer", action="store_true", help="Last seat is played by the computer")
    parser.add_argument("--shuffles", type=int, default=3)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    config: Optional[TableConfig] = None
    if args.players is not None:
        if not MIN_PLAYERS <= args.players <= MAX_PLAYERS:
            parser.error(f"--players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
        config = TableConfig(players=args.players, shuffles=args.shuffles, computer_player=args.computer)

    ConsoleGame(config, seed=args.seed, shuffles=args.shuffles).run()


if __name__ == "__main__":
    main()
