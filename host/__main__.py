import argparse
import asyncio
import logging

from core.models import MAX_PLAYERS, MIN_PLAYERS, TableConfig
from .server import HostServer

logging.basicConfig(level=logging.INFO)


def main() -> None:
    parser = argparse.ArgumentParser(description="Five-card draw host server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--players", type=int, default=2)
    parser.add_argument("--computer", action="store_true", help="Last seat is played by the house bot")
    parser.add_argument("--shuffles", type=int, default=3)
    parser.add_argument("--rounds", type=int, default=1)
    parser.add_argument("--move-time", type=int, default=30_000, help="Draw time in milliseconds, 0 disables")
    args = parser.parse_args()

    if not MIN_PLAYERS <= args.players <= MAX_PLAYERS:
        parser.error(f"--players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")

    config = TableConfig(
        players=args.players,
        shuffles=args.shuffles,
        computer_player=args.computer,
        move_time_ms=args.move_time,
        rounds=args.rounds,
    )

    server = HostServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
