"""
Command line entry point for steamquery

Queries one server and prints what it reports:
- Server information (A2S_INFO)
- Player list (A2S_PLAYER), with --players
"""

import argparse
import asyncio
import logging
import sys

from steamquery.client.query import query_players, query_server_info
from steamquery.config import config
from steamquery.errors import SteamQueryError
from steamquery.models import OPTIONAL_FIELDS


logger = logging.getLogger(__name__)


def _label(value) -> str:
    # Enum members print by name, unknown raw bytes as hex
    name = getattr(value, 'name', None)
    if name is not None:
        return name.lower()
    return f"0x{value:02x}"


def format_server_info(info) -> str:
    lines = [
        f"Name:        {info.name}",
        f"Map:         {info.map}",
        f"Game:        {info.game} ({info.folder}, app {info.app_id})",
        f"Players:     {info.players}/{info.max_players} ({info.bots} bots)",
        f"Type:        {_label(info.server_type)} / {_label(info.environment)}",
        f"Visibility:  {_label(info.visibility)}",
        f"Anti-cheat:  {_label(info.anti_cheat)}",
        f"Version:     {info.version} (protocol {info.protocol})",
    ]
    for name in OPTIONAL_FIELDS:
        if info.has(name):
            lines.append(f"{name + ':':<13}{getattr(info, name)}")
    return "\n".join(lines)


def format_players(players) -> str:
    if not players:
        return "No players online"
    lines = []
    for player in players:
        minutes, seconds = divmod(int(player.duration.total_seconds()), 60)
        hours, minutes = divmod(minutes, 60)
        lines.append(f"{player.name:<32} {player.score:>6}  {hours:d}:{minutes:02d}:{seconds:02d}")
    return "\n".join(lines)


async def run(host: str, port: int, timeout_ms: int, players: bool):
    """Run the requested queries and print the results"""

    info = await query_server_info(host, port, timeout_ms)

    print("\n" + "=" * 70)
    print(f"Server {host}:{port}")
    print("=" * 70)
    print(format_server_info(info))

    if players:
        roster = await query_players(host, port, timeout_ms)
        print("\n" + "-" * 70)
        print(f"Players ({len(roster)})")
        print("-" * 70)
        print(format_players(roster))

    print("=" * 70 + "\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Query a Source engine game server")
    parser.add_argument("host")
    parser.add_argument("port", type=int)
    parser.add_argument("--timeout", type=int, default=config.QUERY_TIMEOUT_MS,
                        help="per-phase timeout in milliseconds")
    parser.add_argument("--players", action="store_true", help="also list players")
    parser.add_argument("--log-level", default=config.LOG_LEVEL.upper(), type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        asyncio.run(run(args.host, args.port, args.timeout, args.players))
    except SteamQueryError as e:
        logger.error(f"Query to {args.host}:{args.port} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        return 130

    return 0


if __name__ == '__main__':
    sys.exit(main())
