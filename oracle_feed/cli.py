"""Command-line interface for the signed-price puller."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from .config import load_feed_configs
from .errors import PricePullError
from .logging_setup import configure_logging
from .oracles import StorkPriceFeed

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="oracle-feed",
        description="Pull publisher-signed prices from an oracle provider",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to feeds.yaml (default: feeds.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    pull_parser = sub.add_parser("pull", help="Pull each configured feed once")
    pull_parser.add_argument(
        "--ticker",
        action="append",
        default=None,
        help="Only pull this ticker (repeatable)",
    )
    pull_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-pull timeout in seconds",
    )

    return parser


async def _pull(args: argparse.Namespace) -> int:
    feeds = [StorkPriceFeed.from_feed_config(cfg) for cfg in load_feed_configs(args.config)]
    if args.ticker:
        feeds = [f for f in feeds if f.symbol in args.ticker]
    if not feeds:
        logger.error("No feeds to pull")
        return 1

    status = 0
    for feed in feeds:
        try:
            asset_pair = await feed.pull_asset_pair(timeout=args.timeout)
        except PricePullError as e:
            print(f"{feed.symbol}: {e}", file=sys.stderr)
            status = 1
            continue
        print(json.dumps(asset_pair.to_dict(), indent=2))
    return status


def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)

    if args.command == "pull":
        try:
            return asyncio.run(_pull(args))
        except (FileNotFoundError, PricePullError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 1

    build_parser().print_help()
    return 1


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(_run(args))
