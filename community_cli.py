"""community_cli.py

Load a community snapshot and open the interactive report menu.

Usage:
    python community_cli.py community_snapshot.json --community 1203...@g.us
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from community_analytics import (
    COMMUNITY_ID,
    DEFAULT_ACTIVITY_WINDOW_DAYS,
    DEFAULT_JOIN_WINDOW_DAYS,
    DEFAULT_MESSAGE_LIMIT,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_TOP_ACTIVE_USERS,
    AnalysisConfig,
    CommunitySession,
)
from community_client import ChatNotFoundError, SnapshotClient, SnapshotError
from community_menu import run_menu

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Analyze membership and activity across the groups of a chat community",
    )
    parser.add_argument(
        "snapshot", nargs="?",
        default=os.environ.get("COMMUNITY_SNAPSHOT", "community_snapshot.json"),
        help="Path to the community snapshot JSON (default: $COMMUNITY_SNAPSHOT or community_snapshot.json)",
    )
    parser.add_argument(
        "--community", "-c", default=os.environ.get("COMMUNITY_ID", COMMUNITY_ID),
        help="Id of the community chat (default: $COMMUNITY_ID)",
    )
    parser.add_argument(
        "--activity-days", type=float, default=DEFAULT_ACTIVITY_WINDOW_DAYS,
        help=f"Messages older than this many days do not count (default: {DEFAULT_ACTIVITY_WINDOW_DAYS})",
    )
    parser.add_argument(
        "--join-days", type=float, default=DEFAULT_JOIN_WINDOW_DAYS,
        help=f"Joins older than this many days do not count (default: {DEFAULT_JOIN_WINDOW_DAYS})",
    )
    parser.add_argument(
        "--message-limit", type=int, default=DEFAULT_MESSAGE_LIMIT,
        help=f"Most recent messages fetched per group (default: {DEFAULT_MESSAGE_LIMIT})",
    )
    parser.add_argument(
        "--top", type=int, default=DEFAULT_TOP_ACTIVE_USERS,
        help=f"Most active users reported per group (default: {DEFAULT_TOP_ACTIVE_USERS})",
    )
    parser.add_argument(
        "--concurrency", type=int, default=1,
        help="Groups scanned at the same time (default: 1, sequential)",
    )
    parser.add_argument(
        "--output-dir", "-o", default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for CSV reports (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and range-check the command line."""
    parser = build_parser()
    args = parser.parse_args(argv)
    for flag, value in (
        ("--activity-days", args.activity_days),
        ("--join-days", args.join_days),
        ("--message-limit", args.message_limit),
        ("--top", args.top),
    ):
        if value < 0:
            parser.error(f"{flag} must be 0 or greater, got {value}")
    return args


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    return AnalysisConfig(
        activity_window_days=args.activity_days,
        join_window_days=args.join_days,
        message_limit=args.message_limit,
        top_active_users=args.top,
        max_concurrent_chats=max(1, args.concurrency),
        output_dir=args.output_dir,
    )


async def run(args: argparse.Namespace) -> int:
    client = SnapshotClient.from_file(args.snapshot)
    session = CommunitySession(client, args.community, build_config(args))
    await session.load()
    await run_menu(session)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit status."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        return asyncio.run(run(args))
    except FileNotFoundError:
        print(f"Error: Snapshot file '{args.snapshot}' not found.", file=sys.stderr)
    except SnapshotError as e:
        print(f"Error: {e}", file=sys.stderr)
    except ChatNotFoundError as e:
        print(f"Error: {e}. Check the community id.", file=sys.stderr)
    except KeyboardInterrupt:
        print("\nAborted, no report was written for the interrupted command.", file=sys.stderr)
        return 130
    return 1


if __name__ == "__main__":
    sys.exit(main())
