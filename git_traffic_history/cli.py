#!/usr/bin/env python3
"""
Command-line interface for git-traffic-history.
"""

import argparse
import logging
import sys
from typing import Optional

import requests

from .config import load_configuration
from .exceptions import TrafficHistoryError
from .github import GitHubClient
from .models import summarize
from .store import CorruptionPolicy, JsonHistoryStore
from .sync import TrafficSync

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="git-traffic-history",
        description="Accumulate GitHub clone and view traffic beyond the 14-day window"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("sync", help="Run a single sync cycle")

    run_parser = subparsers.add_parser("run", help="Sync periodically until interrupted")
    run_parser.add_argument(
        "--interval",
        type=int,
        help="Seconds between cycles (default: GITHUB_SYNC_DURATION or 6 hours)"
    )
    run_parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop on the first repository that fails instead of skipping it"
    )

    server_parser = subparsers.add_parser("server", help="Start the web API server")
    server_parser.add_argument("--port", type=int, help="Port to run the server on (default: PORT or 8000)")
    server_parser.add_argument("--no-sync", action="store_true", help="Serve only, do not sync in background")

    show_parser = subparsers.add_parser("show", help="Print totals from the history file")
    show_parser.add_argument("--repo", help="Only show this owner/name repository")

    subparsers.add_parser("repos", help="List repositories of GITHUB_USERNAME")

    return parser


def _load_config(**kwargs):
    config = load_configuration(**kwargs)
    logging.getLogger().setLevel(config.log_level)
    return config


def _sync_from_config(config, fail_fast: bool = False) -> TrafficSync:
    client = GitHubClient(config.access_token, config.username)
    return TrafficSync(client, JsonHistoryStore(config.database_path), config.repos, fail_fast=fail_fast)


def cmd_sync(args) -> int:
    report = _sync_from_config(_load_config()).do_sync()
    for result in report.failed:
        print(f"{result.repo}: {result.error}", file=sys.stderr)
    return 0 if report.ok else 1


def cmd_run(args) -> int:
    config = _load_config()
    sync = _sync_from_config(config, fail_fast=args.fail_fast)
    try:
        interval = args.interval if args.interval is not None else config.sync_interval
        sync.run(interval)
    except KeyboardInterrupt:
        print("\nSync stopped by user")
    return 0


def cmd_server(args) -> int:
    from .server import run_server

    config = _load_config(require_repos=not args.no_sync)
    if args.port:
        config.port = args.port
    run_server(config, enable_background_sync=not args.no_sync)
    return 0


def cmd_show(args) -> int:
    config = _load_config(require_repos=False)
    history = JsonHistoryStore(config.database_path).load(CorruptionPolicy.SURFACE)
    if args.repo:
        history = {repo: h for repo, h in history.items() if repo == args.repo}
    if not history:
        print("No traffic history recorded yet.")
        return 0
    print(f"{'Repository':<40} {'Clones':>8} {'Unique':>8} {'Views':>8} {'Unique':>8}  Since")
    for totals in summarize(history):
        since = totals.first_day.isoformat() if totals.first_day else "-"
        print(f"{totals.repo:<40} {totals.total_clones:>8} {totals.total_unique_clones:>8} "
              f"{totals.total_views:>8} {totals.total_unique_views:>8}  {since}")
    return 0


def cmd_repos(args) -> int:
    config = _load_config(require_repos=False)
    for repo in GitHubClient(config.access_token, config.username).list_user_repos():
        flags = " (fork)" if repo.fork else ""
        print(f"{repo.full_name}{flags}")
    return 0


COMMANDS = {
    "sync": cmd_sync,
    "run": cmd_run,
    "server": cmd_server,
    "show": cmd_show,
    "repos": cmd_repos,
}


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    try:
        return command(args)
    except (TrafficHistoryError, requests.RequestException) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
