"""CLI entry point: sync, groups, scheduler."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from typing import Optional

from scripts.groupsync.config import load_config
from scripts.groupsync.logging_config import configure_logging
from scripts.groupsync.okta import OktaApiError, OktaClient
from scripts.groupsync.synchronizer import DirectInvocation, handle_invocation

logger = logging.getLogger("groupsync.cli")


def cmd_sync(args: argparse.Namespace) -> int:
    """Run one direct sync and print the JSON result."""
    config = load_config()
    if args.store:
        config = dataclasses.replace(config, store_on_request=True)

    response = handle_invocation(DirectInvocation(), config)
    print(response.body)
    if response.status_code != 200:
        logger.error("Sync failed with status %d", response.status_code)
        return 1
    return 0


def cmd_groups(args: argparse.Namespace) -> int:
    """List provider group names; configured targets are marked with '*'."""
    config = load_config()
    try:
        groups = OktaClient(config.okta).list_groups()
    except OktaApiError as exc:
        logger.error("Listing groups failed: %s", exc)
        return 1

    targets = set(config.target_groups)
    for group in groups:
        marker = "*" if group.name in targets else " "
        print(f"{marker} {group.name}")
    return 0


def cmd_scheduler(args: argparse.Namespace) -> int:
    """Start the APScheduler-based scheduling loop."""
    from scripts.groupsync.scheduler import start_scheduler

    start_scheduler(load_config())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="groupsync",
        description="Okta group membership sync",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Run one sync and print the result")
    sync_parser.add_argument(
        "--store", "-s",
        action="store_true",
        help="Also write the result to storage (overrides STORE_ON_REQUEST)",
    )
    sync_parser.set_defaults(func=cmd_sync)

    groups_parser = subparsers.add_parser("groups", help="List Okta groups")
    groups_parser.set_defaults(func=cmd_groups)

    sched_parser = subparsers.add_parser("scheduler", help="Start scheduled sync loop")
    sched_parser.set_defaults(func=cmd_scheduler)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    configure_logging(os.environ.get("LOG_LEVEL", "INFO"))
    args = build_parser().parse_args(argv)
    try:
        code = args.func(args)
    except Exception as exc:
        logger.error("%s failed: %s", args.command, exc, exc_info=True)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
