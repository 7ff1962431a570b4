"""Fetch the current users/events snapshot through the full tier chain.

Shows which tier answered (primary, secondary, cache or bootstrap) and
how many records it returned. Useful to check connectivity of a
deployment without starting the application.

Usage:
    uv run python scripts/fetch_snapshot.py [--config settings.yaml] [--json] [--json-logs]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from eventflow_sync import SyncConfig, Synchronizer
from eventflow_sync.logging_utils import configure_structured_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--config", type=Path, help="YAML settings file (eventflow: section)")
    parser.add_argument("--cache-path", help="Override the cache directory")
    parser.add_argument("--api-base", help="Override the REST backend base URL")
    parser.add_argument("--no-primary", action="store_true", help="Skip the primary store")
    parser.add_argument("--json", action="store_true", help="Print the full snapshot as JSON")
    parser.add_argument("--json-logs", action="store_true", help="Emit structured JSON logs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SyncConfig:
    config = SyncConfig.from_file(args.config) if args.config else SyncConfig.from_environment()
    if args.cache_path:
        config.cache_path = args.cache_path
    if args.api_base:
        config.api_base = args.api_base
    if args.no_primary:
        config.primary.enabled = False
    return config


async def run(args: argparse.Namespace) -> int:
    config = build_config(args)

    async with Synchronizer.from_config(config) as sync:
        snapshot = await sync.fetch_initial_data()

    if args.json:
        print(json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(f"source: {snapshot.source.value}")
        print(f"users:  {len(snapshot.users)}")
        print(f"events: {len(snapshot.events)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.INFO

    if args.json_logs:
        configure_structured_logging(level=level)
    else:
        logging.basicConfig(level=level, format="%(levelname)s  %(message)s")
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
