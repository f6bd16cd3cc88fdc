#!/usr/bin/env python3
"""
Golf League Processor CLI

Runs one tick of the scheduled league processor against a JSON store
snapshot: season start notices, activation, score reminders and week
completion.

Usage:
    python process_leagues.py --store data/store.json
    python process_leagues.py --store data/store.json --now 2026-10-18T06:00
    python process_leagues.py --store data/store.json --dry-run
"""

import argparse
import copy
import sys
from datetime import datetime
from pathlib import Path

from golfleague.config import get_config
from golfleague.logging_config import setup_logging
from golfleague.processor import LeagueProcessor
from golfleague.store import InMemoryStore, JsonFileStore


def parse_now(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid ISO-8601 time: {value}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Golf league season processor")
    parser.add_argument(
        "--store", "-s",
        default="data/store.json",
        help="Path to the JSON store snapshot",
    )
    parser.add_argument(
        "--now",
        type=parse_now,
        default=None,
        help="Run as if it were this time (ISO-8601, local to the configured time zone)",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to processor config JSON",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Process a copy of the store and do not save changes",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for log files (no log file when omitted)",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress console logging",
    )

    args = parser.parse_args(argv)

    setup_logging(
        log_dir=Path(args.log_dir) if args.log_dir else None,
        log_to_file=bool(args.log_dir),
        log_to_console=not args.quiet,
    )

    store_path = Path(args.store)
    if not store_path.exists():
        print(f"❌ Store file not found: {store_path}")
        return 1

    config = get_config(args.config)
    store = JsonFileStore(store_path)
    if args.dry_run:
        store_to_run = InMemoryStore(copy.deepcopy(store.data))
    else:
        store_to_run = store

    report = LeagueProcessor(store_to_run, config).run(args.now)

    if not args.dry_run:
        store.save()

    print(report.summary())
    if report.failed:
        print(f"⚠️  {len(report.failed)} league(s) failed: {', '.join(report.failed)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
