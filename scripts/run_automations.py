#!/usr/bin/env python3
"""
Run due automations (and optionally daily snapshots) once, outside the API.
Useful for cron, backfills (--as-of) and manual recovery after a blocked run.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date

from autoledger.config import settings
from autoledger.core.logging import setup_logging
from autoledger.infrastructure.db.database import close_db
from autoledger.services.automation_service import run_due_automations
from autoledger.services.snapshot_service import capture_daily_snapshots

logger = logging.getLogger(__name__)


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Execute due recurring automations")
    parser.add_argument("--as-of", type=parse_date, default=None, help="Run date YYYY-MM-DD (default: today)")
    parser.add_argument("--snapshots", action="store_true", help="Also capture daily snapshots for the same date")
    return parser


async def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        summary = await run_due_automations(args.as_of)
        print(json.dumps(summary.to_dict(), indent=2))

        if args.snapshots:
            snapshots = await capture_daily_snapshots(summary.as_of)
            print(json.dumps(snapshots.to_dict(), indent=2))
    finally:
        await close_db()

    if summary.blocking_errors:
        logger.warning(f"{len(summary.blocking_errors)} automations blocked; see errors above")
        return 1
    return 0


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    sys.exit(asyncio.run(main()))
