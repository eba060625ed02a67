"""Store jobs, run once from the command line.

The daily schedule lives in the arq worker (services.store_service.worker);
use this entry point for one-off runs and dry runs:

  python -m services.store_service.tasks sweep-subscriptions
  python -m services.store_service.tasks sweep-subscriptions --dry-run --limit 20
  ENV_FILE=.env.prod python -m services.store_service.tasks sweep-subscriptions
"""

from __future__ import annotations

import argparse
import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv


def _load_env_file() -> None:
    project_root = Path(__file__).resolve().parents[2]
    env_file = os.environ.get("ENV_FILE", ".env")
    env_path = (project_root / env_file).resolve()
    if env_path.exists():
        load_dotenv(env_path, override=False)


async def run_subscription_sweep(limit: int | None = None, dry_run: bool = False):
    from libs.common.config import get_settings
    from libs.common.datetime_utils import utc_now
    from libs.common.logging import get_logger
    from libs.db.config import AsyncSessionLocal
    from services.store_service.services.subscription_sweep import (
        find_due_subscription_ids,
        sweep_due_subscriptions,
    )

    logger = get_logger(__name__)
    limit = limit or get_settings().SUBSCRIPTION_SWEEP_BATCH_SIZE

    async with AsyncSessionLocal() as db:
        if dry_run:
            due = await find_due_subscription_ids(db, now=utc_now(), limit=limit)
            for subscription_id in due:
                print(f"due: {subscription_id}")
            logger.info("Dry-run: %d subscriptions due", len(due))
            return due
        return await sweep_due_subscriptions(db, limit=limit)


async def _main() -> None:
    parser = argparse.ArgumentParser(description="Store scheduled jobs.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sweep = subparsers.add_parser(
        "sweep-subscriptions", help="Produce orders for due subscriptions."
    )
    sweep.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Subscriptions fetched per batch (dry run: maximum listed).",
    )
    sweep.add_argument(
        "--dry-run",
        action="store_true",
        help="List due subscriptions without producing orders.",
    )
    args = parser.parse_args()

    _load_env_file()

    from libs.common.logging import configure_logging

    configure_logging()

    if args.command == "sweep-subscriptions":
        await run_subscription_sweep(limit=args.limit, dry_run=args.dry_run)


if __name__ == "__main__":
    asyncio.run(_main())
