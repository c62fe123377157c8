#!/usr/bin/env python
"""Run one ingestion pass from the command line.

Runs the SAME code paths as the Celery tasks, invoked directly. All
services are obtained from the DI container.

Run with: uv run python scripts/run_ingestion.py --batch-size 20
"""

import argparse
import asyncio
import json
import sys

from intake.config.pipeline import RunConfig
from intake.core.container import get_container
from intake.core.database import close_db, init_db
from intake.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Run ingestion (and optionally auto-approval).

    Args:
        args: Parsed CLI arguments

    Returns:
        Process exit code
    """
    container = get_container()
    config = container.config()
    engine = container.infrastructure.db_engine()

    try:
        if args.init_db:
            await init_db(engine)

        run_config = RunConfig(
            batch_size=args.batch_size or config.ingest_batch_size,
            score_threshold=(
                args.score_threshold
                if args.score_threshold is not None
                else config.ingest_score_threshold
            ),
        )
        result = await container.services.fetch_orchestrator().run(run_config)
        print(json.dumps(result.model_dump(), indent=2, default=str))

        if args.auto_approve is not None:
            approval = await container.services.approval_service().auto_approve(args.auto_approve)
            print(json.dumps(approval.model_dump(), indent=2, default=str))
    finally:
        await container.infrastructure.http_client().close()
        await close_db(engine)

    return 0 if result.success else 2


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Fetch, score, deduplicate and stage content into the review queues",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Defaults from the environment
  uv run python scripts/run_ingestion.py

  # Smaller batch, stricter threshold, then approve anything scoring 85+
  uv run python scripts/run_ingestion.py --batch-size 10 --score-threshold 40 --auto-approve 85
        """,
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Accepted-item cap for this run (1-100)",
    )
    parser.add_argument(
        "--score-threshold",
        type=int,
        default=None,
        help="Minimum score to stage (0-100)",
    )
    parser.add_argument(
        "--auto-approve",
        type=int,
        default=None,
        metavar="MIN_SCORE",
        help="Approve pending records scoring at least MIN_SCORE after the run",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create tables before running (development only)",
    )

    args = parser.parse_args()
    setup_logging()

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        logger.info("Ingestion cancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
