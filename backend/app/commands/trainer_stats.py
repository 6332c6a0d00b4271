#!/usr/bin/env python
# backend/app/commands/trainer_stats.py
"""
Trainer statistics commands for Disciplix.

Recomputes the denormalized rating, review_count and total_sessions
columns of trainer profiles from reviews and completed sessions.

Usage:
    python -m app.commands.trainer_stats recompute                  # All trainers
    python -m app.commands.trainer_stats recompute --trainer-id ID  # One trainer
"""

import argparse
import json
import logging
import sys
from typing import Callable, ContextManager, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import DomainException
from app.database import get_db_session
from app.services.trainer_stats_service import TrainerStats, TrainerStatsService

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _as_dict(stats: TrainerStats) -> dict:
    return {
        "trainer_id": stats.trainer_id,
        "rating": str(stats.rating),
        "review_count": stats.review_count,
        "total_sessions": stats.total_sessions,
    }


def recompute(
    trainer_id: Optional[str] = None,
    session_factory: Callable[[], ContextManager[Session]] = get_db_session,
) -> List[TrainerStats]:
    """Recompute one trainer, or every trainer when ``trainer_id`` is None."""
    with session_factory() as db:
        service = TrainerStatsService(db)
        if trainer_id:
            return [service.recompute(trainer_id)]
        return service.recompute_all()


def main(
    argv: Optional[List[str]] = None,
    session_factory: Callable[[], ContextManager[Session]] = get_db_session,
) -> int:
    """Main entry point for the trainer stats command."""
    parser = argparse.ArgumentParser(
        description="Disciplix trainer statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m app.commands.trainer_stats recompute
  python -m app.commands.trainer_stats recompute --trainer-id 01HF4G12ABCDEF3456789XYZAB
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    recompute_parser = subparsers.add_parser("recompute", help="Recompute trainer counters")
    recompute_parser.add_argument("--trainer-id", default=None, help="Only this trainer")

    args = parser.parse_args(argv)

    if args.command != "recompute":
        parser.print_help()
        return 1

    try:
        results = recompute(args.trainer_id, session_factory)
    except DomainException as e:
        logger.error(f"Recompute failed: {e.message}")
        return 1

    print(json.dumps([_as_dict(s) for s in results], indent=2))
    logger.info(f"Recomputed statistics for {len(results)} trainer(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
