"""Command line trigger for the expiry reminder run."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.blocking import BlockingScheduler
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from license_notifier.application.use_cases.expiry_reminders import (
    retry_failed_expiry_emails,
    send_expiry_reminders,
)
from license_notifier.config import get_settings
from license_notifier.infrastructure.database import SessionLocal, initialize_database

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STORE_UNAVAILABLE = 1
EXIT_CONFIG_ERROR = 2

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for the reminder job."""

    parser = argparse.ArgumentParser(
        description="Notify assigned users about expired and expiring license serials.",
    )
    parser.add_argument(
        "--retry-failed",
        action="store_true",
        help="After the run, re-send today's expiry emails that previously failed.",
    )
    parser.add_argument(
        "--interval-minutes",
        type=int,
        default=None,
        help="Keep running and repeat the job every N minutes until interrupted.",
    )
    parser.add_argument(
        "--init-db",
        action="store_true",
        help="Create missing tables before running.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to the LOG_LEVEL setting).",
    )
    args = parser.parse_args(argv)
    if args.interval_minutes is not None and args.interval_minutes <= 0:
        parser.error("--interval-minutes must be a positive integer")
    return args


def run_once(*, retry_failed: bool = False) -> int:
    """Execute one reminder run and return the process exit code.

    Unit-level failures are logged by the pipeline and do not change the exit
    code; only an unreachable store does.
    """

    session = SessionLocal()
    try:
        send_expiry_reminders(session)
        if retry_failed:
            retry_failed_expiry_emails(session)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("License store unavailable; expiry reminders aborted")
        return EXIT_STORE_UNAVAILABLE
    finally:
        session.close()
    return EXIT_OK


def _run_on_interval(minutes: int, *, retry_failed: bool) -> int:
    scheduler = BlockingScheduler(timezone=timezone.utc)
    scheduler.add_job(
        run_once,
        trigger="interval",
        minutes=minutes,
        kwargs={"retry_failed": retry_failed},
        id="expiry_reminders",
        next_run_time=datetime.now(timezone.utc),
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    logger.info("Running expiry reminders every %d minute(s)", minutes)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Stopping expiry reminder scheduler")
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Entry point used by the console script and ``scripts/``."""

    args = parse_args(argv)
    logging.basicConfig(level=(args.log_level or "INFO").upper(), format=LOG_FORMAT)

    try:
        settings = get_settings()
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    if args.log_level is None:
        logging.getLogger().setLevel(settings.log_level.upper())

    if args.init_db:
        try:
            initialize_database()
        except SQLAlchemyError:
            logger.exception("Could not initialize the license store")
            return EXIT_STORE_UNAVAILABLE

    if args.interval_minutes:
        return _run_on_interval(args.interval_minutes, retry_failed=args.retry_failed)
    return run_once(retry_failed=args.retry_failed)


__all__ = ["main", "parse_args", "run_once"]
