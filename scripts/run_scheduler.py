import argparse
import json
import logging

from app.config import get_settings
from app.core.logging import setup_logging
from app.scheduler.backup_job import BackupJobScheduler, SchedulerConfig, ensure_scheduler_schema

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Run the scheduled backup loop.")
    parser.add_argument(
        "--run-once",
        action="store_true",
        help="Run the due-check/backup/cleanup cycle once and exit.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    settings = get_settings()

    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled by SCHEDULER_ENABLED.")
        return

    ensure_scheduler_schema()
    config = SchedulerConfig(
        job_name="auto-backup",
        poll_seconds=settings.SCHEDULER_POLL_SECONDS,
    )
    scheduler = BackupJobScheduler(config=config)

    if args.run_once:
        print(json.dumps(scheduler.run_once(), indent=2))
        return

    scheduler.run_forever()


if __name__ == "__main__":
    main()
