from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from app.database import Base, TableGateway, engine, ensure_sqlite_schema
from app.models import import_all_models
from app.services.backup_scheduler import BackupController

logger = logging.getLogger(__name__)


def ensure_scheduler_schema() -> None:
    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()


@dataclass
class SchedulerConfig:
    job_name: str
    poll_seconds: int


class BackupJobScheduler:
    """Poll the due-check and run the backup cycle when it says DUE."""

    def __init__(self, *, config: SchedulerConfig, controller: Optional[BackupController] = None) -> None:
        self._config = config
        self._controller = controller or BackupController(TableGateway())
        self._stop_event = threading.Event()

    def run_once(self) -> dict:
        result = self._controller.run_cycle()
        if result.get("status") == "completed":
            logger.info("Job %s created backup %s", self._config.job_name, result.get("backupId"))
        elif not result.get("success"):
            logger.error("Job %s failed: %s", self._config.job_name, result.get("error"))
        return result

    def run_forever(self) -> None:
        poll_seconds = max(1, int(self._config.poll_seconds))
        logger.info("Scheduler started for job %s (poll %ss)", self._config.job_name, poll_seconds)
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("Scheduler loop error.")
            self._stop_event.wait(poll_seconds)
        logger.info("Scheduler stopped for job %s", self._config.job_name)

    def stop(self) -> None:
        self._stop_event.set()


__all__ = ["BackupJobScheduler", "SchedulerConfig", "ensure_scheduler_schema"]
