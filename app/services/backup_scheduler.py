"""
Scheduled backups

Two states: NOT_DUE and DUE. A backup is DUE when auto backups are enabled
and either no completed backup exists or the newest one is at least one
interval old. Running the cycle while DUE takes an ``auto`` backup of the
default table set; the new history record moves the state back to NOT_DUE.
Retention cleanup runs after every auto backup and can also be called on
its own.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.config import get_settings
from app.core.constants import BACKUP_FREQUENCIES, STATE_DUE, STATE_NOT_DUE
from app.core.dates import utc_now
from app.core.errors import InventoryError
from app.core.security import default_backup_tables
from app.services.backup_history import BackupHistoryStore
from app.services.backup_service import create_backup, snapshot_size

logger = logging.getLogger(__name__)

CONFIG_TABLE = "backup_config"
CONFIG_ROW_ID = 1


class BackupController:
    def __init__(
        self,
        gateway,
        *,
        history: Optional[BackupHistoryStore] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._gateway = gateway
        self._history = history or BackupHistoryStore(gateway)
        self._clock = clock or utc_now

    @property
    def history(self) -> BackupHistoryStore:
        return self._history

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self._clock()

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------
    def get_config(self) -> dict:
        settings = get_settings()
        config = {
            "auto_backup_enabled": settings.BACKUP_AUTO_ENABLED,
            "backup_frequency": settings.BACKUP_FREQUENCY,
            "backup_retention_days": settings.BACKUP_RETENTION_DAYS,
            "backup_retention_count": settings.BACKUP_RETENTION_COUNT,
        }
        row = self._gateway.get(CONFIG_TABLE, CONFIG_ROW_ID)
        if row:
            for key in config:
                if row.get(key) is not None:
                    config[key] = row[key]
        return config

    def update_config(self, patch: dict, *, now: Optional[datetime] = None) -> dict:
        values = {key: value for key, value in patch.items() if value is not None}
        values["updated_at"] = self._now(now)
        if self._gateway.get(CONFIG_TABLE, CONFIG_ROW_ID) is None:
            self._gateway.insert(CONFIG_TABLE, {**self.get_config(), **values, "id": CONFIG_ROW_ID})
        else:
            self._gateway.update(CONFIG_TABLE, CONFIG_ROW_ID, values)
        config = self.get_config()
        logger.info("Backup config updated: %s", config)
        return config

    @staticmethod
    def interval(config: dict) -> timedelta:
        frequency = config.get("backup_frequency")
        if frequency not in BACKUP_FREQUENCIES:
            raise ValueError(f"Unsupported backup frequency: {frequency}")
        return BACKUP_FREQUENCIES[frequency]

    # ------------------------------------------------------------------
    # due-check
    # ------------------------------------------------------------------
    def next_backup_at(self, config: Optional[dict] = None) -> Optional[datetime]:
        config = config or self.get_config()
        last = self._history.last_backup_at()
        if last is None:
            return None
        return last + self.interval(config)

    def backup_state(self, now: Optional[datetime] = None) -> str:
        config = self.get_config()
        if not config["auto_backup_enabled"]:
            return STATE_NOT_DUE
        next_at = self.next_backup_at(config)
        if next_at is None or self._now(now) >= next_at:
            return STATE_DUE
        return STATE_NOT_DUE

    def is_backup_due(self, now: Optional[datetime] = None) -> bool:
        return self.backup_state(now) == STATE_DUE

    # ------------------------------------------------------------------
    # cycle
    # ------------------------------------------------------------------
    def cleanup_old_backups(self, now: Optional[datetime] = None) -> int:
        config = self.get_config()
        return self._history.prune(
            self._now(now),
            retention_days=config["backup_retention_days"],
            retention_count=config["backup_retention_count"],
        )

    def run_cycle(self, now: Optional[datetime] = None) -> dict:
        now = self._now(now)
        if not self.is_backup_due(now):
            return {
                "success": True,
                "status": "not_due",
                "message": "Backup not due yet",
                "timestamp": now.isoformat(),
            }

        logger.info("Auto backup due; starting")
        try:
            document = create_backup(
                self._gateway,
                default_backup_tables(),
                "auto",
                history=self._history,
                now=now,
            )
        except InventoryError as exc:
            logger.exception("Auto backup failed")
            return {
                "success": False,
                "status": "failed",
                "message": "Auto backup failed",
                "error": exc.message,
                "recordCounts": {},
                "size": 0,
                "timestamp": now.isoformat(),
            }

        removed = self.cleanup_old_backups(now)
        metadata = document["metadata"]
        return {
            "success": True,
            "status": "completed",
            "message": "Auto backup completed successfully",
            "backupId": metadata["backupId"],
            "recordCounts": metadata["recordCounts"],
            "size": snapshot_size(document),
            "removedBackups": removed,
            "timestamp": now.isoformat(),
        }


__all__ = ["BackupController"]
