from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from app.config import get_settings
from app.core.constants import BACKUP_STATUS_COMPLETED
from app.core.dates import parse_timestamp

logger = logging.getLogger(__name__)

HISTORY_TABLE = "backup_history"


def to_history_view(row: dict) -> dict:
    return {
        "backupId": row.get("backup_id"),
        "timestamp": row.get("timestamp"),
        "type": row.get("type"),
        "recordCounts": row.get("record_counts") or {},
        "size": row.get("size") or 0,
        "status": row.get("status"),
    }


class BackupHistoryStore:
    """Authoritative backup history kept in the ``backup_history`` table."""

    def __init__(self, gateway) -> None:
        self._gateway = gateway

    def record(
        self,
        *,
        backup_id: str,
        timestamp: datetime,
        backup_type: str,
        record_counts: dict,
        size: int,
        status: str = BACKUP_STATUS_COMPLETED,
    ) -> dict:
        row = self._gateway.insert(
            HISTORY_TABLE,
            {
                "backup_id": backup_id,
                "timestamp": timestamp,
                "type": backup_type,
                "record_counts": dict(record_counts),
                "size": int(size),
                "status": status,
            },
        )
        return to_history_view(row)

    def latest(self) -> Optional[dict]:
        rows = self._gateway.select(
            HISTORY_TABLE,
            {"status": BACKUP_STATUS_COMPLETED},
            order_by="timestamp",
            descending=True,
            limit=1,
        )
        return to_history_view(rows[0]) if rows else None

    def last_backup_at(self) -> Optional[datetime]:
        latest = self.latest()
        if latest is None:
            return None
        return parse_timestamp(latest["timestamp"])

    def list_recent(self, limit: Optional[int] = None) -> list[dict]:
        limit = limit or get_settings().BACKUP_HISTORY_LIMIT
        rows = self._gateway.select(HISTORY_TABLE, order_by="timestamp", descending=True, limit=limit)
        return [to_history_view(row) for row in rows]

    def prune(
        self,
        now: datetime,
        *,
        retention_days: Optional[int] = None,
        retention_count: Optional[int] = None,
    ) -> int:
        removed = 0
        if retention_days:
            cutoff = now - timedelta(days=retention_days)
            removed += self._gateway.delete_where(HISTORY_TABLE, {"timestamp": ("lt", cutoff)})
        if retention_count:
            rows = self._gateway.select(HISTORY_TABLE, order_by="timestamp", descending=True)
            stale_ids = [row["id"] for row in rows[retention_count:]]
            if stale_ids:
                removed += self._gateway.delete_where(HISTORY_TABLE, {"id": ("in", stale_ids)})
        if removed:
            logger.info("Pruned %d backup history record(s)", removed)
        return removed


__all__ = ["BackupHistoryStore", "HISTORY_TABLE", "to_history_view"]
