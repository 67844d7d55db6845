"""
Backup snapshots

- Requested tables are checked against the allow-list before any read.
- Tables are read one after another, each ordered by created_at ascending.
  There is no common read fence, so the metadata marks the snapshot as
  best-effort consistent.
- The first failing read aborts the whole snapshot.
- Recording history is a side effect; its failure never discards a snapshot.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Iterable, Optional

from app.config import get_settings
from app.core.constants import (
    BACKUP_CONSISTENCY,
    BACKUP_FILENAME_PREFIX,
    BACKUP_TYPES,
)
from app.core.dates import utc_now
from app.core.errors import StoreError, ValidationFailed
from app.core.security import default_backup_tables, ensure_tables_allowed
from app.services.activity_service import log_activity
from app.services.backup_history import BackupHistoryStore

logger = logging.getLogger(__name__)


def _unique(tables: Iterable[str]) -> list[str]:
    ordered = []
    for name in tables:
        if name not in ordered:
            ordered.append(name)
    return ordered


def _order_column(gateway, table_name: str) -> Optional[str]:
    table = gateway.table(table_name)
    return "created_at" if "created_at" in table.c else None


def snapshot_size(document: dict) -> int:
    return len(json.dumps(document, ensure_ascii=False).encode("utf-8"))


def backup_filename(now: Optional[datetime] = None) -> str:
    now = now or utc_now()
    return "{}-{}.json".format(BACKUP_FILENAME_PREFIX, now.date().isoformat())


def fetch_tables(gateway, tables: list[str]) -> dict[str, list[dict]]:
    data = {}
    for table_name in tables:
        try:
            data[table_name] = gateway.select(table_name, order_by=_order_column(gateway, table_name))
        except StoreError as exc:
            logger.error("Backup aborted while reading %s: %s", table_name, exc.message)
            raise StoreError(f"Failed to backup table {table_name}: {exc.message}") from exc
    return data


def create_backup(
    gateway,
    tables: Optional[Iterable[str]] = None,
    backup_type: str = "manual",
    *,
    history: Optional[BackupHistoryStore] = None,
    now: Optional[datetime] = None,
) -> dict:
    if backup_type not in BACKUP_TYPES:
        raise ValidationFailed(
            ["type: must be one of {}".format(", ".join(BACKUP_TYPES))]
        )
    requested = _unique(tables) if tables is not None else default_backup_tables()
    if not requested:
        raise ValidationFailed(["tables: at least one table is required"])
    ensure_tables_allowed(requested)

    settings = get_settings()
    now = now or utc_now()
    data = fetch_tables(gateway, requested)
    record_counts = {name: len(rows) for name, rows in data.items()}
    backup_id = "{}_{}".format(backup_type, int(now.timestamp() * 1000))

    document = {
        "metadata": {
            "timestamp": now.isoformat(),
            "version": settings.BACKUP_VERSION,
            "system": settings.SYSTEM_NAME,
            "type": backup_type,
            "tables": requested,
            "recordCounts": record_counts,
            "backupId": backup_id,
            "consistency": BACKUP_CONSISTENCY,
        },
        "data": data,
    }
    size = snapshot_size(document)
    total_records = sum(record_counts.values())
    logger.info(
        "Backup %s created: %d table(s), %d record(s), %d bytes",
        backup_id,
        len(requested),
        total_records,
        size,
    )

    history = history or BackupHistoryStore(gateway)
    try:
        history.record(
            backup_id=backup_id,
            timestamp=now,
            backup_type=backup_type,
            record_counts=record_counts,
            size=size,
        )
    except StoreError:
        logger.exception("Backup %s created but its history record was not saved", backup_id)

    log_activity(
        gateway,
        "backup_created",
        "{} backup {}: {} records".format(backup_type, backup_id, total_records),
    )
    return document


__all__ = ["backup_filename", "create_backup", "fetch_tables", "snapshot_size"]
