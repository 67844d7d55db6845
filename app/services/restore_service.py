"""
Snapshot restore

Restore is additive: rows are inserted as they appear in the snapshot and
nothing is deleted first. Replaying the same snapshot twice therefore fails
on existing ids for every non-empty table. ``mode="upsert"`` is the explicit
opt-in for insert-or-update by primary key.

Tables are replayed parents first (foreign-key order of the metadata), each
on its own; one table failing does not stop the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Optional

from app.core.constants import RESTORE_MODES
from app.core.dates import utc_now
from app.core.errors import SnapshotFormatError, StoreError, ValidationFailed
from app.core.security import ensure_tables_allowed
from app.services.activity_service import log_activity

logger = logging.getLogger(__name__)


def validate_snapshot(document) -> tuple[Mapping, Mapping]:
    if not isinstance(document, Mapping):
        raise SnapshotFormatError("Invalid backup file format: expected a JSON object")
    metadata = document.get("metadata")
    data = document.get("data")
    if not isinstance(metadata, Mapping) or not isinstance(data, Mapping):
        raise SnapshotFormatError("Invalid backup file format: 'metadata' and 'data' are required")
    for table_name, rows in data.items():
        if not isinstance(rows, list):
            raise SnapshotFormatError(f"Invalid backup file format: rows for {table_name} must be a list")
        if any(not isinstance(row, Mapping) for row in rows):
            raise SnapshotFormatError(f"Invalid backup file format: rows for {table_name} must be objects")
    return metadata, data


def replay_order(gateway, tables) -> list:
    rank = {table.name: index for index, table in enumerate(gateway.metadata.sorted_tables)}
    # Stable sort: names the metadata does not know keep document order, last.
    return sorted(tables, key=lambda name: rank.get(name, len(rank)))


def _empty_results() -> dict:
    return {
        "restored": {},
        "errors": {},
        "summary": {
            "totalTables": 0,
            "successfulTables": 0,
            "failedTables": 0,
            "totalRecords": 0,
            "restoredRecords": 0,
        },
    }


def restore(gateway, document, *, mode: str = "insert", now: Optional[datetime] = None) -> dict:
    if mode not in RESTORE_MODES:
        raise ValidationFailed(["mode: must be one of {}".format(", ".join(RESTORE_MODES))])
    metadata, data = validate_snapshot(document)
    ensure_tables_allowed(list(data.keys()))

    results = _empty_results()
    summary = results["summary"]
    write = gateway.upsert if mode == "upsert" else gateway.insert

    for table_name in replay_order(gateway, data.keys()):
        rows = data[table_name]
        summary["totalTables"] += 1
        summary["totalRecords"] += len(rows)

        if not rows:
            results["restored"][table_name] = {"records": 0, "status": "empty"}
            summary["successfulTables"] += 1
            continue

        try:
            write(table_name, rows)
        except StoreError as exc:
            logger.warning("Restore of %s failed: %s", table_name, exc.message)
            results["errors"][table_name] = {"error": exc.message, "records": len(rows)}
            summary["failedTables"] += 1
            continue

        results["restored"][table_name] = {"records": len(rows), "status": "success"}
        summary["successfulTables"] += 1
        summary["restoredRecords"] += len(rows)

    success = summary["failedTables"] == 0
    message = "Restoration completed. {}/{} tables restored successfully.".format(
        summary["successfulTables"], summary["totalTables"]
    )
    logger.info(
        "Restore of backup %s (%s): %s",
        metadata.get("backupId") or metadata.get("timestamp"),
        mode,
        message,
    )
    log_activity(
        gateway,
        "backup_restored",
        "{} ({} of {} records)".format(message, summary["restoredRecords"], summary["totalRecords"]),
    )

    now = now or utc_now()
    return {
        "success": success,
        "message": message,
        "results": results,
        "metadata": {
            "restoredAt": now.isoformat(),
            "mode": mode,
            "originalBackup": dict(metadata),
        },
    }


__all__ = ["replay_order", "restore", "validate_snapshot"]
