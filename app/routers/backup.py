from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.core.errors import InventoryError, SecurityViolation
from app.core.security import default_backup_tables
from app.core.validation import require_valid
from app.dependencies import get_gateway, require_auth
from app.http_errors import http_error, record_violation
from app.schemas.backup import BackupConfigUpdate, BackupRequest
from app.services.backup_scheduler import BackupController
from app.services.backup_service import backup_filename, create_backup

router = APIRouter(prefix="/backup", tags=["Backup"])


def _config_view(controller: BackupController) -> dict:
    config = controller.get_config()
    next_at = controller.next_backup_at(config)
    return {
        **config,
        "next_backup_at": next_at.isoformat() if next_at else None,
        "state": controller.backup_state(),
    }


@router.get("")
def download_backup(gateway=Depends(get_gateway), _auth=Depends(require_auth)):
    try:
        document = create_backup(gateway, default_backup_tables(), "full")
    except InventoryError as exc:
        raise http_error(exc, "Backup failed") from exc
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(backup_filename())},
    )


@router.post("")
def create_custom_backup(
    request: Request,
    payload: Any = Body(default=None),
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    try:
        options = require_valid(BackupRequest, payload if payload is not None else {})
        document = create_backup(gateway, options.tables, options.type)
    except SecurityViolation as exc:
        record_violation(gateway, request, exc)
        raise http_error(exc, "Custom backup rejected") from exc
    except InventoryError as exc:
        raise http_error(exc, "Custom backup failed") from exc
    return {**document, "backupId": document["metadata"]["backupId"]}


@router.get("/history")
def backup_history(
    limit: int = Query(10, ge=1, le=100, description="Max records to return"),
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    controller = BackupController(gateway)
    try:
        history = controller.history.list_recent(limit)
    except InventoryError as exc:
        raise http_error(exc, "Failed to load backup history") from exc
    return {"history": history}


@router.get("/config")
def get_backup_config(gateway=Depends(get_gateway), _auth=Depends(require_auth)):
    try:
        return _config_view(BackupController(gateway))
    except InventoryError as exc:
        raise http_error(exc, "Failed to load backup config") from exc


@router.put("/config")
def update_backup_config(
    payload: Any = Body(default=None),
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    controller = BackupController(gateway)
    try:
        update = require_valid(BackupConfigUpdate, payload)
        controller.update_config(update.model_dump(exclude_none=True))
        return _config_view(controller)
    except InventoryError as exc:
        raise http_error(exc, "Failed to update backup config") from exc


__all__ = ["router"]
