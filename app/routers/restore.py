from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, Query, Request

from app.core.errors import InventoryError, SecurityViolation
from app.dependencies import get_gateway, require_auth
from app.http_errors import http_error, record_violation
from app.services.restore_service import restore

router = APIRouter(prefix="/restore", tags=["Backup"])


@router.post("")
def restore_backup(
    request: Request,
    payload: Any = Body(default=None),
    mode: Literal["insert", "upsert"] = Query("insert", description="insert is additive; upsert updates existing ids"),
    gateway=Depends(get_gateway),
    _auth=Depends(require_auth),
):
    # Partial success is a valid outcome, so per-table failures stay in the 200 body.
    try:
        return restore(gateway, payload, mode=mode)
    except SecurityViolation as exc:
        record_violation(gateway, request, exc)
        raise http_error(exc, "Restoration rejected") from exc
    except InventoryError as exc:
        raise http_error(exc, "Restoration failed") from exc


__all__ = ["router"]
