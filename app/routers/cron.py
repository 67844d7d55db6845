import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.errors import InventoryError, SecurityViolation
from app.core.security import verify_cron_secret
from app.dependencies import get_gateway
from app.http_errors import http_error, record_violation
from app.services.backup_scheduler import BackupController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["Cron"])


@router.get("/backup")
def run_backup_cycle(
    request: Request,
    secret: Optional[str] = Query(None, description="Shared cron secret"),
    gateway=Depends(get_gateway),
):
    try:
        verify_cron_secret(secret)
    except SecurityViolation as exc:
        record_violation(gateway, request, exc)
        raise http_error(exc, "Unauthorized") from exc

    try:
        return BackupController(gateway).run_cycle()
    except InventoryError as exc:
        logger.exception("Cron backup cycle failed")
        raise http_error(exc, "Cron backup failed") from exc


__all__ = ["router"]
