from datetime import datetime, timezone

from fastapi import HTTPException, Request

from app.core.errors import InventoryError, SecurityViolation, ValidationFailed
from app.services.activity_service import log_security_event


def http_error(exc: InventoryError, error: str) -> HTTPException:
    detail = {
        "error": error,
        "message": exc.message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if isinstance(exc, ValidationFailed):
        detail["errors"] = exc.errors
    if isinstance(exc, SecurityViolation):
        detail["code"] = exc.code
    return HTTPException(status_code=exc.status_code, detail=detail)


def record_violation(gateway, request: Request, exc: SecurityViolation) -> None:
    client = request.client.host if request.client else None
    log_security_event(
        gateway,
        exc.code,
        "{} {}: {}".format(request.method, request.url.path, exc.message),
        ip_address=client,
    )


__all__ = ["http_error", "record_violation"]
