from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, Request

from app.core.errors import SecurityViolation
from app.core.security import authenticate_request
from app.database import TableGateway
from app.http_errors import http_error, record_violation


@lru_cache
def get_gateway() -> TableGateway:
    return TableGateway()


def require_auth(
    request: Request,
    api_key: Optional[str] = Header(None, alias="X-API-Key"),
    api_key_alt: Optional[str] = Header(None, alias="api-key"),
    authorization: Optional[str] = Header(None),
    gateway: TableGateway = Depends(get_gateway),
):
    try:
        return authenticate_request(api_key or api_key_alt, authorization)
    except SecurityViolation as exc:
        record_violation(gateway, request, exc)
        raise http_error(exc, "Unauthorized") from exc


__all__ = ["get_gateway", "require_auth"]
