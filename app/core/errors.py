"""Error taxonomy shared by the gateway, services and routers.

Routers translate these into HTTP responses; services never build
HTTPException themselves.
"""

from __future__ import annotations

from typing import Iterable, Optional


class InventoryError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(InventoryError):
    status_code = 400

    def __init__(self, errors: Iterable[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Validation failed")


class SecurityViolation(InventoryError):
    TABLE_NOT_ALLOWED = "TABLE_NOT_ALLOWED"
    BAD_SECRET = "BAD_SECRET"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"

    def __init__(self, message: str, code: str, details: Optional[dict] = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return 401 if self.code in (self.BAD_SECRET, self.NOT_AUTHENTICATED) else 403


class StoreError(InventoryError):
    status_code = 500


class SnapshotFormatError(InventoryError):
    status_code = 400


class NotFound(InventoryError):
    status_code = 404


class ConcurrencyConflict(InventoryError):
    status_code = 409


__all__ = [
    "ConcurrencyConflict",
    "InventoryError",
    "NotFound",
    "SecurityViolation",
    "SnapshotFormatError",
    "StoreError",
    "ValidationFailed",
]
