"""Request authentication, the cron shared secret and the backup table allow-list.

When neither API keys nor a JWT secret are configured the API is open, which
is how local development runs. Every check raises ``SecurityViolation``; the
routers decide how it is reported.
"""

from __future__ import annotations

import hmac
from typing import Iterable, Optional

import jwt

from app.config import get_settings, split_csv
from app.core.errors import SecurityViolation


def _configured_api_keys() -> list[str]:
    settings = get_settings()
    keys = split_csv(settings.API_KEYS)
    if settings.ADMIN_API_KEY and settings.ADMIN_API_KEY.strip():
        keys.insert(0, settings.ADMIN_API_KEY.strip())
    return keys


def _constant_time_equals(provided: str, expected: str) -> bool:
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return None


def _unauthenticated(message: str) -> SecurityViolation:
    return SecurityViolation(message, SecurityViolation.NOT_AUTHENTICATED)


def decode_token(token: str) -> dict:
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise _unauthenticated("JWT auth is not configured")
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={"verify_aud": bool(settings.JWT_AUDIENCE)},
        )
    except jwt.PyJWTError as exc:
        raise _unauthenticated("Invalid JWT") from exc


def authenticate_request(api_key: Optional[str], authorization: Optional[str]) -> Optional[dict]:
    """Return the auth context for a request, or None when auth is not configured."""
    settings = get_settings()
    keys = _configured_api_keys()

    # JWT_REQUIRED turns API keys off entirely.
    if api_key and not settings.JWT_REQUIRED:
        if any(_constant_time_equals(api_key, key) for key in keys):
            return {"auth_type": "api_key"}

    token = _bearer_token(authorization)
    if token and (settings.JWT_SECRET or settings.JWT_REQUIRED):
        return {"auth_type": "jwt", "payload": decode_token(token)}

    if keys or settings.JWT_SECRET or settings.JWT_REQUIRED:
        raise _unauthenticated("Not authenticated")
    return None


def verify_cron_secret(secret: Optional[str]) -> None:
    """Compare the cron shared secret in constant time. An unset server secret rejects every call."""
    expected = (get_settings().CRON_SECRET or "").strip()
    provided = (secret or "").strip()
    if not expected or not provided or not _constant_time_equals(provided, expected):
        raise SecurityViolation("Unauthorized", SecurityViolation.BAD_SECRET)


def allowed_tables() -> list[str]:
    return split_csv(get_settings().BACKUP_ALLOWED_TABLES)


def default_backup_tables() -> list[str]:
    return split_csv(get_settings().BACKUP_DEFAULT_TABLES)


def ensure_tables_allowed(tables: Iterable[str]) -> list[str]:
    allowed = set(allowed_tables())
    requested = list(tables)
    rejected = [name for name in requested if not isinstance(name, str) or name not in allowed]
    if rejected:
        raise SecurityViolation(
            "Table(s) not allowed for backup/restore: {}".format(
                ", ".join(str(name) for name in rejected)
            ),
            SecurityViolation.TABLE_NOT_ALLOWED,
            {"tables": [str(name) for name in rejected]},
        )
    return requested


__all__ = [
    "allowed_tables",
    "authenticate_request",
    "decode_token",
    "default_backup_tables",
    "ensure_tables_allowed",
    "verify_cron_secret",
]
