import logging

from app.core.constants import SYSTEM_USER_ID, SYSTEM_USER_NAME
from app.core.errors import StoreError

logger = logging.getLogger(__name__)


def log_activity(gateway, action, details, *, module="backup", user_id=SYSTEM_USER_ID, user_name=SYSTEM_USER_NAME):
    """Append an activity log row. Failures are logged, never raised."""
    try:
        gateway.insert(
            "activity_logs",
            {
                "user_id": user_id,
                "user_name": user_name,
                "action": action,
                "module": module,
                "details": details,
            },
        )
    except StoreError:
        logger.exception("Failed to write activity log: %s", action)


def log_security_event(gateway, event_type, details, *, severity="high", ip_address=None):
    try:
        gateway.insert(
            "security_logs",
            {
                "event_type": event_type,
                "severity": severity,
                "details": details,
                "ip_address": ip_address,
            },
        )
    except StoreError:
        logger.exception("Failed to write security log: %s", event_type)


__all__ = ["log_activity", "log_security_event"]
