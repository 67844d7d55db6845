from datetime import timedelta


BACKUP_TYPES = ("full", "manual", "auto")
BACKUP_FREQUENCIES = {
    "hourly": timedelta(hours=1),
    "daily": timedelta(days=1),
    "weekly": timedelta(days=7),
}
BACKUP_STATUS_COMPLETED = "completed"
BACKUP_FILENAME_PREFIX = "itmco-backup"
BACKUP_CONSISTENCY = "best-effort"

STATE_NOT_DUE = "NOT_DUE"
STATE_DUE = "DUE"

RESTORE_MODES = ("insert", "upsert")

SYSTEM_USER_ID = "system"
SYSTEM_USER_NAME = "Backup System"
