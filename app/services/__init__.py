from app.services.backup_scheduler import BackupController
from app.services.backup_service import create_backup
from app.services.restore_service import restore
from app.services.stock_ledger_service import get_history, get_summary, record_stock_entry

__all__ = [
    "BackupController",
    "create_backup",
    "get_history",
    "get_summary",
    "record_stock_entry",
    "restore",
]
