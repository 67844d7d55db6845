import importlib

from app.models.audit_log import ActivityLog, SecurityLog
from app.models.backup import BackupConfig, BackupHistory
from app.models.catalog import Branch, Category, Customer
from app.models.issuance import Issuance
from app.models.product import Product
from app.models.stock_entry import StockEntry
from app.models.user import User
from app.models.warehouse import Warehouse


def import_all_models() -> None:
    for module_name in (
        "app.models.audit_log",
        "app.models.backup",
        "app.models.catalog",
        "app.models.issuance",
        "app.models.product",
        "app.models.stock_entry",
        "app.models.user",
        "app.models.warehouse",
    ):
        importlib.import_module(module_name)


__all__ = [
    "ActivityLog",
    "BackupConfig",
    "BackupHistory",
    "Branch",
    "Category",
    "Customer",
    "Issuance",
    "Product",
    "SecurityLog",
    "StockEntry",
    "User",
    "Warehouse",
    "import_all_models",
]
