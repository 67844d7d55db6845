from app.schemas.backup import BackupConfigUpdate, BackupRequest
from app.schemas.issuance import IssuanceCreate
from app.schemas.product import ProductCreate
from app.schemas.settings import SettingsUpdate
from app.schemas.stock_entry import StockEntryCreate, StockEntryRead, StockSummary
from app.schemas.user import UserCreate

__all__ = [
    "BackupConfigUpdate",
    "BackupRequest",
    "IssuanceCreate",
    "ProductCreate",
    "SettingsUpdate",
    "StockEntryCreate",
    "StockEntryRead",
    "StockSummary",
    "UserCreate",
]
