from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "ITMCO Inventory Service"
    SYSTEM_NAME: str = "ITMCO Inventory Management"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Security
    # ==============================
    ADMIN_API_KEY: Optional[str] = None
    API_KEYS: Optional[str] = None
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    JWT_ISSUER: Optional[str] = None
    JWT_REQUIRED: bool = False
    CRON_SECRET: Optional[str] = None

    # ==============================
    # Backups
    # ==============================
    BACKUP_VERSION: str = "2.0"
    BACKUP_DEFAULT_TABLES: str = "users,products,issuances,activity_logs,security_logs"
    BACKUP_ALLOWED_TABLES: str = (
        "users,products,issuances,activity_logs,security_logs,stock_entries,"
        "warehouses,categories,branches,customers"
    )
    BACKUP_AUTO_ENABLED: bool = True
    BACKUP_FREQUENCY: str = "daily"
    BACKUP_RETENTION_DAYS: int = 30
    BACKUP_RETENTION_COUNT: int = 30
    BACKUP_HISTORY_LIMIT: int = 10

    # ==============================
    # Stock ledger
    # ==============================
    STOCK_ENTRY_MAX_RETRIES: int = 3

    # ==============================
    # Scheduler
    # ==============================
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_POLL_SECONDS: int = 300


def split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    items = []
    for part in value.split(","):
        part = part.strip()
        if part and part not in items:
            items.append(part)
    return items


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings", "split_csv"]
