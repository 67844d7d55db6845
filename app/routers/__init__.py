from app.routers.backup import router as backup_router
from app.routers.cron import router as cron_router
from app.routers.health import router as health_router
from app.routers.restore import router as restore_router
from app.routers.stock_entries import router as stock_entries_router

__all__ = [
    "backup_router",
    "cron_router",
    "health_router",
    "restore_router",
    "stock_entries_router",
]
