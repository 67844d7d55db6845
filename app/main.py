import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import Settings, get_settings
from app.core.logging import setup_logging
from app.database import Base, engine, ensure_sqlite_schema
from app.models import import_all_models
from app.routers import (
    backup_router,
    cron_router,
    health_router,
    restore_router,
    stock_entries_router,
)

logger = logging.getLogger(__name__)

setup_logging()
settings: Settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(backup_router)
app.include_router(restore_router)
app.include_router(cron_router)
app.include_router(stock_entries_router)


@app.get("/")
def root():
    return {
        "service": settings.APP_NAME,
        "system": settings.SYSTEM_NAME,
        "backupVersion": settings.BACKUP_VERSION,
        "health": "/health",
    }


__all__ = ["app", "root"]
