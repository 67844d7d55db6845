from app.database.base import Base
from app.database.engine import engine, ensure_sqlite_schema
from app.database.gateway import TableGateway
from app.database.session import SessionLocal

__all__ = ["Base", "SessionLocal", "TableGateway", "engine", "ensure_sqlite_schema"]
