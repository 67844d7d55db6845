import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from app.config import Settings, get_settings


app_settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30
_SQLITE_BUSY_TIMEOUT_MS = _SQLITE_BUSY_TIMEOUT_SECONDS * 1000


def _is_sqlite_memory(url) -> bool:
    sqlite_db = url.database
    if sqlite_db in (None, "", ":memory:"):
        return True
    return url.query.get("mode") == "memory"


def build_engine(database_url: str) -> Engine:
    """Create an engine with the pragmas and pooling the service expects."""
    db_url = make_url(database_url)
    is_sqlite = db_url.get_backend_name() == "sqlite"
    is_memory = is_sqlite and _is_sqlite_memory(db_url)

    connect_args = {}
    engine_kwargs: dict[str, object] = dict(pool_pre_ping=True)
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS}
        if is_memory:
            engine_kwargs.update(poolclass=StaticPool)

    new_engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(new_engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
                if not is_memory:
                    try:
                        cursor.execute("PRAGMA journal_mode=WAL")
                        cursor.execute("PRAGMA synchronous=NORMAL")
                    except sqlite3.DatabaseError:
                        pass
            finally:
                cursor.close()

    return new_engine


engine = build_engine(app_settings.DATABASE_URL)


# Columns added after the first deployments; older SQLite files get them on startup.
_SQLITE_COLUMN_DEFAULTS = {
    "products": {
        "version": "INTEGER NOT NULL DEFAULT 1",
        "updated_at": "DATETIME",
    },
    "stock_entries": {
        "entry_datetime": "DATETIME",
    },
    "backup_config": {
        "backup_retention_count": "INTEGER NOT NULL DEFAULT 30",
    },
}


def _escape_sqlite_identifier(value: str) -> str:
    return value.replace('"', '""')


def _get_sqlite_columns(conn, table_name: str):
    escaped_table = _escape_sqlite_identifier(table_name)
    # noinspection SqlNoDataSourceInspection
    result = conn.exec_driver_sql(
        f'PRAGMA table_info("{escaped_table}")'
    ).mappings()
    return {row["name"] for row in result}


def ensure_sqlite_schema(bind: Engine = None) -> list:
    bind = bind if bind is not None else engine
    if bind.url.get_backend_name() != "sqlite":
        return []

    added_columns = []
    with bind.begin() as conn:
        for table_name, columns in _SQLITE_COLUMN_DEFAULTS.items():
            existing = _get_sqlite_columns(conn, table_name)
            if not existing:
                continue
            for column_name, ddl in columns.items():
                if column_name in existing:
                    continue
                escaped_table = _escape_sqlite_identifier(table_name)
                escaped_column = _escape_sqlite_identifier(column_name)
                # noinspection SqlNoDataSourceInspection
                conn.exec_driver_sql(
                    f'ALTER TABLE "{escaped_table}" ADD COLUMN "{escaped_column}" {ddl}'
                )
                added_columns.append((table_name, column_name))

    for table_name, column_name in added_columns:
        logger.info("Added missing column %s.%s", table_name, column_name)
    return added_columns
