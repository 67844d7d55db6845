"""Generic table access for the services.

Every public call is one unit of work against the store: it opens its own
transaction and commits (or rolls back) before returning. Records go in and
come out as JSON-ready dicts, so snapshots and API payloads can be built
from them directly.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Union

from sqlalchemy import Table, and_, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import ConcurrencyConflict, NotFound, StoreError
from app.database.base import Base

logger = logging.getLogger(__name__)

Record = dict[str, Any]

_FILTER_OPERATORS = {
    "eq": lambda column, value: column == value,
    "ne": lambda column, value: column != value,
    "lt": lambda column, value: column < value,
    "lte": lambda column, value: column <= value,
    "gt": lambda column, value: column > value,
    "gte": lambda column, value: column >= value,
    "in": lambda column, value: column.in_(value),
}


def _store_message(exc: SQLAlchemyError) -> str:
    original = getattr(exc, "orig", None)
    return str(original) if original is not None else str(exc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_json_value(value):
    if isinstance(value, datetime):
        return _as_utc(value).isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def _is_clause(value) -> bool:
    return isinstance(value, tuple) and len(value) == 2 and value[0] in _FILTER_OPERATORS


def _is_clause_list(value) -> bool:
    return isinstance(value, list) and bool(value) and all(_is_clause(item) for item in value)


def _python_type(column):
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _coerce_value(column, value):
    if value is None:
        return None
    expected = _python_type(column)
    if expected is datetime:
        if isinstance(value, str):
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if isinstance(value, datetime):
            return _as_utc(value)
        return value
    if expected is date and isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    if expected is time and isinstance(value, str):
        return time.fromisoformat(value.strip())
    return value


class TableGateway:
    def __init__(self, bind: Optional[Engine] = None, *, metadata=None) -> None:
        if bind is None:
            from app.database.engine import engine as bind
        self._engine = bind
        self._metadata = metadata if metadata is not None else Base.metadata

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def metadata(self):
        return self._metadata

    def table(self, name: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is None:
            raise StoreError(f"Unknown table: {name}")
        return table

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _pk(table: Table):
        return list(table.primary_key.columns)[0]

    @staticmethod
    def _row_to_record(row: Mapping) -> Record:
        return {key: to_json_value(value) for key, value in row.items()}

    @staticmethod
    def _column(table: Table, name: str):
        column = table.c.get(name)
        if column is None:
            raise StoreError(f"Unknown column {table.name}.{name}")
        return column

    def _coerce_record(self, table: Table, record: Mapping) -> Record:
        if not isinstance(record, Mapping):
            raise StoreError(f"{table.name}: record must be an object")
        values = {}
        for key, value in record.items():
            column = self._column(table, key)
            try:
                values[key] = _coerce_value(column, value)
            except (TypeError, ValueError) as exc:
                raise StoreError(f"{table.name}.{key}: {exc}") from exc
        return values

    def _conditions(self, table: Table, filters: Optional[Mapping]):
        conditions = []
        for key, value in (filters or {}).items():
            column = self._column(table, key)
            # A list of (op, value) pairs applies several conditions to one column.
            clauses = value if _is_clause_list(value) else [value]
            for clause in clauses:
                op = "eq"
                if _is_clause(clause):
                    op, clause = clause
                if op == "in":
                    clause = [_coerce_value(column, item) for item in clause]
                else:
                    clause = _coerce_value(column, clause)
                conditions.append(_FILTER_OPERATORS[op](column, clause))
        return conditions

    def _fetch_by_pk(self, conn, table: Table, record_id) -> Optional[Record]:
        row = conn.execute(select(table).where(self._pk(table) == record_id)).mappings().first()
        return self._row_to_record(row) if row is not None else None

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    def select(
        self,
        table_name: str,
        filters: Optional[Mapping] = None,
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Record]:
        table = self.table(table_name)
        stmt = select(table)
        conditions = self._conditions(table, filters)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        if order_by:
            column = self._column(table, order_by)
            pk = self._pk(table)
            if descending:
                stmt = stmt.order_by(column.desc(), pk.desc())
            else:
                stmt = stmt.order_by(column.asc(), pk.asc())
        if limit:
            stmt = stmt.limit(limit)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read {table_name}: {_store_message(exc)}") from exc
        return [self._row_to_record(row) for row in rows]

    def get(self, table_name: str, record_id) -> Optional[Record]:
        table = self.table(table_name)
        try:
            with self._engine.connect() as conn:
                return self._fetch_by_pk(conn, table, record_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read {table_name}: {_store_message(exc)}") from exc

    def count(self, table_name: str, filters: Optional[Mapping] = None) -> int:
        table = self.table(table_name)
        stmt = select(func.count()).select_from(table)
        conditions = self._conditions(table, filters)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        try:
            with self._engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to count {table_name}: {_store_message(exc)}") from exc

    def insert(
        self, table_name: str, records: Union[Mapping, Iterable[Mapping]]
    ) -> Union[Record, list[Record]]:
        table = self.table(table_name)
        single = isinstance(records, Mapping)
        rows = [records] if single else list(records)
        values = [self._coerce_record(table, row) for row in rows]
        created = []
        try:
            with self._engine.begin() as conn:
                for row in values:
                    result = conn.execute(table.insert().values(**row))
                    created.append(self._fetch_by_pk(conn, table, result.inserted_primary_key[0]))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to insert into {table_name}: {_store_message(exc)}") from exc
        logger.debug("Inserted %d row(s) into %s", len(created), table_name)
        return created[0] if single else created

    def update(
        self,
        table_name: str,
        record_id,
        patch: Mapping,
        *,
        expected_version: Optional[int] = None,
    ) -> Record:
        table = self.table(table_name)
        pk = self._pk(table)
        values = self._coerce_record(table, patch)
        versioned = "version" in table.c
        if versioned:
            values.pop("version", None)
            values["version"] = table.c.version + 1

        stmt = table.update().where(pk == record_id)
        if expected_version is not None:
            if not versioned:
                raise StoreError(f"{table_name} has no version column")
            stmt = stmt.where(table.c.version == expected_version)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(stmt.values(**values))
                if result.rowcount != 1:
                    current = self._fetch_by_pk(conn, table, record_id)
                    if current is None:
                        raise NotFound(f"{table_name} {record_id} not found")
                    raise ConcurrencyConflict(
                        f"{table_name} {record_id} changed concurrently "
                        f"(expected version {expected_version}, found {current.get('version')})"
                    )
                return self._fetch_by_pk(conn, table, record_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to update {table_name}: {_store_message(exc)}") from exc

    def delete(self, table_name: str, record_id) -> None:
        table = self.table(table_name)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(table.delete().where(self._pk(table) == record_id))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to delete from {table_name}: {_store_message(exc)}") from exc
        if result.rowcount == 0:
            raise NotFound(f"{table_name} {record_id} not found")

    def delete_where(self, table_name: str, filters: Mapping) -> int:
        table = self.table(table_name)
        conditions = self._conditions(table, filters)
        if not conditions:
            raise StoreError("delete_where requires at least one filter")
        try:
            with self._engine.begin() as conn:
                result = conn.execute(table.delete().where(and_(*conditions)))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to delete from {table_name}: {_store_message(exc)}") from exc
        return result.rowcount or 0

    def upsert(self, table_name: str, records: Iterable[Mapping]) -> list[Record]:
        table = self.table(table_name)
        pk = self._pk(table)
        values = [self._coerce_record(table, row) for row in records]
        saved = []
        try:
            with self._engine.begin() as conn:
                for row in values:
                    record_id = row.get(pk.name)
                    exists = record_id is not None and conn.execute(
                        select(pk).where(pk == record_id)
                    ).first() is not None
                    if exists:
                        patch = {key: value for key, value in row.items() if key != pk.name}
                        if patch:
                            conn.execute(table.update().where(pk == record_id).values(**patch))
                    else:
                        result = conn.execute(table.insert().values(**row))
                        record_id = result.inserted_primary_key[0]
                    saved.append(self._fetch_by_pk(conn, table, record_id))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to upsert into {table_name}: {_store_message(exc)}") from exc
        return saved


__all__ = ["Record", "TableGateway", "to_json_value"]
