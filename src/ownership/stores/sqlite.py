"""
SQLite implementation of the remote store.

Provides lightweight, embedded persistence for records using aiosqlite.
Suitable for development, tests, and offline copies of the hosted store.

Layout:
- One table per record kind (``categories``, ``questions``)
- Ownership columns ``owner`` (TEXT, NULL for orphans) and ``acl`` (JSON TEXT)
- Kind-specific payload serialized as JSON in ``payload``
- UUIDs stored as TEXT (36-character hyphenated format, so lexical order
  equals UUID order), datetimes as ISO 8601 TEXT
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import aiosqlite

from ownership.exceptions import OptimisticLockError, RecordNotFoundError, StoreError
from ownership.observability import Tracer, create_tracer
from ownership.observability.attributes import (
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_EXPECTED_VERSION,
    ATTR_QUERY_FILTER_COUNT,
    ATTR_QUERY_LIMIT,
    ATTR_RECORD_ID,
    ATTR_RECORD_KIND,
)
from ownership.records.acl import AccessControlEntry
from ownership.records.base import Record, RecordKind
from ownership.records.query import Filter, Query

COLUMNS = ("id", "created_at", "updated_at", "version", "owner", "acl", "payload")
FILTERABLE_COLUMNS = frozenset({"id", "created_at", "updated_at", "version", "owner"})

_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS {table} (
        id TEXT PRIMARY KEY,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        version INTEGER NOT NULL DEFAULT 1,
        owner TEXT,
        acl TEXT,
        payload TEXT NOT NULL DEFAULT '{{}}'
    )
"""

_CREATE_OWNER_INDEX = "CREATE INDEX IF NOT EXISTS idx_{table}_owner ON {table} (owner)"


class SQLiteRemoteStore:
    """
    SQLite implementation of RemoteStore.

    Requirements:
        - SQLite 3.24+
        - Tables created with ``create_tables()`` (idempotent)

    Example:
        >>> import aiosqlite
        >>> async with aiosqlite.connect("records.db") as db:
        ...     store = SQLiteRemoteStore(db)
        ...     await store.create_tables()
        ...     await store.save(Question(title="What is a GIL?"))

    Note:
        Filters are limited to the stored columns (id, created_at,
        updated_at, version, owner); payload attributes are opaque.
    """

    def __init__(
        self,
        connection: aiosqlite.Connection,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the SQLite store.

        Args:
            connection: aiosqlite database connection
            tracer: Optional tracer (if not provided, one will be created)
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._connection = connection

    async def create_tables(self) -> None:
        """Create the per-kind tables and owner indexes if they do not exist."""
        try:
            for kind in RecordKind:
                await self._connection.execute(_CREATE_TABLE.format(table=kind.table_name))
                await self._connection.execute(_CREATE_OWNER_INDEX.format(table=kind.table_name))
            await self._connection.commit()
        except aiosqlite.Error as e:
            raise StoreError("create_tables", str(e)) from e

    async def get(self, kind: RecordKind, record_id: UUID) -> Record | None:
        with self._tracer.span(
            "ownership.store.get",
            {
                ATTR_RECORD_KIND: kind.value,
                ATTR_RECORD_ID: str(record_id),
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "SELECT",
            },
        ):
            sql = f"SELECT {', '.join(COLUMNS)} FROM {kind.table_name} WHERE id = ?"  # nosec B608
            row = await self._fetchone("get", sql, (str(record_id),))
            return self._row_to_record(kind, row) if row is not None else None

    async def find(self, kind: RecordKind, query: Query | None = None) -> list[Record]:
        if query is None:
            query = Query()

        with self._tracer.span(
            "ownership.store.find",
            {
                ATTR_RECORD_KIND: kind.value,
                ATTR_QUERY_FILTER_COUNT: len(query.filters),
                ATTR_QUERY_LIMIT: query.limit if query.limit is not None else -1,
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "SELECT",
            },
        ):
            sql, params = self._build_select_query(kind, query)
            try:
                cursor = await self._connection.execute(sql, params)
                rows = await cursor.fetchall()
            except aiosqlite.Error as e:
                raise StoreError("find", str(e)) from e
            return [self._row_to_record(kind, row) for row in rows]

    async def count(self, kind: RecordKind, query: Query | None = None) -> int:
        if query is None:
            query = Query()

        with self._tracer.span(
            "ownership.store.count",
            {
                ATTR_RECORD_KIND: kind.value,
                ATTR_QUERY_FILTER_COUNT: len(query.filters),
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "SELECT",
            },
        ):
            sql, params = self._build_count_query(kind, query)
            row = await self._fetchone("count", sql, params)
            return row[0] if row else 0

    async def save(self, record: Record) -> Record:
        """
        Insert or update a record.

        Records without an id are inserted with a fresh id and version 1.
        Existing records are updated and their version incremented.
        """
        table = record.kind.table_name
        with self._tracer.span(
            "ownership.store.save",
            {
                ATTR_RECORD_KIND: record.kind.value,
                ATTR_RECORD_ID: str(record.id),
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "UPSERT",
            },
        ):
            now = datetime.now(UTC)
            if record.id is None:
                stored = record.model_copy(update={"id": uuid4(), "version": 1, "updated_at": now})
            else:
                row = await self._fetchone(
                    "save",
                    f"SELECT version FROM {table} WHERE id = ?",  # nosec B608
                    (str(record.id),),
                )
                version = row[0] + 1 if row is not None else 1
                stored = record.model_copy(update={"version": version, "updated_at": now})

            sql = f"""
                INSERT INTO {table} ({", ".join(COLUMNS)})
                VALUES ({", ".join("?" * len(COLUMNS))})
                ON CONFLICT(id) DO UPDATE SET
                    updated_at = excluded.updated_at,
                    version = excluded.version,
                    owner = excluded.owner,
                    acl = excluded.acl,
                    payload = excluded.payload
            """  # nosec B608 - table name from RecordKind
            await self._write("save", sql, self._record_to_values(stored))
            return stored

    async def save_with_version_check(self, record: Record) -> Record:
        """
        Update a record only if the stored version matches.

        Raises:
            RecordNotFoundError: If the record has no id or is not stored
            OptimisticLockError: If the stored version differs
        """
        table = record.kind.table_name
        with self._tracer.span(
            "ownership.store.save_with_version_check",
            {
                ATTR_RECORD_KIND: record.kind.value,
                ATTR_RECORD_ID: str(record.id),
                ATTR_EXPECTED_VERSION: record.version,
                ATTR_DB_SYSTEM: "sqlite",
                ATTR_DB_OPERATION: "UPDATE",
            },
        ):
            if record.id is None:
                raise RecordNotFoundError(None, record.kind.value)

            stored = record.model_copy(
                update={"version": record.version + 1, "updated_at": datetime.now(UTC)}
            )
            values = self._record_to_values(stored)
            sql = f"""
                UPDATE {table}
                SET updated_at = ?, version = ?, owner = ?, acl = ?, payload = ?
                WHERE id = ? AND version = ?
            """  # nosec B608 - table name from RecordKind
            rowcount = await self._write(
                "save_with_version_check",
                sql,
                (*values[2:], str(record.id), record.version),
            )

            if rowcount == 0:
                row = await self._fetchone(
                    "save_with_version_check",
                    f"SELECT version FROM {table} WHERE id = ?",  # nosec B608
                    (str(record.id),),
                )
                if row is None:
                    raise RecordNotFoundError(record.id, record.kind.value)
                raise OptimisticLockError(
                    record.id,
                    expected_version=record.version,
                    actual_version=row[0],
                )

            return stored

    async def _fetchone(self, operation: str, sql: str, params: tuple[Any, ...]) -> Any:
        try:
            cursor = await self._connection.execute(sql, params)
            return await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreError(operation, str(e)) from e

    async def _write(self, operation: str, sql: str, params: tuple[Any, ...]) -> int:
        try:
            cursor = await self._connection.execute(sql, params)
            await self._connection.commit()
        except aiosqlite.Error as e:
            raise StoreError(operation, str(e)) from e
        return cursor.rowcount

    def _record_to_values(self, record: Record) -> tuple[Any, ...]:
        return (
            str(record.id),
            record.created_at.isoformat(),
            record.updated_at.isoformat(),
            record.version,
            record.owner,
            json.dumps(record.acl.to_dict()) if record.acl is not None else None,
            json.dumps(record.payload()),
        )

    def _row_to_record(self, kind: RecordKind, row: Any) -> Record:
        record_id, created_at, updated_at, version, owner, acl, payload = row
        return kind.model_class(
            id=UUID(record_id),
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
            version=version,
            owner=owner,
            acl=AccessControlEntry.from_dict(json.loads(acl)) if acl is not None else None,
            **json.loads(payload),
        )

    def _build_where(self, query: Query) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for filter_ in query.filters:
            clause, filter_params = self._filter_to_sql(filter_)
            clauses.append(clause)
            params.extend(filter_params)
        if not clauses:
            return "", params
        return "WHERE " + " AND ".join(clauses), params

    def _build_select_query(self, kind: RecordKind, query: Query) -> tuple[str, tuple[Any, ...]]:
        """
        Build SELECT SQL from Query.

        Returns:
            Tuple of (SQL string, parameter tuple)
        """
        parts = [f"SELECT {', '.join(COLUMNS)} FROM {kind.table_name}"]  # nosec B608
        where, params = self._build_where(query)
        if where:
            parts.append(where)

        if query.order_by:
            self._check_column(query.order_by)
            parts.append(f"ORDER BY {query.order_by} {query.order_direction.upper()}")

        if query.limit is not None:
            parts.append(f"LIMIT {int(query.limit)}")

        return " ".join(parts), tuple(params)

    def _build_count_query(self, kind: RecordKind, query: Query) -> tuple[str, tuple[Any, ...]]:
        parts = [f"SELECT COUNT(*) FROM {kind.table_name}"]  # nosec B608
        where, params = self._build_where(query)
        if where:
            parts.append(where)
        return " ".join(parts), tuple(params)

    def _check_column(self, field: str) -> None:
        if field not in FILTERABLE_COLUMNS:
            raise ValueError(
                f"Cannot query on {field!r}; queryable columns are {sorted(FILTERABLE_COLUMNS)}"
            )

    def _filter_to_sql(self, filter_: Filter) -> tuple[str, list[Any]]:
        """
        Convert a Filter to SQL clause with parameters.

        Raises:
            ValueError: If the field is not a stored column or the operator is unknown
        """
        field = filter_.field
        self._check_column(field)
        value = filter_.value

        if isinstance(value, UUID):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()

        if filter_.operator == "missing":
            return f"{field} IS NULL", []
        elif filter_.operator == "exists":
            return f"{field} IS NOT NULL", []
        elif filter_.operator == "eq":
            return f"{field} = ?", [value]
        elif filter_.operator == "gt":
            return f"{field} > ?", [value]
        else:
            raise ValueError(f"Unknown operator: {filter_.operator}")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"SQLiteRemoteStore("
            f"tables={[kind.table_name for kind in RecordKind]}, "
            f"tracing={'enabled' if self._enable_tracing else 'disabled'})"
        )


__all__ = ["SQLiteRemoteStore"]
