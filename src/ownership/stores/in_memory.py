"""
In-memory implementation of the remote store.

Provides a simple, fast store for testing and development. All data is held
in memory and lost when the process terminates.
"""

import asyncio
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from ownership.exceptions import OptimisticLockError, RecordNotFoundError
from ownership.observability import Tracer, create_tracer
from ownership.observability.attributes import (
    ATTR_EXPECTED_VERSION,
    ATTR_QUERY_FILTER_COUNT,
    ATTR_QUERY_LIMIT,
    ATTR_RECORD_ID,
    ATTR_RECORD_KIND,
)
from ownership.records.base import Record, RecordKind
from ownership.records.query import Filter, Query


class InMemoryRemoteStore:
    """
    In-memory implementation of RemoteStore.

    Records are kept per kind in dictionaries keyed by id. Every record that
    goes in or comes out is a deep copy, so callers can never change stored
    state without calling save().

    Example:
        >>> store = InMemoryRemoteStore()
        >>> saved = await store.save(Category(name="Python"))
        >>> saved.id is not None
        True
        >>> await store.count(RecordKind.CATEGORY)
        1

    Note:
        Query performance is O(n); acceptable for tests, not for production.
    """

    def __init__(
        self,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the in-memory store.

        Args:
            tracer: Optional tracer (if not provided, one will be created)
            enable_tracing: Whether to enable OpenTelemetry tracing (default True)
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._records: dict[RecordKind, dict[UUID, Record]] = {kind: {} for kind in RecordKind}
        self._lock = asyncio.Lock()

    async def get(self, kind: RecordKind, record_id: UUID) -> Record | None:
        with self._tracer.span(
            "ownership.store.get",
            {
                ATTR_RECORD_KIND: kind.value,
                ATTR_RECORD_ID: str(record_id),
            },
        ):
            async with self._lock:
                record = self._records[kind].get(record_id)
                return record.model_copy(deep=True) if record is not None else None

    async def find(self, kind: RecordKind, query: Query | None = None) -> list[Record]:
        if query is None:
            query = Query()

        with self._tracer.span(
            "ownership.store.find",
            {
                ATTR_RECORD_KIND: kind.value,
                ATTR_QUERY_FILTER_COUNT: len(query.filters),
                ATTR_QUERY_LIMIT: query.limit if query.limit is not None else -1,
            },
        ):
            async with self._lock:
                results = self._matching(kind, query)

                if query.order_by:
                    order_by = query.order_by
                    reverse = query.order_direction == "desc"
                    # None sorts last ascending
                    results.sort(
                        key=lambda r: (getattr(r, order_by) is None, getattr(r, order_by)),
                        reverse=reverse,
                    )

                if query.limit is not None:
                    results = results[: query.limit]

                return [r.model_copy(deep=True) for r in results]

    async def count(self, kind: RecordKind, query: Query | None = None) -> int:
        if query is None:
            query = Query()

        with self._tracer.span(
            "ownership.store.count",
            {
                ATTR_RECORD_KIND: kind.value,
                ATTR_QUERY_FILTER_COUNT: len(query.filters),
            },
        ):
            async with self._lock:
                return len(self._matching(kind, query))

    async def save(self, record: Record) -> Record:
        """
        Save a record (upsert semantics).

        New records get an id and version 1; existing records get their
        version incremented.
        """
        with self._tracer.span(
            "ownership.store.save",
            {
                ATTR_RECORD_KIND: record.kind.value,
                ATTR_RECORD_ID: str(record.id),
            },
        ):
            async with self._lock:
                return self._store(record)

    async def save_with_version_check(self, record: Record) -> Record:
        """
        Save a record only if its version matches the stored version.

        Raises:
            RecordNotFoundError: If the record has no id or is not stored
            OptimisticLockError: If the stored version differs
        """
        with self._tracer.span(
            "ownership.store.save_with_version_check",
            {
                ATTR_RECORD_KIND: record.kind.value,
                ATTR_RECORD_ID: str(record.id),
                ATTR_EXPECTED_VERSION: record.version,
            },
        ):
            async with self._lock:
                existing = self._records[record.kind].get(record.id) if record.id else None
                if existing is None:
                    raise RecordNotFoundError(record.id, record.kind.value)

                if existing.version != record.version:
                    raise OptimisticLockError(
                        record.id,  # type: ignore[arg-type]
                        expected_version=record.version,
                        actual_version=existing.version,
                    )

                return self._store(record)

    async def clear(self) -> None:
        """Remove all records of every kind."""
        async with self._lock:
            for records in self._records.values():
                records.clear()

    def _store(self, record: Record) -> Record:
        now = datetime.now(UTC)
        updates: dict[str, Any] = {"updated_at": now}

        if record.id is None:
            updates["id"] = uuid4()
            updates["version"] = 1
        else:
            existing = self._records[record.kind].get(record.id)
            updates["version"] = existing.version + 1 if existing is not None else 1

        stored = record.model_copy(update=updates, deep=True)
        self._records[record.kind][stored.id] = stored  # type: ignore[index]
        return stored.model_copy(deep=True)

    def _matching(self, kind: RecordKind, query: Query) -> list[Record]:
        results = list(self._records[kind].values())
        for filter_ in query.filters:
            results = [r for r in results if self._apply_filter(r, filter_)]
        return results

    def _apply_filter(self, record: Record, filter_: Filter) -> bool:
        """
        Apply a single filter to a record.

        A greater-than comparison against an absent attribute never matches.
        """
        value = getattr(record, filter_.field, None)

        if filter_.operator == "exists":
            return value is not None
        elif filter_.operator == "missing":
            return value is None
        elif filter_.operator == "eq":
            return bool(value == filter_.value)

        if value is None:
            return False
        if filter_.operator == "gt":
            return bool(value > filter_.value)
        return False

    def __len__(self) -> int:
        """Return the number of records across all kinds."""
        return sum(len(records) for records in self._records.values())


__all__ = ["InMemoryRemoteStore"]
