"""
Remote store protocol.

The remote store is the hosted object store the application persists its
records in. This package only needs a handful of primitives from it:
attribute-filtered find and count, get by id, and save (with or without an
optimistic version check). Attribute and ACL assignment happen on the
record itself before it is saved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from ownership.records.base import Record, RecordKind
    from ownership.records.query import Query


@runtime_checkable
class RemoteStore(Protocol):
    """
    Protocol for remote record stores.

    Implementations:
    - InMemoryRemoteStore: dictionaries, for tests and development
    - SQLiteRemoteStore: aiosqlite-backed, one table per record kind

    Contract:
    - ``save`` assigns an id to records that have none and increments the
      version of existing records. It returns the persisted copy; callers
      never hold objects that are bound to the store.
    - ``save_with_version_check`` only writes if the stored version equals
      the record's version, raising OptimisticLockError otherwise and
      RecordNotFoundError if the record no longer exists.
    - Failures of the store itself surface as StoreError.
    """

    async def get(self, kind: RecordKind, record_id: UUID) -> Record | None:
        """Get a record by id, or None if it does not exist."""
        ...

    async def find(self, kind: RecordKind, query: Query | None = None) -> list[Record]:
        """Find records of a kind matching a query."""
        ...

    async def count(self, kind: RecordKind, query: Query | None = None) -> int:
        """Count records of a kind matching a query (ordering and paging ignored)."""
        ...

    async def save(self, record: Record) -> Record:
        """Insert or update a record and return the persisted copy."""
        ...

    async def save_with_version_check(self, record: Record) -> Record:
        """Update an existing record if nobody modified it since it was read."""
        ...


__all__ = ["RemoteStore"]
