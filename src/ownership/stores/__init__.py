"""
Remote store implementations.

Key Components:
    RemoteStore: Protocol consumed by the reconciliation engine
    InMemoryRemoteStore: In-memory implementation for tests and development
    SQLiteRemoteStore: aiosqlite-backed implementation

Example:
    >>> from ownership.stores import InMemoryRemoteStore
    >>> from ownership.records import Category, Filter, Query, RecordKind
    >>>
    >>> store = InMemoryRemoteStore()
    >>> await store.save(Category(name="Algorithms"))
    >>> await store.count(RecordKind.CATEGORY, Query(filters=[Filter.missing("owner")]))
    1
"""

from ownership.stores.in_memory import InMemoryRemoteStore
from ownership.stores.interface import RemoteStore
from ownership.stores.sqlite import SQLiteRemoteStore

__all__ = [
    "RemoteStore",
    "InMemoryRemoteStore",
    "SQLiteRemoteStore",
]
