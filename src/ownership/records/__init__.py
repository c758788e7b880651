"""
Record models, access control and queries.

Key Components:
    RecordKind: The record kinds known to the engine (Category, Question)
    Record: Frozen pydantic base class with ownership attributes
    Category, Question: Concrete record kinds
    AccessControlEntry: Per-record permission descriptor
    AclPolicy: Named ownership ACL policies (PUBLIC_READ, OWNER_ONLY)
    Query, Filter: Backend-agnostic query specification

Example:
    >>> from ownership.records import AclPolicy, Category, Filter, Query
    >>>
    >>> legacy = Category(name="Python")
    >>> legacy.is_orphan
    True
    >>> orphans = Query(filters=[Filter.missing("owner")])
"""

from ownership.records.acl import PUBLIC_GRANTEE, AccessControlEntry, AclPolicy, Permission
from ownership.records.base import OWNER_FIELD, Category, Question, Record, RecordKind
from ownership.records.query import Filter, Query

__all__ = [
    # Models
    "OWNER_FIELD",
    "RecordKind",
    "Record",
    "Category",
    "Question",
    # Access control
    "PUBLIC_GRANTEE",
    "Permission",
    "AccessControlEntry",
    "AclPolicy",
    # Query building
    "Query",
    "Filter",
]
