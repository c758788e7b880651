"""
ownership - Ownership reconciliation for records created before per-user access control.

This library provides:
- Category and Question record models with owner and ACL attributes
- Remote store protocol with In-Memory and SQLite (aiosqlite) backends
- Principal session context, resolvers and a reference auth provider
- Orphan scanning, ownership assignment and migration orchestration
- Migration status snapshots for an admin UI
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ownership-reconciler")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from ownership.exceptions import (
    AuthenticationError,
    NotAuthenticatedError,
    OptimisticLockError,
    OwnershipError,
    RecordNotFoundError,
    StoreError,
)
from ownership.principals import (
    AuthProvider,
    AuthProviderResolver,
    ContextPrincipalResolver,
    InMemoryAuthProvider,
    Principal,
    PrincipalResolver,
    StaticPrincipalResolver,
    principal_scope,
)
from ownership.reconciliation import (
    DataMigrationService,
    MigrationOrchestrator,
    MigrationOutcome,
    MigrationStatusReporter,
    MigrationStatusSnapshot,
    MigrationWorkflow,
    ReconciliationApplier,
    ReconciliationConfig,
    ReconciliationScanner,
    assign_ownership,
)
from ownership.records import (
    AccessControlEntry,
    AclPolicy,
    Category,
    Filter,
    Query,
    Question,
    Record,
    RecordKind,
)
from ownership.stores import InMemoryRemoteStore, RemoteStore, SQLiteRemoteStore

__all__ = [
    "__version__",
    # Exceptions
    "OwnershipError",
    "StoreError",
    "RecordNotFoundError",
    "OptimisticLockError",
    "NotAuthenticatedError",
    "AuthenticationError",
    # Records
    "RecordKind",
    "Record",
    "Category",
    "Question",
    "AccessControlEntry",
    "AclPolicy",
    "Filter",
    "Query",
    # Principals
    "Principal",
    "PrincipalResolver",
    "ContextPrincipalResolver",
    "AuthProviderResolver",
    "StaticPrincipalResolver",
    "AuthProvider",
    "InMemoryAuthProvider",
    "principal_scope",
    # Stores
    "RemoteStore",
    "InMemoryRemoteStore",
    "SQLiteRemoteStore",
    # Reconciliation
    "ReconciliationConfig",
    "assign_ownership",
    "ReconciliationScanner",
    "ReconciliationApplier",
    "MigrationOrchestrator",
    "MigrationStatusReporter",
    "MigrationStatusSnapshot",
    "MigrationOutcome",
    "MigrationWorkflow",
    "DataMigrationService",
]
