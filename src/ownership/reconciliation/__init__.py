"""
Ownership reconciliation.

Finds records that have no owner and assigns them to an authenticated
principal with a named ACL policy.

Key Components:
    ReconciliationScanner: Lists and counts orphan records, page by page
    ReconciliationApplier: Assigns ownership and saves records one by one
    MigrationOrchestrator: Runs the full and question-only workflows
    MigrationStatusReporter: Counts orphan and total records per kind
    DataMigrationService: Facade used by the admin UI layer

Example:
    >>> from ownership.reconciliation import DataMigrationService
    >>> from ownership.principals import StaticPrincipalResolver
    >>>
    >>> service = DataMigrationService(store, StaticPrincipalResolver(admin))
    >>> report = await service.reconcile()
    >>> report.after.needed
    False
"""

from ownership.reconciliation.applier import ReconciliationApplier
from ownership.reconciliation.config import DEFAULT_PAGE_SIZE, ReconciliationConfig
from ownership.reconciliation.exceptions import (
    ReconciliationError,
    RecordSaveFailedError,
    ScanQueryFailedError,
    StatusCheckFailedError,
)
from ownership.reconciliation.metrics import (
    ReconciliationMetrics,
    ReconciliationMetricSnapshot,
)
from ownership.reconciliation.models import (
    ApplyResult,
    KindCounts,
    KindTally,
    MigrationOutcome,
    MigrationStatusSnapshot,
    MigrationWorkflow,
    ReconciliationPhase,
    ReconciliationProgress,
    ReconciliationReport,
)
from ownership.reconciliation.orchestrator import MigrationOrchestrator, ProgressCallback
from ownership.reconciliation.scanner import ReconciliationScanner, orphan_query
from ownership.reconciliation.service import DataMigrationService
from ownership.reconciliation.status import MigrationStatusReporter
from ownership.reconciliation.transform import assign_ownership

__all__ = [
    # Config
    "DEFAULT_PAGE_SIZE",
    "ReconciliationConfig",
    # Models
    "ApplyResult",
    "KindCounts",
    "KindTally",
    "MigrationOutcome",
    "MigrationStatusSnapshot",
    "MigrationWorkflow",
    "ReconciliationPhase",
    "ReconciliationProgress",
    "ReconciliationReport",
    # Exceptions
    "ReconciliationError",
    "RecordSaveFailedError",
    "ScanQueryFailedError",
    "StatusCheckFailedError",
    # Components
    "assign_ownership",
    "orphan_query",
    "ReconciliationScanner",
    "ReconciliationApplier",
    "ReconciliationMetrics",
    "ReconciliationMetricSnapshot",
    "MigrationOrchestrator",
    "ProgressCallback",
    "MigrationStatusReporter",
    "DataMigrationService",
]
