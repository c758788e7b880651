"""
Data models for ownership reconciliation.

Enums:
    - ReconciliationPhase: Orchestrator state machine
    - MigrationWorkflow: The supported reconciliation workflows

Results:
    - ApplyResult: Result of one applier pass over a batch
    - KindTally: Aggregated result for one record kind in a run
    - ReconciliationProgress: Progress reported after each applied page
    - MigrationOutcome: Result of one reconciliation run

Status:
    - KindCounts: Orphan/total counts for one kind
    - MigrationStatusSnapshot: Point-in-time counts for every kind
    - ReconciliationReport: Status before, outcome, and status after a run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from ownership.records.acl import AclPolicy
from ownership.records.base import RecordKind

if TYPE_CHECKING:
    from ownership.principals.models import Principal


class ReconciliationPhase(Enum):
    """
    Orchestrator lifecycle phases.

    State machine per run:
        IDLE -> RESOLVING_PRINCIPAL -> (SCANNING <-> APPLYING)* -> AGGREGATING -> COMPLETED
                        |
                        +-> FAILED (no authenticated principal)

    Per-record save failures never move a run to FAILED; they are counted
    in the kind's tally.
    """

    IDLE = "idle"
    RESOLVING_PRINCIPAL = "resolving_principal"
    SCANNING = "scanning"
    APPLYING = "applying"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True for COMPLETED and FAILED."""
        return self in (ReconciliationPhase.COMPLETED, ReconciliationPhase.FAILED)


class MigrationWorkflow(Enum):
    """
    Supported reconciliation workflows.

    Attributes:
        FULL: Category then Question, both with AclPolicy.PUBLIC_READ
        QUESTION_ONLY: Question only, with AclPolicy.OWNER_ONLY
    """

    FULL = "full"
    QUESTION_ONLY = "question_only"

    @property
    def plan(self) -> tuple[tuple[RecordKind, AclPolicy], ...]:
        """Ordered (kind, policy) steps this workflow runs."""
        if self is MigrationWorkflow.FULL:
            return (
                (RecordKind.CATEGORY, AclPolicy.PUBLIC_READ),
                (RecordKind.QUESTION, AclPolicy.PUBLIC_READ),
            )
        return ((RecordKind.QUESTION, AclPolicy.OWNER_ONLY),)


@dataclass
class ApplyResult:
    """
    Result of applying ownership to one batch of records.

    Attributes:
        migrated: Records saved successfully
        total: Records in the input batch
        failed_ids: Identifiers of records whose save failed
    """

    migrated: int = 0
    total: int = 0
    failed_ids: list[UUID | None] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.total - self.migrated

    def to_dict(self) -> dict[str, int]:
        return {"migrated": self.migrated, "total": self.total}


@dataclass
class KindTally:
    """
    Aggregated reconciliation result for one record kind.

    Attributes:
        kind: The record kind
        policy: ACL policy that was applied
        migrated: Records that now have an owner
        total: Orphan records visited
        failed_ids: Identifiers of records whose save failed
        error: Scan failure message if the kind's batch was aborted
    """

    kind: RecordKind
    policy: AclPolicy
    migrated: int = 0
    total: int = 0
    failed_ids: list[UUID | None] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> int:
        return self.total - self.migrated

    @property
    def completed(self) -> bool:
        """True if every orphan page of the kind was visited."""
        return self.error is None

    def add(self, result: ApplyResult) -> None:
        """Fold a batch result into this tally."""
        self.migrated += result.migrated
        self.total += result.total
        self.failed_ids.extend(result.failed_ids)

    def to_dict(self) -> dict[str, int]:
        """The ``{migrated, total}`` shape shown to operators."""
        return {"migrated": self.migrated, "total": self.total}


@dataclass(frozen=True)
class ReconciliationProgress:
    """
    Progress information reported after each applied page.

    Attributes:
        workflow: Workflow being run
        kind: Kind being migrated
        phase: Orchestrator phase at report time
        migrated: Records of this kind migrated so far
        visited: Orphan records of this kind visited so far
        failed: Records of this kind that failed so far
    """

    workflow: MigrationWorkflow
    kind: RecordKind
    phase: ReconciliationPhase
    migrated: int
    visited: int
    failed: int


@dataclass(frozen=True)
class KindCounts:
    """Orphan and total record counts for one kind."""

    orphan: int
    total: int


@dataclass(frozen=True)
class MigrationStatusSnapshot:
    """
    Point-in-time view of how many records still lack an owner.

    Never persisted; recomputed on demand.

    Attributes:
        counts: Orphan/total counts per kind
        checked_at: When the counts were taken
    """

    counts: dict[RecordKind, KindCounts]
    checked_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def orphan_count(self, kind: RecordKind) -> int:
        return self.counts[kind].orphan

    def total_count(self, kind: RecordKind) -> int:
        return self.counts[kind].total

    @property
    def needed(self) -> bool:
        """True if any kind still has orphan records."""
        return any(c.orphan > 0 for c in self.counts.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary shape consumed by the admin UI."""
        return {
            "orphanCategories": self.orphan_count(RecordKind.CATEGORY),
            "orphanQuestions": self.orphan_count(RecordKind.QUESTION),
            "totalCategories": self.total_count(RecordKind.CATEGORY),
            "totalQuestions": self.total_count(RecordKind.QUESTION),
            "migrationNeeded": self.needed,
        }


@dataclass
class MigrationOutcome:
    """
    Result of one reconciliation run.

    Attributes:
        workflow: Workflow that was run
        success: False only when the run could not start (no principal)
        admin: Principal that now owns the migrated records
        tallies: Per-kind results, in workflow order
        message: Human-readable summary on success
        error: Error message on failure
        duration_seconds: Wall-clock duration of the run
    """

    workflow: MigrationWorkflow
    success: bool
    admin: Principal | None = None
    tallies: dict[RecordKind, KindTally] = field(default_factory=dict)
    message: str | None = None
    error: str | None = None
    duration_seconds: float = 0.0

    @classmethod
    def failure(cls, workflow: MigrationWorkflow, error: str) -> MigrationOutcome:
        """Build a failed outcome with no tallies."""
        return cls(workflow=workflow, success=False, error=error)

    @property
    def categories(self) -> KindTally | None:
        return self.tallies.get(RecordKind.CATEGORY)

    @property
    def questions(self) -> KindTally | None:
        return self.tallies.get(RecordKind.QUESTION)

    @property
    def migrated(self) -> int:
        return sum(t.migrated for t in self.tallies.values())

    @property
    def failed_kinds(self) -> list[RecordKind]:
        """Kinds whose scan was aborted."""
        return [kind for kind, tally in self.tallies.items() if not tally.completed]

    @property
    def complete(self) -> bool:
        """True if the run succeeded, every kind was fully scanned and every save succeeded."""
        return self.success and all(
            t.completed and t.failed == 0 for t in self.tallies.values()
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary shape consumed by the admin UI."""
        if not self.success:
            return {"success": False, "error": self.error}

        result: dict[str, Any] = {"success": True}
        if self.admin is not None:
            result["adminUser"] = self.admin.to_dict()
        for kind, tally in self.tallies.items():
            key = "categories" if kind is RecordKind.CATEGORY else "questions"
            result[key] = tally.to_dict()
        result["message"] = self.message
        return result


@dataclass(frozen=True)
class ReconciliationReport:
    """
    Status before a run, the run's outcome, and status after it.

    ``outcome`` is None when no migration was needed.
    """

    before: MigrationStatusSnapshot
    outcome: MigrationOutcome | None
    after: MigrationStatusSnapshot

    @property
    def ran(self) -> bool:
        return self.outcome is not None


__all__ = [
    "ReconciliationPhase",
    "MigrationWorkflow",
    "ApplyResult",
    "KindTally",
    "ReconciliationProgress",
    "KindCounts",
    "MigrationStatusSnapshot",
    "MigrationOutcome",
    "ReconciliationReport",
]
