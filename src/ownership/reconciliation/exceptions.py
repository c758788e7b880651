"""
Reconciliation-specific exceptions.

Exception Hierarchy:
    OwnershipError
    +-- ReconciliationError
        +-- RecordSaveFailedError   (recovered per record by the applier)
        +-- ScanQueryFailedError    (aborts one kind's batch)
        +-- StatusCheckFailedError  (fails a status snapshot)

NotAuthenticatedError lives in ownership.exceptions because the principal
session raises it as well.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from ownership.exceptions import OwnershipError

if TYPE_CHECKING:
    from ownership.records.base import RecordKind


class ReconciliationError(OwnershipError):
    """Base exception for ownership reconciliation."""

    pass


class RecordSaveFailedError(ReconciliationError):
    """
    A single record could not be persisted with its new owner.

    The applier logs and counts this error and moves on to the next record;
    the record keeps its previous, orphan state.

    Attributes:
        kind: Kind of the record
        record_id: Identifier of the record
        reason: Description of the underlying failure
    """

    def __init__(self, kind: RecordKind, record_id: UUID | None, reason: str) -> None:
        self.kind = kind
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Failed to save {kind.value} {record_id}: {reason}")


class ScanQueryFailedError(ReconciliationError):
    """
    An orphan listing or counting query failed.

    Attributes:
        kind: Kind that was being scanned
        operation: Scanner operation (find_orphans, count_orphans, count_total)
        reason: Description of the underlying failure
    """

    def __init__(self, kind: RecordKind, operation: str, reason: str) -> None:
        self.kind = kind
        self.operation = operation
        self.reason = reason
        super().__init__(f"Scan {operation} failed for {kind.value}: {reason}")


class StatusCheckFailedError(ReconciliationError):
    """
    One of the status counts failed; no partial snapshot is produced.

    Attributes:
        kind: Kind whose count failed
        operation: Count that failed (count_orphans or count_total)
    """

    def __init__(self, kind: RecordKind, operation: str, reason: str) -> None:
        self.kind = kind
        self.operation = operation
        self.reason = reason
        super().__init__(f"Migration status check failed ({operation} {kind.value}): {reason}")


__all__ = [
    "ReconciliationError",
    "RecordSaveFailedError",
    "ScanQueryFailedError",
    "StatusCheckFailedError",
]
