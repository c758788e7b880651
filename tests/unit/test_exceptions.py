"""
Unit tests for the exception hierarchy.
"""

from __future__ import annotations

from uuid import uuid4

from ownership.exceptions import (
    AuthenticationError,
    NotAuthenticatedError,
    OptimisticLockError,
    OwnershipError,
    RecordNotFoundError,
    StoreError,
)
from ownership.reconciliation import (
    ReconciliationError,
    RecordSaveFailedError,
    ScanQueryFailedError,
    StatusCheckFailedError,
)
from ownership.records import RecordKind


class TestHierarchy:
    """Every library error derives from OwnershipError."""

    def test_base_classes(self) -> None:
        for error in (
            StoreError("find", "down"),
            RecordNotFoundError(uuid4()),
            OptimisticLockError(uuid4(), 1, 2),
            NotAuthenticatedError(),
            AuthenticationError("INVALID_CREDENTIALS", "bad"),
            RecordSaveFailedError(RecordKind.QUESTION, uuid4(), "down"),
            ScanQueryFailedError(RecordKind.QUESTION, "find_orphans", "down"),
            StatusCheckFailedError(RecordKind.CATEGORY, "count_total", "down"),
        ):
            assert isinstance(error, OwnershipError)

    def test_reconciliation_errors(self) -> None:
        assert issubclass(RecordSaveFailedError, ReconciliationError)
        assert issubclass(ScanQueryFailedError, ReconciliationError)
        assert issubclass(StatusCheckFailedError, ReconciliationError)


class TestMessages:
    """Errors carry their identifiers and readable messages."""

    def test_record_not_found(self) -> None:
        record_id = uuid4()
        error = RecordNotFoundError(record_id, "Question")
        assert error.record_id == record_id
        assert str(error) == f"Record of kind Question not found: {record_id}"

    def test_optimistic_lock(self) -> None:
        error = OptimisticLockError(uuid4(), expected_version=1, actual_version=3)
        assert error.expected_version == 1
        assert error.actual_version == 3
        assert "expected version 1" in str(error)

    def test_not_authenticated_default(self) -> None:
        assert str(NotAuthenticatedError()) == (
            "No authenticated principal: log in before running a migration"
        )
        assert str(NotAuthenticatedError("custom")) == "custom"

    def test_record_save_failed(self) -> None:
        record_id = uuid4()
        error = RecordSaveFailedError(RecordKind.CATEGORY, record_id, "rejected")
        assert error.record_id == record_id
        assert str(error) == f"Failed to save Category {record_id}: rejected"

    def test_store_error(self) -> None:
        error = StoreError("save", "disk full")
        assert error.operation == "save"
        assert str(error) == "Store operation save failed: disk full"
