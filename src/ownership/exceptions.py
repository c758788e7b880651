"""Library exceptions for the ownership package."""

from uuid import UUID


class OwnershipError(Exception):
    """Base exception for ownership library."""

    pass


class StoreError(OwnershipError):
    """Raised when the remote store fails to execute an operation."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        super().__init__(f"Store operation {operation} failed: {message}")


class RecordNotFoundError(OwnershipError):
    """Raised when a record expected to exist is missing from the store."""

    def __init__(self, record_id: UUID | None, kind: str | None = None) -> None:
        self.record_id = record_id
        self.kind = kind
        kind_info = f" of kind {kind}" if kind else ""
        super().__init__(f"Record{kind_info} not found: {record_id}")


class OptimisticLockError(OwnershipError):
    """Raised when a record was modified by someone else between read and save."""

    def __init__(self, record_id: UUID, expected_version: int, actual_version: int) -> None:
        self.record_id = record_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Optimistic lock error for record {record_id}: "
            f"expected version {expected_version}, but current version is {actual_version}"
        )


class NotAuthenticatedError(OwnershipError):
    """
    Raised when an operation requires an authenticated principal and none is set.

    Migration runs never proceed without a resolvable owner; log in through
    the auth boundary (or enter a principal_scope()) first.
    """

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "No authenticated principal: log in before running a migration"
        )


class AuthenticationError(OwnershipError):
    """
    Raised by an auth provider when credentials or registration data are rejected.

    Attributes:
        code: Machine-readable reason (e.g. ``USERNAME_TAKEN``)
    """

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        super().__init__(message)


__all__ = [
    "OwnershipError",
    "StoreError",
    "RecordNotFoundError",
    "OptimisticLockError",
    "NotAuthenticatedError",
    "AuthenticationError",
]
