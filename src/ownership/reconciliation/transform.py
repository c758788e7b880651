"""
Pure ownership transform.

The only place that decides what a migrated record looks like. It never
touches the store, so it can be tested without one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from ownership.records.base import OWNER_FIELD, Record

if TYPE_CHECKING:
    from ownership.principals.models import Principal
    from ownership.records.acl import AclPolicy

TRecord = TypeVar("TRecord", bound=Record)


def assign_ownership(record: TRecord, principal: Principal, policy: AclPolicy) -> TRecord:
    """
    Return a copy of record owned by principal with the policy's ACL.

    The previous ACL is discarded, not merged. Identity, version and payload
    are carried over unchanged; the input record is not modified.

    Args:
        record: Record to migrate
        principal: New owner
        policy: ACL policy to apply

    Returns:
        New record instance with ``owner`` and ``acl`` replaced

    Example:
        >>> legacy = Category(id=uuid4(), name="Python")
        >>> owned = assign_ownership(legacy, admin, AclPolicy.PUBLIC_READ)
        >>> owned.owner == admin.id, legacy.owner
        (True, None)
    """
    return record.model_copy(
        update={
            OWNER_FIELD: principal.id,
            "acl": policy.build(principal),
        }
    )


__all__ = ["assign_ownership"]
