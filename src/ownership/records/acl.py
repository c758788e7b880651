"""
Access control entries and ownership ACL policies.

An AccessControlEntry maps grantees to permissions. The grantee ``"*"``
stands for the public; every other key is a principal id. Records carry
exactly one entry, and assigning a new one replaces the old entry wholesale.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from ownership.principals.models import Principal

PUBLIC_GRANTEE = "*"


class Permission(BaseModel):
    """Read/write permission pair for a single grantee."""

    model_config = ConfigDict(frozen=True)

    read: bool = False
    write: bool = False


class AccessControlEntry(BaseModel):
    """
    Per-record permission descriptor.

    Attributes:
        grants: Mapping of grantee (principal id or ``"*"``) to Permission

    Example:
        >>> acl = AccessControlEntry.for_owner("u-1", public_read=True)
        >>> acl.can_write("u-1"), acl.can_read(None), acl.can_write(None)
        (True, True, False)
        >>> acl.to_dict()
        {'u-1': {'read': True, 'write': True}, '*': {'read': True}}
    """

    model_config = ConfigDict(frozen=True)

    grants: dict[str, Permission] = Field(default_factory=dict)

    @classmethod
    def for_owner(cls, owner_id: str, *, public_read: bool = False) -> AccessControlEntry:
        """
        Build an entry giving the owner read+write access.

        Args:
            owner_id: Principal id of the owner
            public_read: Whether everybody else may read

        Returns:
            New AccessControlEntry
        """
        grants = {owner_id: Permission(read=True, write=True)}
        if public_read:
            grants[PUBLIC_GRANTEE] = Permission(read=True)
        return cls(grants=grants)

    def _permission(self, principal_id: str | None) -> tuple[Permission, Permission]:
        public = self.grants.get(PUBLIC_GRANTEE, Permission())
        own = self.grants.get(principal_id, Permission()) if principal_id else Permission()
        return public, own

    def can_read(self, principal_id: str | None) -> bool:
        """Whether principal_id (None for anonymous) may read."""
        public, own = self._permission(principal_id)
        return public.read or own.read

    def can_write(self, principal_id: str | None) -> bool:
        """Whether principal_id (None for anonymous) may write."""
        public, own = self._permission(principal_id)
        return public.write or own.write

    @property
    def public_read(self) -> bool:
        return self.grants.get(PUBLIC_GRANTEE, Permission()).read

    @property
    def public_write(self) -> bool:
        return self.grants.get(PUBLIC_GRANTEE, Permission()).write

    def to_dict(self) -> dict[str, dict[str, bool]]:
        """
        Serialize in the backend's ACL shape, omitting false flags.

        Grantees without any permission are dropped entirely.
        """
        result: dict[str, dict[str, bool]] = {}
        for grantee, permission in self.grants.items():
            flags = {name: True for name in ("read", "write") if getattr(permission, name)}
            if flags:
                result[grantee] = flags
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> AccessControlEntry:
        """Inverse of to_dict()."""
        if not data:
            return cls()
        return cls(
            grants={
                grantee: Permission(
                    read=bool(flags.get("read", False)),
                    write=bool(flags.get("write", False)),
                )
                for grantee, flags in data.items()
            }
        )


class AclPolicy(Enum):
    """
    Named ACL policies applied when a record is assigned an owner.

    Attributes:
        PUBLIC_READ: Owner read+write, public read-only. Used by the full
            migration for both Category and Question records.
        OWNER_ONLY: Owner read+write, no public access. Used by the
            Question-only migration.
    """

    PUBLIC_READ = "public_read"
    OWNER_ONLY = "owner_only"

    @property
    def grants_public_read(self) -> bool:
        return self is AclPolicy.PUBLIC_READ

    def build(self, principal: Principal) -> AccessControlEntry:
        """
        Build the entry this policy prescribes for a record owned by principal.

        Args:
            principal: The new owner

        Returns:
            A fresh AccessControlEntry
        """
        return AccessControlEntry.for_owner(principal.id, public_read=self.grants_public_read)


__all__ = [
    "PUBLIC_GRANTEE",
    "Permission",
    "AccessControlEntry",
    "AclPolicy",
]
