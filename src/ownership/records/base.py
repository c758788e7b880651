"""
Record models for the knowledge base.

Records are the persisted entities the reconciliation engine retrofits with
ownership. Each record has exactly one kind. The engine reads and writes only
the ownership attributes (``owner`` and ``acl``); kind-specific payload fields
are carried through untouched.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ownership.records.acl import AccessControlEntry

OWNER_FIELD = "owner"
"""Name of the ownership attribute; a record is orphan iff it is absent."""

BASE_FIELDS = ("id", "created_at", "updated_at", "version", OWNER_FIELD, "acl")


class RecordKind(Enum):
    """The record kinds known to the reconciliation engine."""

    CATEGORY = "Category"
    QUESTION = "Question"

    @property
    def model_class(self) -> type[Record]:
        """Record subclass that represents this kind."""
        return _KIND_MODELS[self]

    @property
    def table_name(self) -> str:
        """Storage table / collection name for this kind."""
        return {RecordKind.CATEGORY: "categories", RecordKind.QUESTION: "questions"}[self]

    def __str__(self) -> str:
        return self.value


class Record(BaseModel):
    """
    Base class for persisted records.

    Records are frozen: updates produce copies through ``model_copy`` so the
    ownership transform stays a pure function and the store keeps its own
    copy of everything it persists.

    Attributes:
        id: Identifier assigned by the store on first save (None before that)
        created_at: When the record was first created
        updated_at: When the record was last saved
        version: Optimistic locking version (incremented by the store on save)
        owner: Principal id of the owner, None for legacy records
        acl: Access control entry, None if never assigned
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    kind: ClassVar[RecordKind]

    id: UUID | None = Field(default=None, description="Store-assigned identifier")
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: int = Field(default=1, ge=1)
    owner: str | None = Field(default=None, description="Owner principal id")
    acl: AccessControlEntry | None = Field(default=None)

    @property
    def is_orphan(self) -> bool:
        """True if the record has no owner, regardless of its ACL."""
        return self.owner is None

    @classmethod
    def payload_field_names(cls) -> list[str]:
        """
        Names of the kind-specific payload fields.

        Example:
            >>> Category.payload_field_names()
            ['name', 'description']
        """
        return [name for name in cls.model_fields if name not in BASE_FIELDS]

    def payload(self) -> dict[str, Any]:
        """Kind-specific payload as a JSON-compatible dictionary."""
        return self.model_dump(mode="json", include=set(self.payload_field_names()))

    def __str__(self) -> str:
        return f"{self.kind.value}(id={self.id}, version={self.version}, owner={self.owner})"


class Category(Record):
    """A question category."""

    kind: ClassVar[RecordKind] = RecordKind.CATEGORY

    name: str = ""
    description: str = ""


class Question(Record):
    """A knowledge-base question with its answers."""

    kind: ClassVar[RecordKind] = RecordKind.QUESTION

    title: str = ""
    detailed_answer: str = ""
    oral_answer: str = ""
    code: str = ""
    url: str = ""
    tags: list[str] = Field(default_factory=list)
    difficulty: str | None = None
    proficiency: str | None = None
    appearance_level: int = 50
    category_id: UUID | None = None


_KIND_MODELS: dict[RecordKind, type[Record]] = {
    RecordKind.CATEGORY: Category,
    RecordKind.QUESTION: Question,
}


__all__ = [
    "OWNER_FIELD",
    "RecordKind",
    "Record",
    "Category",
    "Question",
]
