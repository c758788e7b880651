"""
Principal model.

A principal is the authenticated actor that migrated records are assigned
to. Principals are created and destroyed by the auth boundary; this package
only ever reads them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Principal(BaseModel):
    """
    An authenticated identity capable of owning records.

    Attributes:
        id: Stable identifier assigned by the auth backend
        handle: Unique login name
        email: Contact email address
        display_name: Optional human-friendly name

    Example:
        >>> admin = Principal(id="u-1", handle="admin", email="admin@example.com")
        >>> admin.label
        'admin'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Stable principal identifier")
    handle: str = Field(..., min_length=1, description="Unique login name")
    email: str = Field(..., description="Contact email address")
    display_name: str | None = Field(default=None, description="Optional display name")

    @property
    def label(self) -> str:
        """Display name if set, otherwise the handle."""
        return self.display_name or self.handle

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the dictionary shape consumed by the admin UI.

        Returns:
            Dictionary with ``id``, ``username``, ``email`` and ``nickname`` keys
        """
        return {
            "id": self.id,
            "username": self.handle,
            "email": self.email,
            "nickname": self.display_name,
        }

    def __str__(self) -> str:
        return f"Principal(id={self.id}, handle={self.handle})"
