"""
Principal resolvers.

A resolver answers "who is logged in right now?" without side effects. The
reporting facade asks a resolver once per run and hands the result to the
orchestrator explicitly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ownership.principals.context import get_current_principal
from ownership.principals.models import Principal

if TYPE_CHECKING:
    from ownership.principals.auth import AuthProvider


@runtime_checkable
class PrincipalResolver(Protocol):
    """Protocol for resolving the currently authenticated principal."""

    def current_principal(self) -> Principal | None:
        """Return the current principal, or None when unauthenticated."""
        ...


class ContextPrincipalResolver:
    """Resolves the principal stored in the principal_scope() context."""

    def current_principal(self) -> Principal | None:
        return get_current_principal()


class AuthProviderResolver:
    """
    Resolves the principal from an AuthProvider session.

    Example:
        >>> auth = InMemoryAuthProvider()
        >>> resolver = AuthProviderResolver(auth)
        >>> resolver.current_principal() is None
        True
    """

    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider

    def current_principal(self) -> Principal | None:
        return self._provider.current_principal()


class StaticPrincipalResolver:
    """Always resolves to the same principal (or to nobody)."""

    def __init__(self, principal: Principal | None) -> None:
        self._principal = principal

    def current_principal(self) -> Principal | None:
        return self._principal


__all__ = [
    "PrincipalResolver",
    "ContextPrincipalResolver",
    "AuthProviderResolver",
    "StaticPrincipalResolver",
]
