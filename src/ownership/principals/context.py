"""
Principal session context.

The principal logged in for the current flow is kept in a ContextVar so that
concurrent async tasks never observe each other's session:

- get_current_principal(): current principal or None
- get_required_principal(): current principal, raises if not set
- set_current_principal() / clear_principal_context()
- principal_scope() / principal_scope_sync(): scoped context managers

The reconciliation engine itself never reads this module; callers resolve a
principal (for example through ContextPrincipalResolver) and pass it in
explicitly.

Example:
    >>> from ownership.principals import Principal, principal_scope, get_current_principal
    >>>
    >>> admin = Principal(id="u-1", handle="admin", email="admin@example.com")
    >>> async with principal_scope(admin):
    ...     assert get_current_principal() == admin
    >>> assert get_current_principal() is None
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

from ownership.exceptions import NotAuthenticatedError
from ownership.principals.models import Principal

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator

logger = logging.getLogger(__name__)

principal_context: ContextVar[Principal | None] = ContextVar("principal_context", default=None)


def get_current_principal() -> Principal | None:
    """
    Get the current principal from context.

    Safe to call at any time; never raises.

    Returns:
        The current Principal, or None if nobody is logged in
    """
    return principal_context.get()


def get_required_principal() -> Principal:
    """
    Get the current principal, raising if not set.

    Returns:
        The current Principal

    Raises:
        NotAuthenticatedError: If no principal is set
    """
    principal = principal_context.get()
    if principal is None:
        raise NotAuthenticatedError()
    return principal


def set_current_principal(principal: Principal) -> Token[Principal | None]:
    """
    Set the current principal in context.

    Args:
        principal: The principal to set

    Returns:
        Token that can be used to restore the previous context
    """
    logger.debug("Principal context set: %s", principal.id)
    return principal_context.set(principal)


def clear_principal_context() -> None:
    """Clear the principal context (log the current flow out)."""
    logger.debug("Principal context cleared")
    principal_context.set(None)


@asynccontextmanager
async def principal_scope(principal: Principal) -> AsyncGenerator[Principal, None]:
    """
    Async context manager for a scoped principal session.

    Sets the principal on entry and restores the previous context on exit,
    also when the body raises. Scopes nest.

    Args:
        principal: The principal for this scope

    Yields:
        The principal
    """
    token = principal_context.set(principal)
    logger.debug("Principal scope entered: %s", principal.id)
    try:
        yield principal
    finally:
        principal_context.reset(token)
        logger.debug("Principal scope exited: %s", principal.id)


@contextmanager
def principal_scope_sync(principal: Principal) -> Generator[Principal, None, None]:
    """Sync variant of principal_scope()."""
    token = principal_context.set(principal)
    logger.debug("Principal scope (sync) entered: %s", principal.id)
    try:
        yield principal
    finally:
        principal_context.reset(token)
        logger.debug("Principal scope (sync) exited: %s", principal.id)


__all__ = [
    "principal_context",
    "get_current_principal",
    "get_required_principal",
    "set_current_principal",
    "clear_principal_context",
    "principal_scope",
    "principal_scope_sync",
]
