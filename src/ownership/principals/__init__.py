"""
Principals and the auth boundary.

Key Components:
    Principal: The authenticated identity that owns records
    principal_scope: Async context manager for a scoped principal session
    PrincipalResolver: Protocol for "who is logged in right now?"
    AuthProvider: Protocol for the external credential exchange
    InMemoryAuthProvider: Reference AuthProvider for tests and scripted runs

Example:
    >>> from ownership.principals import InMemoryAuthProvider, AuthProviderResolver
    >>>
    >>> auth = InMemoryAuthProvider()
    >>> await auth.register("admin", "secret123", "admin@example.com")
    >>> resolver = AuthProviderResolver(auth)
    >>> resolver.current_principal().handle
    'admin'
"""

from ownership.exceptions import AuthenticationError, NotAuthenticatedError
from ownership.principals.auth import (
    AuthProvider,
    InMemoryAuthProvider,
    validate_email,
    validate_handle,
    validate_secret,
)
from ownership.principals.context import (
    clear_principal_context,
    get_current_principal,
    get_required_principal,
    principal_scope,
    principal_scope_sync,
    set_current_principal,
)
from ownership.principals.models import Principal
from ownership.principals.resolver import (
    AuthProviderResolver,
    ContextPrincipalResolver,
    PrincipalResolver,
    StaticPrincipalResolver,
)

__all__ = [
    # Model
    "Principal",
    # Context
    "get_current_principal",
    "get_required_principal",
    "set_current_principal",
    "clear_principal_context",
    "principal_scope",
    "principal_scope_sync",
    # Resolvers
    "PrincipalResolver",
    "ContextPrincipalResolver",
    "AuthProviderResolver",
    "StaticPrincipalResolver",
    # Auth boundary
    "AuthProvider",
    "InMemoryAuthProvider",
    "validate_handle",
    "validate_secret",
    "validate_email",
    # Exceptions
    "NotAuthenticatedError",
    "AuthenticationError",
]
