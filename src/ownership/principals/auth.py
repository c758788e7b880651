"""
Auth boundary.

The credential exchange itself belongs to the hosted backend. This module
defines the protocol the rest of the package consumes, plus an in-memory
provider that applies the same validation rules as the backend and is used
for tests, local development and scripted runs.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
import re
import secrets
from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from uuid import uuid4

from ownership.exceptions import AuthenticationError
from ownership.principals.models import Principal

logger = logging.getLogger(__name__)

HANDLE_MIN_LENGTH = 3
HANDLE_MAX_LENGTH = 20
SECRET_MIN_LENGTH = 6

# Letters, digits, underscore and CJK unified ideographs
_HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9_\u4e00-\u9fa5]+$")
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@runtime_checkable
class AuthProvider(Protocol):
    """
    Protocol for the external auth boundary.

    ``current_principal()`` is a pure read; the other operations talk to the
    backend and change the session.
    """

    def current_principal(self) -> Principal | None:
        """Return the logged-in principal, or None when unauthenticated."""
        ...

    async def log_in(self, handle: str, secret: str) -> Principal:
        """Exchange credentials for a session."""
        ...

    async def log_out(self) -> None:
        """End the current session."""
        ...

    async def register(self, handle: str, secret: str, email: str) -> Principal:
        """Create a principal and log it in."""
        ...


def validate_handle(handle: str) -> str:
    """
    Validate a login handle.

    Args:
        handle: Requested handle

    Returns:
        The stripped handle

    Raises:
        AuthenticationError: With codes EMPTY_USERNAME, USERNAME_TOO_SHORT,
            USERNAME_TOO_LONG or INVALID_USERNAME
    """
    if not handle or not handle.strip():
        raise AuthenticationError("EMPTY_USERNAME", "A username is required")
    handle = handle.strip()
    if len(handle) < HANDLE_MIN_LENGTH:
        raise AuthenticationError(
            "USERNAME_TOO_SHORT",
            f"Username must be at least {HANDLE_MIN_LENGTH} characters",
        )
    if len(handle) > HANDLE_MAX_LENGTH:
        raise AuthenticationError(
            "USERNAME_TOO_LONG",
            f"Username must be at most {HANDLE_MAX_LENGTH} characters",
        )
    if not _HANDLE_PATTERN.match(handle):
        raise AuthenticationError(
            "INVALID_USERNAME",
            "Username may only contain letters, digits, underscores or CJK characters",
        )
    return handle


def validate_secret(secret: str) -> None:
    """Raise AuthenticationError(PASSWORD_TOO_SHORT) for short secrets."""
    if not secret or len(secret) < SECRET_MIN_LENGTH:
        raise AuthenticationError(
            "PASSWORD_TOO_SHORT",
            f"Password must be at least {SECRET_MIN_LENGTH} characters",
        )


def validate_email(email: str) -> str:
    """Raise AuthenticationError(INVALID_EMAIL) unless email looks like an address."""
    email = (email or "").strip()
    if not _EMAIL_PATTERN.match(email):
        raise AuthenticationError("INVALID_EMAIL", "Email address is not valid")
    return email


@dataclass(frozen=True)
class _Account:
    principal: Principal
    salt: bytes
    secret_hash: bytes


def _hash_secret(secret: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", secret.encode("utf-8"), salt, 100_000)


class InMemoryAuthProvider:
    """
    In-memory implementation of AuthProvider.

    Accounts live in a dictionary keyed by handle; secrets are stored as
    salted PBKDF2 hashes. One session is tracked per provider instance.

    Example:
        >>> auth = InMemoryAuthProvider()
        >>> admin = await auth.register("admin", "secret123", "admin@example.com")
        >>> auth.current_principal() == admin
        True
        >>> await auth.log_out()
        >>> auth.current_principal() is None
        True
    """

    def __init__(self) -> None:
        self._accounts: dict[str, _Account] = {}
        self._current: Principal | None = None
        self._lock = asyncio.Lock()

    def current_principal(self) -> Principal | None:
        return self._current

    async def register(
        self,
        handle: str,
        secret: str,
        email: str,
        display_name: str | None = None,
    ) -> Principal:
        """
        Register a new principal and log it in.

        Raises:
            AuthenticationError: If validation fails, or with USERNAME_TAKEN /
                EMAIL_TAKEN for duplicates
        """
        handle = validate_handle(handle)
        validate_secret(secret)
        email = validate_email(email)

        async with self._lock:
            if handle in self._accounts:
                raise AuthenticationError("USERNAME_TAKEN", f"Username {handle!r} is taken")
            if any(a.principal.email == email for a in self._accounts.values()):
                raise AuthenticationError("EMAIL_TAKEN", f"Email {email!r} is already registered")

            principal = Principal(
                id=uuid4().hex,
                handle=handle,
                email=email,
                display_name=display_name,
            )
            salt = secrets.token_bytes(16)
            self._accounts[handle] = _Account(principal, salt, _hash_secret(secret, salt))
            self._current = principal

        logger.info("Registered principal %s (%s)", principal.id, handle)
        return principal

    async def log_in(self, handle: str, secret: str) -> Principal:
        """
        Log in with a handle and secret.

        Raises:
            AuthenticationError: INVALID_CREDENTIALS when the handle is unknown
                or the secret does not match
        """
        async with self._lock:
            account = self._accounts.get((handle or "").strip())
            if account is None or not hmac.compare_digest(
                account.secret_hash, _hash_secret(secret or "", account.salt)
            ):
                logger.info("Rejected log in for handle %r", handle)
                raise AuthenticationError("INVALID_CREDENTIALS", "Invalid username or password")
            self._current = account.principal

        logger.info("Principal %s logged in", account.principal.id)
        return account.principal

    async def log_out(self) -> None:
        async with self._lock:
            if self._current is not None:
                logger.info("Principal %s logged out", self._current.id)
            self._current = None

    def __len__(self) -> int:
        """Number of registered accounts."""
        return len(self._accounts)


__all__ = [
    "AuthProvider",
    "InMemoryAuthProvider",
    "validate_handle",
    "validate_secret",
    "validate_email",
    "HANDLE_MIN_LENGTH",
    "HANDLE_MAX_LENGTH",
    "SECRET_MIN_LENGTH",
]
