"""
Unit tests for principal resolvers and the Principal model.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ownership.principals import (
    AuthProviderResolver,
    ContextPrincipalResolver,
    InMemoryAuthProvider,
    Principal,
    PrincipalResolver,
    StaticPrincipalResolver,
    principal_scope,
)


class TestPrincipalModel:
    """Tests for Principal."""

    def test_to_dict(self, admin: Principal) -> None:
        assert admin.to_dict() == {
            "id": "user-admin",
            "username": "admin",
            "email": "admin@example.com",
            "nickname": "Administrator",
        }

    def test_label_falls_back_to_handle(self, other_principal: Principal) -> None:
        assert other_principal.label == "reviewer"

    def test_frozen(self, admin: Principal) -> None:
        with pytest.raises(ValidationError):
            admin.handle = "root"  # type: ignore[misc]


class TestResolvers:
    """Tests for the PrincipalResolver implementations."""

    def test_static(self, admin: Principal) -> None:
        assert StaticPrincipalResolver(admin).current_principal() is admin
        assert StaticPrincipalResolver(None).current_principal() is None

    @pytest.mark.asyncio
    async def test_context(self, admin: Principal) -> None:
        resolver = ContextPrincipalResolver()
        assert resolver.current_principal() is None
        async with principal_scope(admin):
            assert resolver.current_principal() == admin

    @pytest.mark.asyncio
    async def test_auth_provider(self) -> None:
        auth = InMemoryAuthProvider()
        resolver = AuthProviderResolver(auth)
        assert resolver.current_principal() is None

        principal = await auth.register("admin", "secret123", "admin@example.com")
        assert resolver.current_principal() == principal

        await auth.log_out()
        assert resolver.current_principal() is None

    def test_protocol(self, admin: Principal) -> None:
        for resolver in (
            StaticPrincipalResolver(admin),
            ContextPrincipalResolver(),
            AuthProviderResolver(InMemoryAuthProvider()),
        ):
            assert isinstance(resolver, PrincipalResolver)
