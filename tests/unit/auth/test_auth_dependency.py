"""Unit tests for authentication dependencies."""

from typing import Any, Optional
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from fastapi import Depends, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from api.dependencies.auth import (
    CurrentSession,
    OptionalSession,
    require_page,
    resolve_session,
)
from api.dependencies.services import get_authorization_gate
from api.exception_handlers import setup_exception_handlers
from api.middleware.gatekeeper import GatekeeperMiddleware
from core.exceptions import AuthenticationError, ErrorCode
from domain.entities.identity import Identity
from domain.entities.profile import Role
from domain.services.authorization import Allow, RedirectTo
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenPair


@pytest.fixture
def provider() -> JWTAuthProvider:
    return JWTAuthProvider(secret_key="test-secret", algorithm="HS256", expire_minutes=30, jwks_url="")


@pytest.fixture
def identity() -> Identity:
    return Identity(id=uuid4(), email="test@example.com", full_name="Test User")


@pytest.fixture
def issuer() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def gate() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def app(provider: JWTAuthProvider, issuer: AsyncMock, gate: AsyncMock) -> FastAPI:
    app = FastAPI()
    app.state.auth_provider = provider
    app.state.supabase_auth = issuer
    # Disabled gatekeeper still copies rotated tokens onto responses
    app.add_middleware(GatekeeperMiddleware, enabled=False)
    setup_exception_handlers(app)
    app.dependency_overrides[get_authorization_gate] = lambda: gate

    @app.get("/optional")
    async def optional(session: OptionalSession) -> dict[str, Any]:
        return {"user_id": str(session.identity.id) if session else None}

    @app.get("/required")
    async def required(session: CurrentSession) -> dict[str, Any]:
        return {"user_id": str(session.identity.id)}

    @app.get("/twice")
    async def twice(request: Request) -> dict[str, Any]:
        first = await resolve_session(request)
        second = await resolve_session(request)
        return {"same": first is second}

    @app.get("/page/admin")
    async def admin_page(session=Depends(require_page(Role.ADMIN))) -> dict[str, Any]:
        return {"ok": True}

    return app


@pytest.fixture
async def client(app: FastAPI):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


# --- credential sources ---


class TestCredentialSources:
    @pytest.mark.asyncio
    async def test_bearer_header(
        self, client: AsyncClient, provider: JWTAuthProvider, identity: Identity
    ):
        token = provider.create_token(identity)

        response = await client.get("/optional", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {"user_id": str(identity.id)}

    @pytest.mark.asyncio
    async def test_session_cookie(
        self, client: AsyncClient, provider: JWTAuthProvider, identity: Identity
    ):
        client.cookies.set("sb-access-token", provider.create_token(identity))

        response = await client.get("/optional")

        assert response.json() == {"user_id": str(identity.id)}

    @pytest.mark.asyncio
    async def test_no_credentials_is_none(self, client: AsyncClient):
        response = await client.get("/optional")

        assert response.status_code == 200
        assert response.json() == {"user_id": None}

    @pytest.mark.asyncio
    async def test_invalid_token_is_none(self, client: AsyncClient):
        response = await client.get(
            "/optional", headers={"Authorization": "Bearer invalid.jwt.token"}
        )

        assert response.json() == {"user_id": None}


# --- refresh ---


class TestRefresh:
    @pytest.mark.asyncio
    async def test_expired_access_token_is_refreshed(
        self,
        client: AsyncClient,
        provider: JWTAuthProvider,
        issuer: AsyncMock,
        identity: Identity,
    ):
        fresh = provider.create_token(identity)
        issuer.refresh.return_value = TokenPair(access_token=fresh, refresh_token="rotated")
        client.cookies.set("sb-access-token", "expired.jwt.token")
        client.cookies.set("sb-refresh-token", "old-refresh")

        response = await client.get("/optional")

        assert response.json() == {"user_id": str(identity.id)}
        issuer.refresh.assert_awaited_once_with("old-refresh")
        set_cookies = response.headers.get_list("set-cookie")
        assert any(c.startswith(f"sb-access-token={fresh}") for c in set_cookies)
        assert any(c.startswith("sb-refresh-token=rotated") for c in set_cookies)

    @pytest.mark.asyncio
    async def test_rejected_refresh_is_none(self, client: AsyncClient, issuer: AsyncMock):
        issuer.refresh.return_value = None
        client.cookies.set("sb-refresh-token", "revoked")

        response = await client.get("/optional")

        assert response.json() == {"user_id": None}
        assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_valid_cookie_skips_refresh(
        self,
        client: AsyncClient,
        provider: JWTAuthProvider,
        issuer: AsyncMock,
        identity: Identity,
    ):
        client.cookies.set("sb-access-token", provider.create_token(identity))
        client.cookies.set("sb-refresh-token", "unused")

        await client.get("/optional")

        issuer.refresh.assert_not_called()


# --- caching and required session ---


class TestResolveSession:
    @pytest.mark.asyncio
    async def test_resolved_once_per_request(
        self,
        client: AsyncClient,
        provider: JWTAuthProvider,
        identity: Identity,
        monkeypatch: pytest.MonkeyPatch,
    ):
        token = provider.create_token(identity)
        calls: list[str] = []
        original = provider.validate_token

        async def counting(value: str) -> Optional[Identity]:
            calls.append(value)
            return await original(value)

        monkeypatch.setattr(provider, "validate_token", counting)

        response = await client.get("/twice", headers={"Authorization": f"Bearer {token}"})

        assert response.json() == {"same": True}
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_required_session_is_401_without_credentials(self, client: AsyncClient):
        response = await client.get("/required")

        assert response.status_code == 401
        body = response.json()
        assert body["error_code"] == ErrorCode.UNAUTHORIZED
        assert body["error"] == "Not authenticated"

    def test_authentication_error_defaults(self):
        exc = AuthenticationError()

        assert exc.status_code == 401
        assert exc.message == "Not authenticated"


# --- page guards ---


class TestRequirePage:
    @pytest.mark.asyncio
    async def test_anonymous_is_sent_to_sign_in(self, client: AsyncClient, gate: AsyncMock):
        response = await client.get("/page/admin")

        assert response.status_code == 303
        assert response.headers["location"] == "/auth?redirectTo=/page/admin"
        gate.authorize.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_role_is_sent_to_dashboard(
        self,
        client: AsyncClient,
        gate: AsyncMock,
        provider: JWTAuthProvider,
        identity: Identity,
    ):
        gate.authorize.return_value = RedirectTo("/dashboard")
        token = provider.create_token(identity)

        response = await client.get("/page/admin", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"
        gate.authorize.assert_awaited_once_with(identity.id, "/page/admin", Role.ADMIN)

    @pytest.mark.asyncio
    async def test_allowed(
        self,
        client: AsyncClient,
        gate: AsyncMock,
        provider: JWTAuthProvider,
        identity: Identity,
    ):
        gate.authorize.return_value = Allow()
        token = provider.create_token(identity)

        response = await client.get("/page/admin", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
