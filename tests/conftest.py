"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

# Disable rate limiting and the edge gatekeeper in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EDGE_GATE_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities.identity import Identity
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.database.models import Base, ProfileModel


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory, one shared connection per engine)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh test database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def test_user() -> Identity:
    """Create a test identity with fixed ID."""
    return Identity(
        id=TEST_USER_ID,
        email="test@example.com",
        full_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
        jwks_url="",
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: Identity) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def headers_for(auth_provider: JWTAuthProvider) -> Callable[[Identity], dict[str, str]]:
    """Build bearer headers for any identity."""

    def build(identity: Identity) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_provider.create_token(identity)}"}

    return build


@pytest.fixture
def seed_profile(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[UUID]]:
    """Insert a profile row directly and return its id."""

    async def seed(
        user_id: UUID | None = None,
        role: str = "member",
        email: str | None = None,
        full_name: str = "",
    ) -> UUID:
        user_id = user_id or uuid4()
        async with session_factory() as session:
            session.add(
                ProfileModel(
                    id=user_id,
                    email=email or f"{user_id.hex[:8]}@example.com",
                    username=(email or f"{user_id.hex[:8]}@example.com").split("@")[0],
                    full_name=full_name,
                    role=role,
                )
            )
            await session.commit()
        return user_id

    return seed


@pytest.fixture
def app(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> Any:
    """
    Create the application wired to the test database.

    This app:
    - Uses an in-memory SQLite database
    - Validates tokens signed with the test secret
    - Overrides every service factory to use the test session
    """
    from api.dependencies import services
    from domain.services.activity_service import ActivityService
    from domain.services.authorization import AuthorizationGate
    from domain.services.notification_service import NotificationService
    from domain.services.profile_service import ProfileService
    from domain.services.role_request_service import RoleRequestService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from infrastructure.realtime.manager import NotificationConnectionManager
    from infrastructure.realtime.publisher import RealtimeNotificationPublisher
    from main import create_app

    app = create_app()
    app.state.auth_provider = auth_provider
    app.state.supabase_auth = None

    # Create a UoW factory that uses test session
    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    manager = NotificationConnectionManager()
    activity = ActivityService(test_uow_factory)
    notification = NotificationService(
        test_uow_factory, publisher=RealtimeNotificationPublisher(manager)
    )
    profile = ProfileService(test_uow_factory, activity_service=activity)
    role_request = RoleRequestService(
        test_uow_factory, notification_service=notification, activity_service=activity
    )
    gate = AuthorizationGate(test_uow_factory)

    app.dependency_overrides[services.get_connection_manager] = lambda: manager
    app.dependency_overrides[services.get_activity_service] = lambda: activity
    app.dependency_overrides[services.get_notification_service] = lambda: notification
    app.dependency_overrides[services.get_profile_service] = lambda: profile
    app.dependency_overrides[services.get_role_request_service] = lambda: role_request
    app.dependency_overrides[services.get_authorization_gate] = lambda: gate

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth headers)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def authenticated_client(
    app: Any,
    auth_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client that sends the test user's bearer token."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c
