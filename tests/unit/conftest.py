"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.profile import Profile, Role


class FakeUnitOfWork:
    """Fake Unit of Work with all 4 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.role_requests = AsyncMock()
        self.notifications = AsyncMock()
        self.activities = AsyncMock()
        self.committed = False
        self.rolled_back = False

        # Creation calls echo the entity back, like the real repositories
        self.role_requests.create.side_effect = lambda entity: entity
        self.notifications.create.side_effect = lambda entity: entity
        self.activities.create.side_effect = lambda entity: entity

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def actor_id() -> UUID:
    """A random actor ID (distinct from user_id)."""
    return uuid4()


def _make_profile(user_id: UUID | None = None, role: Role = Role.MEMBER, **kwargs: Any) -> Profile:
    return Profile(
        id=user_id or uuid4(),
        email=kwargs.pop("email", "someone@example.com"),
        username=kwargs.pop("username", "someone"),
        role=role,
        **kwargs,
    )


@pytest.fixture
def make_profile() -> Any:
    """Factory building Profile entities with sensible defaults."""
    return _make_profile
