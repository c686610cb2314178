"""Shared fixtures for API integration tests."""

from collections.abc import Awaitable, Callable
from uuid import UUID, uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from domain.entities.identity import Identity
from infrastructure.database.models import NotificationModel


@pytest.fixture
async def admin_headers(
    seed_profile: Callable[..., Awaitable[UUID]],
    headers_for: Callable[[Identity], dict[str, str]],
) -> dict[str, str]:
    """Bearer headers for a seeded admin."""
    admin_id = await seed_profile(role="admin", email="admin@club.test", full_name="Club Admin")
    return headers_for(Identity(id=admin_id, email="admin@club.test"))


@pytest.fixture
def seed_notification(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[UUID]]:
    """Insert a notification row directly and return its id."""

    async def seed(user_id: UUID, title: str = "Hello", is_read: bool = False) -> UUID:
        notification_id = uuid4()
        async with session_factory() as session:
            session.add(
                NotificationModel(
                    id=notification_id,
                    user_id=user_id,
                    title=title,
                    message=f"{title} message",
                    type="info",
                    is_read=is_read,
                )
            )
            await session.commit()
        return notification_id

    return seed
