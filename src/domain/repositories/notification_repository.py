"""Notification repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.notification import Notification


class INotificationRepository(Protocol):
    """Repository interface for Notification entities."""

    async def create(self, notification: Notification) -> Notification:
        """Create a new notification."""
        ...

    async def list_for_user(self, user_id: UUID, limit: int = 10) -> list[Notification]:
        """Get a user's notifications, newest first."""
        ...

    async def get_unread_count(self, user_id: UUID) -> int:
        """Get the count of unread notifications for a user."""
        ...

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> bool:
        """Mark one notification read. False when it does not belong to the user."""
        ...

    async def mark_all_read(self, user_id: UUID) -> int:
        """Mark every unread notification read. Returns count updated."""
        ...
