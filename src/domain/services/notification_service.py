"""Notification service layer for creating and managing notifications."""

from collections.abc import Callable, Sequence
from typing import Protocol
from uuid import UUID

import structlog

from core.exceptions import NotificationNotFoundError
from domain.entities.notification import Notification, NotificationKind
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 10


class INotificationPublisher(Protocol):
    """Pushes committed notifications to live subscribers."""

    async def publish(self, notifications: Sequence[Notification]) -> None:
        ...


class NotificationService:
    """Service layer for notification creation and management."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        publisher: INotificationPublisher | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._publisher = publisher

    # --- In-transaction notification creation ---

    async def notify(
        self,
        uow: IUnitOfWork,
        user_id: UUID,
        title: str,
        message: str,
        type: NotificationKind = NotificationKind.INFO,
        action_url: str | None = None,
    ) -> Notification:
        """Create a notification within an existing UoW transaction.

        Called from other services inside their own transaction (same
        pattern as ActivityService.log()); the caller commits, then hands
        the result to :meth:`publish`.

        Args:
            uow: The active Unit of Work (caller manages commit).
            user_id: The single recipient.
            title: Short headline.
            message: Body text.
            type: Visual severity.
            action_url: Optional in-app link.

        Returns:
            The created Notification.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            action_url=action_url,
        )
        return await uow.notifications.create(notification)

    async def publish(self, notifications: Sequence[Notification]) -> None:
        """Push committed notifications to realtime subscribers (best effort)."""
        if not self._publisher or not notifications:
            return
        try:
            await self._publisher.publish(notifications)
        except Exception:
            # Delivery is best effort; the rows are already committed and
            # the client will see them on its next fetch.
            logger.exception("notification_publish_failed", count=len(notifications))

    # --- Read methods (use own UoW context) ---

    async def get_notifications(
        self,
        user_id: UUID,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> tuple[list[Notification], int]:
        """Get the newest notifications for a user.

        Returns:
            Tuple of (notification_list, unread_count).
        """
        async with self._uow_factory() as uow:
            notifications = await uow.notifications.list_for_user(user_id, limit=limit)
            unread_count = await uow.notifications.get_unread_count(user_id)
            return notifications, unread_count

    async def get_unread_count(self, user_id: UUID) -> int:
        """Get the count of unread notifications."""
        async with self._uow_factory() as uow:
            return await uow.notifications.get_unread_count(user_id)

    async def mark_read(self, notification_id: UUID, user_id: UUID) -> None:
        """Mark a notification as read. Only the recipient may do so."""
        async with self._uow_factory() as uow:
            success = await uow.notifications.mark_read(notification_id, user_id)
            if not success:
                raise NotificationNotFoundError(str(notification_id))
            await uow.commit()

    async def mark_all_read(self, user_id: UUID) -> int:
        """Mark all unread notifications as read. Returns count of marked."""
        async with self._uow_factory() as uow:
            count = await uow.notifications.mark_all_read(user_id)
            await uow.commit()
            return count
