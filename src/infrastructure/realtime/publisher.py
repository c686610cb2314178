"""Broadcast committed notifications to connected websocket clients."""

from collections.abc import Sequence

from domain.entities.notification import Notification
from infrastructure.realtime.manager import NotificationConnectionManager

NOTIFICATION_CREATED = "notification.created"


class RealtimeNotificationPublisher:
    """INotificationPublisher backed by the in-process connection manager."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    async def publish(self, notifications: Sequence[Notification]) -> None:
        for notification in notifications:
            await self._manager.send_to_user(
                notification.user_id,
                {"type": NOTIFICATION_CREATED, "data": notification.to_payload()},
            )
