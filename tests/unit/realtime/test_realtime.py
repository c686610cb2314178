"""Unit tests for the realtime connection manager and publisher."""

from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.notification import Notification, NotificationKind
from infrastructure.realtime.manager import NotificationConnectionManager
from infrastructure.realtime.publisher import NOTIFICATION_CREATED, RealtimeNotificationPublisher


@pytest.fixture
def manager() -> NotificationConnectionManager:
    return NotificationConnectionManager()


class TestConnectionManager:
    @pytest.mark.asyncio
    async def test_connect_accepts_and_registers(
        self, manager: NotificationConnectionManager, user_id: UUID
    ):
        socket = AsyncMock()

        await manager.connect(user_id, socket)

        socket.accept.assert_awaited_once()
        assert manager.connection_count(user_id) == 1

    @pytest.mark.asyncio
    async def test_send_reaches_every_connection_of_user_only(
        self, manager: NotificationConnectionManager, user_id: UUID
    ):
        first, second, other = AsyncMock(), AsyncMock(), AsyncMock()
        await manager.connect(user_id, first)
        await manager.connect(user_id, second)
        await manager.connect(uuid4(), other)

        await manager.send_to_user(user_id, {"type": "ping"})

        first.send_json.assert_awaited_once_with({"type": "ping"})
        second.send_json.assert_awaited_once_with({"type": "ping"})
        other.send_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_send_drops_connection(
        self, manager: NotificationConnectionManager, user_id: UUID
    ):
        dead, alive = AsyncMock(), AsyncMock()
        dead.send_json.side_effect = RuntimeError("closed")
        await manager.connect(user_id, dead)
        await manager.connect(user_id, alive)

        await manager.send_to_user(user_id, {"type": "ping"})

        alive.send_json.assert_awaited_once()
        assert manager.connection_count(user_id) == 1

    @pytest.mark.asyncio
    async def test_disconnect(self, manager: NotificationConnectionManager, user_id: UUID):
        socket = AsyncMock()
        await manager.connect(user_id, socket)

        manager.disconnect(user_id, socket)
        manager.disconnect(user_id, socket)

        assert manager.connection_count(user_id) == 0

    @pytest.mark.asyncio
    async def test_send_without_connections_is_noop(
        self, manager: NotificationConnectionManager, user_id: UUID
    ):
        await manager.send_to_user(user_id, {"type": "ping"})


class TestPublisher:
    @pytest.mark.asyncio
    async def test_publishes_each_notification_to_its_recipient(self, user_id: UUID):
        manager = AsyncMock(spec=NotificationConnectionManager)
        publisher = RealtimeNotificationPublisher(manager)
        notification = Notification(
            user_id=user_id,
            title="Role Request Approved",
            message="Your request to become a alumni has been approved.",
            type=NotificationKind.SUCCESS,
        )

        await publisher.publish([notification])

        manager.send_to_user.assert_awaited_once()
        target, message = manager.send_to_user.await_args.args
        assert target == user_id
        assert message["type"] == NOTIFICATION_CREATED
        assert message["data"]["id"] == str(notification.id)
        assert message["data"]["type"] == "success"
        assert message["data"]["is_read"] is False
