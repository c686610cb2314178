"""Websocket connection registry for live notification delivery."""

from collections import defaultdict
from typing import Any
from uuid import UUID

import structlog
from fastapi import WebSocket

logger = structlog.get_logger()


class NotificationConnectionManager:
    """Manage active websocket connections grouped by user."""

    def __init__(self) -> None:
        self._connections: defaultdict[UUID, set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: UUID, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""
        await websocket.accept()
        self._connections[user_id].add(websocket)
        logger.debug("realtime_connected", user_id=str(user_id))

    def disconnect(self, user_id: UUID, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""
        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)

    def connection_count(self, user_id: UUID) -> int:
        return len(self._connections.get(user_id, ()))

    async def send_to_user(self, user_id: UUID, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection for ``user_id``."""
        for connection in list(self._connections.get(user_id, ())):
            try:
                await connection.send_json(message)
            except Exception:
                # Peer went away mid-send; drop it and keep delivering.
                logger.debug("realtime_send_failed", user_id=str(user_id))
                self.disconnect(user_id, connection)
