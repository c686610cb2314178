"""Notification API routes."""

import json
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, Request, WebSocket, WebSocketDisconnect, status

from api.dependencies.auth import CurrentSession
from api.dependencies.services import get_connection_manager, get_notification_service
from api.v1.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from core.config import settings
from core.rate_limit import limiter
from domain.services.notification_service import NotificationService
from infrastructure.realtime.manager import NotificationConnectionManager

logger = structlog.get_logger()

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List my notifications",
    responses={
        200: {"description": "Newest notifications with the unread count"},
        401: {"description": "Not authenticated"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_notifications(
    request: Request,
    session: CurrentSession,
    limit: int = Query(settings.notification_page_size, ge=1, le=100, description="Page size"),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    """Most recent notifications for the caller, newest first."""
    notifications, unread_count = await service.get_notifications(
        user_id=session.identity.id,
        limit=limit,
    )
    return NotificationListResponse(
        data=[NotificationResponse.model_validate(n) for n in notifications],
        meta={"unread_count": unread_count},
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Get unread notification count",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_unread_count(
    request: Request,
    session: CurrentSession,
    service: NotificationService = Depends(get_notification_service),
) -> UnreadCountResponse:
    count = await service.get_unread_count(session.identity.id)
    return UnreadCountResponse(count=count)


@router.patch(
    "/{notification_id}/read",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mark notification as read",
    responses={
        204: {"description": "Marked as read"},
        404: {"description": "Notification not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def mark_notification_read(
    request: Request,
    notification_id: UUID,
    session: CurrentSession,
    service: NotificationService = Depends(get_notification_service),
) -> None:
    """Mark one of the caller's notifications as read.

    Notifications addressed to someone else are reported as not found.
    """
    await service.mark_read(notification_id, session.identity.id)


@router.post(
    "/mark-all-read",
    response_model=MarkAllReadResponse,
    summary="Mark all notifications as read",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def mark_all_read(
    request: Request,
    session: CurrentSession,
    service: NotificationService = Depends(get_notification_service),
) -> MarkAllReadResponse:
    count = await service.mark_all_read(session.identity.id)
    return MarkAllReadResponse(count=count)


@router.websocket("/ws")
async def notifications_websocket(
    websocket: WebSocket,
    manager: NotificationConnectionManager = Depends(get_connection_manager),
) -> None:
    """Stream newly created notifications to the authenticated user.

    Browsers cannot set headers on a websocket handshake, so the access
    token travels as ``?token=``.
    """
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    identity = await websocket.app.state.auth_provider.validate_token(token)
    if identity is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(identity.id, websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                await websocket.send_json({"type": "error", "error": "Malformed message"})
                continue
            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug("realtime_disconnected", user_id=str(identity.id))
    finally:
        manager.disconnect(identity.id, websocket)
