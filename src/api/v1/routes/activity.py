"""Activity log API routes (admin audit trail)."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentSession
from api.dependencies.services import get_activity_service
from api.v1.schemas.activity import ActivityListResponse, ActivityLogResponse
from core.rate_limit import limiter
from domain.services.activity_service import ActivityService

router = APIRouter(
    prefix="/admin/activity",
    tags=["admin"],
)


@router.get(
    "",
    response_model=ActivityListResponse,
    summary="Get the club activity feed",
    responses={
        200: {"description": "Paginated activity feed"},
        403: {"description": "Not an admin"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_recent_activity(
    request: Request,
    session: CurrentSession,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: UUID | None = Query(None, description="Only entries by this user"),
    action: str | None = Query(None, description="Only this action, e.g. role_request.approved"),
    service: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    """Audit trail, newest first. Requires the admin role."""
    activities = await service.get_recent_activity(
        actor_id=session.identity.id,
        limit=limit,
        offset=offset,
        performed_by=user_id,
        action=action,
    )
    return ActivityListResponse(
        data=[ActivityLogResponse.model_validate(a) for a in activities],
        meta={"limit": limit, "offset": offset},
    )


@router.get(
    "/{entity_type}/{entity_id}",
    response_model=ActivityListResponse,
    summary="Get the history of one entity",
    responses={
        200: {"description": "Activity entries for the entity"},
        403: {"description": "Not an admin"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_entity_history(
    request: Request,
    entity_type: str,
    entity_id: UUID,
    session: CurrentSession,
    limit: int = Query(50, ge=1, le=100),
    service: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    activities = await service.get_entity_history(
        actor_id=session.identity.id,
        entity_type=entity_type,
        entity_id=entity_id,
        limit=limit,
    )
    return ActivityListResponse(
        data=[ActivityLogResponse.model_validate(a) for a in activities],
        meta={"limit": limit},
    )
