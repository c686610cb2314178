"""Admin routes: role request review and user management.

Every handler re-checks the caller's role inside the service, so these
routes are safe to call directly even when the page gate is bypassed.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentSession
from api.dependencies.services import get_profile_service, get_role_request_service
from api.v1.schemas.common import SuccessResponse
from api.v1.schemas.profile import (
    AdminOverviewResponse,
    ProfileListResponse,
    ProfileResponse,
    RoleUpdateRequest,
)
from api.v1.schemas.role_request import (
    RoleRequestListResponse,
    RoleRequestReject,
    RoleRequestResponse,
)
from core.rate_limit import limiter
from domain.entities.profile import Role
from domain.entities.role_request import RoleRequestStatus
from domain.services.profile_service import ProfileService
from domain.services.role_request_service import (
    APPROVED_MESSAGE,
    REJECTED_MESSAGE,
    ROLE_UPDATED_MESSAGE,
    RoleRequestService,
)

router = APIRouter(prefix="/admin", tags=["admin"])

_REVIEW_RESPONSES: dict[int | str, dict[str, str]] = {
    200: {"description": "Review recorded"},
    403: {"description": "Not an admin"},
    404: {"description": "Request not found"},
    409: {"description": "Request already reviewed"},
    500: {"description": "Review failed; nothing was applied"},
}


# --- Role requests ---


@router.get(
    "/role-requests",
    response_model=RoleRequestListResponse,
    summary="List role requests",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_role_requests(
    request: Request,
    session: CurrentSession,
    status: RoleRequestStatus | None = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: RoleRequestService = Depends(get_role_request_service),
) -> RoleRequestListResponse:
    """Review queue, newest first."""
    requests = await service.list_requests(
        session.identity.id, status=status, limit=limit, offset=offset
    )
    return RoleRequestListResponse(
        data=[RoleRequestResponse.model_validate(r) for r in requests]
    )


@router.post(
    "/role-requests/{request_id}/approve",
    response_model=SuccessResponse,
    summary="Approve a role request",
    responses=_REVIEW_RESPONSES,
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def approve_role_request(
    request: Request,
    request_id: UUID,
    session: CurrentSession,
    service: RoleRequestService = Depends(get_role_request_service),
) -> SuccessResponse:
    """Grant the requested role and notify the requester."""
    await service.approve_request(session.identity.id, request_id)
    return SuccessResponse(success=APPROVED_MESSAGE)


@router.post(
    "/role-requests/{request_id}/reject",
    response_model=SuccessResponse,
    summary="Reject a role request",
    responses=_REVIEW_RESPONSES,
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def reject_role_request(
    request: Request,
    request_id: UUID,
    session: CurrentSession,
    body: RoleRequestReject | None = None,
    service: RoleRequestService = Depends(get_role_request_service),
) -> SuccessResponse:
    """Reject the request; the requester keeps their current role."""
    admin_notes = body.admin_notes if body else ""
    await service.reject_request(session.identity.id, request_id, admin_notes)
    return SuccessResponse(success=REJECTED_MESSAGE)


# --- Users ---


@router.get(
    "/users",
    response_model=ProfileListResponse,
    summary="List club members",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_users(
    request: Request,
    session: CurrentSession,
    role: Role | None = Query(None, description="Filter by role"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileListResponse:
    profiles = await service.list_profiles(
        session.identity.id, role=role, limit=limit, offset=offset
    )
    return ProfileListResponse(
        data=[ProfileResponse.model_validate(p) for p in profiles],
        meta={"limit": limit, "offset": offset},
    )


@router.patch(
    "/users/{user_id}/role",
    response_model=SuccessResponse,
    summary="Change a user's role",
    responses={
        200: {"description": "Role updated and user notified"},
        400: {"description": "Invalid role"},
        403: {"description": "Not an admin"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_user_role(
    request: Request,
    user_id: UUID,
    body: RoleUpdateRequest,
    session: CurrentSession,
    service: RoleRequestService = Depends(get_role_request_service),
) -> SuccessResponse:
    await service.update_user_role(session.identity.id, user_id, body.role)
    return SuccessResponse(success=ROLE_UPDATED_MESSAGE)


@router.get(
    "/overview",
    response_model=AdminOverviewResponse,
    summary="Admin dashboard numbers",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_overview(
    request: Request,
    session: CurrentSession,
    service: ProfileService = Depends(get_profile_service),
) -> AdminOverviewResponse:
    overview = await service.get_admin_overview(session.identity.id)
    return AdminOverviewResponse(
        total_profiles=overview.total_profiles,
        role_counts={role.value: count for role, count in overview.role_counts.items()},
        pending_requests=overview.pending_requests,
    )
