"""Role request submission routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentSession
from api.dependencies.services import get_role_request_service
from api.v1.schemas.common import SuccessResponse
from api.v1.schemas.role_request import (
    RoleRequestCreate,
    RoleRequestListResponse,
    RoleRequestResponse,
)
from core.rate_limit import limiter
from domain.services.role_request_service import SUBMITTED_MESSAGE, RoleRequestService

router = APIRouter(prefix="/role-requests", tags=["role-requests"])


@router.post(
    "",
    response_model=SuccessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a role",
    responses={
        201: {"description": "Request submitted and admins notified"},
        400: {"description": "Invalid role"},
        401: {"description": "Not authenticated"},
        404: {"description": "Profile not found"},
        409: {"description": "A pending request already exists"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def submit_role_request(
    request: Request,
    body: RoleRequestCreate,
    session: CurrentSession,
    service: RoleRequestService = Depends(get_role_request_service),
) -> SuccessResponse:
    """Ask for the member or alumni role. Admin cannot be requested."""
    await service.submit_request(session.identity.id, body.role, body.reason)
    return SuccessResponse(success=SUBMITTED_MESSAGE)


@router.get(
    "/me",
    response_model=RoleRequestListResponse,
    summary="List my role requests",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_my_role_requests(
    request: Request,
    session: CurrentSession,
    service: RoleRequestService = Depends(get_role_request_service),
) -> RoleRequestListResponse:
    requests = await service.list_my_requests(session.identity.id)
    return RoleRequestListResponse(
        data=[RoleRequestResponse.model_validate(r) for r in requests]
    )
