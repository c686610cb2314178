"""Profile API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentSession
from api.dependencies.services import get_profile_service, get_role_request_service
from api.v1.schemas.profile import (
    ProfileResponse,
    ProfileSetupRequest,
    ProfileSetupResponse,
    ProfileUpdate,
)
from core.exceptions import DuplicateRoleRequestError
from core.rate_limit import limiter
from domain.entities.profile import Role
from domain.services.authorization import dashboard_path_for
from domain.services.profile_service import ProfileService
from domain.services.role_request_service import RoleRequestService

router = APIRouter(prefix="/profiles", tags=["profiles"])

REGISTRATION_REASON = "Requested during registration"


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get my profile",
    responses={
        200: {"description": "The caller's profile (created on first call)"},
        401: {"description": "Not authenticated"},
        500: {"description": "Profile could not be created"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_my_profile(
    request: Request,
    session: CurrentSession,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Return the caller's profile, bootstrapping it on first sign-in."""
    profile = await service.get_or_create_profile(session.identity)
    return ProfileResponse.model_validate(profile)


@router.post(
    "/me",
    response_model=ProfileSetupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Complete profile setup",
    responses={
        201: {"description": "Profile ready; role request opened if alumni was chosen"},
        409: {"description": "A pending role request already exists; nothing is changed"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def setup_my_profile(
    request: Request,
    body: ProfileSetupRequest,
    session: CurrentSession,
    service: ProfileService = Depends(get_profile_service),
    role_requests: RoleRequestService = Depends(get_role_request_service),
) -> ProfileSetupResponse:
    """
    Finish registration after the first sign-in.

    The profile always starts as a member. Choosing alumni opens a role
    request for an admin to review instead of granting the role.
    """
    user_id = session.identity.id
    profile = await service.get_or_create_profile(session.identity)
    wants_alumni = body.requested_role == Role.ALUMNI.value
    if wants_alumni and await role_requests.has_pending_request(user_id):
        raise DuplicateRoleRequestError()

    if body.username is not None or body.full_name is not None:
        profile = await service.update_profile(
            user_id,
            username=body.username,
            full_name=body.full_name,
        )

    role_request_id = None
    if wants_alumni:
        role_request = await role_requests.submit_request(
            user_id,
            body.requested_role,
            body.reason or REGISTRATION_REASON,
        )
        role_request_id = role_request.id

    return ProfileSetupResponse(
        profile=ProfileResponse.model_validate(profile),
        role_request_id=role_request_id,
        redirect_to=dashboard_path_for(profile.role),
    )


@router.patch(
    "/me",
    response_model=ProfileResponse,
    summary="Update my profile",
    responses={
        200: {"description": "Profile updated"},
        404: {"description": "Profile not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_my_profile(
    request: Request,
    body: ProfileUpdate,
    session: CurrentSession,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    profile = await service.update_profile(
        session.identity.id,
        username=body.username,
        full_name=body.full_name,
        avatar_url=body.avatar_url,
    )
    return ProfileResponse.model_validate(profile)
