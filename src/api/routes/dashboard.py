"""Role-gated dashboard pages.

Each page is guarded by :func:`require_page`; a caller who may not see it
is redirected (sign-in or ``/dashboard``) rather than shown an error.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from api.dependencies.auth import require_page
from api.dependencies.services import get_profile_service
from api.v1.schemas.profile import AdminOverviewResponse, ProfileResponse
from core.exceptions import GateRedirect
from domain.entities.profile import Profile, Role
from domain.services.authorization import PROFILE_SETUP_PATH, dashboard_path_for
from domain.services.profile_service import ProfileService
from infrastructure.auth.provider import Session

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class DashboardResponse(BaseModel):
    """Data backing a dashboard page."""

    page: str
    greeting: str
    profile: ProfileResponse
    overview: AdminOverviewResponse | None = None


async def _profile_or_setup(service: ProfileService, session: Session) -> Profile:
    """Signed in without a profile means setup was never finished."""
    if not await service.profile_exists(session.identity.id):
        raise GateRedirect(PROFILE_SETUP_PATH)
    return await service.get_profile(session.identity.id)


def _page(name: str, profile: Profile, **extra: Any) -> DashboardResponse:
    return DashboardResponse(
        page=name,
        greeting=f"Welcome back, {profile.display_name or 'Member'}!",
        profile=ProfileResponse.model_validate(profile),
        **extra,
    )


@router.get("", summary="Dashboard entry point")
async def dashboard_home(
    session: Annotated[Session, Depends(require_page())],
    service: ProfileService = Depends(get_profile_service),
) -> RedirectResponse:
    """Send the caller to the dashboard for their role."""
    role = await service.get_role(session.identity.id)
    location = PROFILE_SETUP_PATH if role is None else dashboard_path_for(role)
    return RedirectResponse(location, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/member", response_model=DashboardResponse, summary="Member dashboard")
async def member_dashboard(
    session: Annotated[Session, Depends(require_page())],
    service: ProfileService = Depends(get_profile_service),
) -> DashboardResponse:
    profile = await _profile_or_setup(service, session)
    return _page("member", profile)


@router.get("/alumni", response_model=DashboardResponse, summary="Alumni dashboard")
async def alumni_dashboard(
    session: Annotated[Session, Depends(require_page(Role.ALUMNI))],
    service: ProfileService = Depends(get_profile_service),
) -> DashboardResponse:
    profile = await _profile_or_setup(service, session)
    return _page("alumni", profile)


@router.get("/admin", response_model=DashboardResponse, summary="Admin dashboard")
async def admin_dashboard(
    session: Annotated[Session, Depends(require_page(Role.ADMIN))],
    service: ProfileService = Depends(get_profile_service),
) -> DashboardResponse:
    profile = await _profile_or_setup(service, session)
    overview = await service.get_admin_overview(session.identity.id)
    return _page(
        "admin",
        profile,
        overview=AdminOverviewResponse(
            total_profiles=overview.total_profiles,
            role_counts={role.value: count for role, count in overview.role_counts.items()},
            pending_requests=overview.pending_requests,
        ),
    )
