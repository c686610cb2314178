"""Sign-in callback and sign-out endpoints.

The sign-in form itself lives in the frontend; it starts the Supabase PKCE
flow and stores the code verifier in a cookie that the callback reads.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from api.dependencies.auth import (
    OptionalSession,
    clear_session_cookies,
    get_auth_provider,
    get_session_issuer,
    set_session_cookies,
)
from api.dependencies.services import get_profile_service
from core.config import settings
from core.exceptions import AuthProviderError
from domain.services.authorization import DEFAULT_DASHBOARD, PROFILE_SETUP_PATH, SIGN_IN_PATH
from domain.services.profile_service import ProfileService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import ISessionIssuer

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])

CALLBACK_ERROR = f"{SIGN_IN_PATH}?error=callback_error"
UNEXPECTED_ERROR = f"{SIGN_IN_PATH}?error=unexpected_error"


def safe_return_path(candidate: str | None) -> str:
    """Only same-site relative paths are honoured as post-login targets."""
    if not candidate or not candidate.startswith("/"):
        return DEFAULT_DASHBOARD
    if candidate.startswith("//") or candidate.startswith("/\\"):
        return DEFAULT_DASHBOARD
    return candidate


def _redirect(location: str) -> RedirectResponse:
    return RedirectResponse(location, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/callback", summary="OAuth / magic-link callback")
async def auth_callback(
    request: Request,
    code: str | None = Query(None),
    next: str | None = Query(None, description="Relative path to continue to"),
    issuer: Optional[ISessionIssuer] = Depends(get_session_issuer),
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
    profiles: ProfileService = Depends(get_profile_service),
) -> RedirectResponse:
    """
    Finish sign-in: trade the auth code for a session and set the cookies.

    First-time users (no profile yet) are sent to profile setup; everyone
    else continues to ``next`` or the dashboard.
    """
    if not code or issuer is None:
        return _redirect(CALLBACK_ERROR)

    verifier = request.cookies.get(settings.code_verifier_cookie, "")
    try:
        tokens = await issuer.exchange_code(code, verifier)
    except AuthProviderError:
        return _redirect(CALLBACK_ERROR)

    identity = await auth_provider.validate_token(tokens.access_token)
    if identity is None:
        logger.warning("auth_callback_invalid_token")
        return _redirect(CALLBACK_ERROR)

    try:
        has_profile = await profiles.profile_exists(identity.id)
    except SQLAlchemyError:
        logger.exception("auth_callback_failed", user_id=str(identity.id))
        return _redirect(UNEXPECTED_ERROR)

    location = safe_return_path(next) if has_profile else PROFILE_SETUP_PATH
    logger.info("user_signed_in", user_id=str(identity.id), first_time=not has_profile)

    response = _redirect(location)
    set_session_cookies(response, tokens)
    response.delete_cookie(settings.code_verifier_cookie, path="/")
    return response


@router.post("/sign-out", summary="Sign out")
async def sign_out(
    session: OptionalSession,
    issuer: Optional[ISessionIssuer] = Depends(get_session_issuer),
) -> RedirectResponse:
    """Revoke the session (best effort) and clear the cookies."""
    if session is not None and issuer is not None:
        await issuer.sign_out(session.access_token)
        logger.info("user_signed_out", user_id=str(session.identity.id))

    response = _redirect("/")
    clear_session_cookies(response)
    return response
