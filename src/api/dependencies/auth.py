"""Authentication dependencies for FastAPI.

The session is resolved once per request (bearer header first, then the
session cookie, then a refresh-token rotation) and cached on
``request.state``, so the edge gatekeeper, page guards and route handlers
all see the same answer without re-validating.
"""

from typing import Annotated, Awaitable, Callable, Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from fastapi.security.utils import get_authorization_scheme_param
from starlette.responses import Response

from api.dependencies.services import get_authorization_gate
from core.config import settings
from core.exceptions import AuthenticationError, GateRedirect
from domain.entities.profile import Role
from domain.services.authorization import AuthorizationGate, RedirectTo, sign_in_redirect
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import ISessionIssuer, Session, TokenPair

logger = structlog.get_logger()

# Security scheme for OpenAPI docs
security = HTTPBearer(auto_error=False)

_RESOLVED = "session_resolved"


def get_auth_provider(request: Request) -> JWTAuthProvider:
    """Token validator constructed at startup and held on app.state."""
    return request.app.state.auth_provider  # type: ignore[no-any-return]


def get_session_issuer(request: Request) -> Optional[ISessionIssuer]:
    """Supabase auth client constructed at startup (None when not configured)."""
    return getattr(request.app.state, "supabase_auth", None)


# --- Cookie helpers ---


def set_session_cookies(response: Response, tokens: TokenPair) -> None:
    """Write the access/refresh cookies for a freshly issued session."""
    common = {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": "lax",
        "path": "/",
    }
    response.set_cookie(
        settings.access_token_cookie,
        tokens.access_token,
        max_age=tokens.expires_in,
        **common,  # type: ignore[arg-type]
    )
    response.set_cookie(
        settings.refresh_token_cookie,
        tokens.refresh_token,
        max_age=settings.cookie_max_age_seconds,
        **common,  # type: ignore[arg-type]
    )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(settings.access_token_cookie, path="/")
    response.delete_cookie(settings.refresh_token_cookie, path="/")
    response.delete_cookie(settings.code_verifier_cookie, path="/")


def apply_refreshed_cookies(request: Request, response: Response) -> None:
    """Copy tokens rotated during this request onto the outgoing response."""
    tokens: TokenPair | None = getattr(request.state, "refreshed_tokens", None)
    if tokens is not None:
        set_session_cookies(response, tokens)


# --- Session resolution ---


async def _load_session(
    request: Request,
    auth_provider: JWTAuthProvider,
    issuer: Optional[ISessionIssuer],
) -> Session | None:
    refresh_token = request.cookies.get(settings.refresh_token_cookie)

    scheme, bearer = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer" and bearer:
        identity = await auth_provider.validate_token(bearer)
        return Session(identity, bearer) if identity else None

    access_token = request.cookies.get(settings.access_token_cookie)
    if access_token:
        identity = await auth_provider.validate_token(access_token)
        if identity:
            return Session(identity, access_token, refresh_token)

    if refresh_token and issuer is not None:
        tokens = await issuer.refresh(refresh_token)
        if tokens:
            identity = await auth_provider.validate_token(tokens.access_token)
            if identity:
                request.state.refreshed_tokens = tokens
                logger.info("session_refreshed", user_id=str(identity.id))
                return Session(identity, tokens.access_token, tokens.refresh_token)

    return None


async def resolve_session(request: Request) -> Session | None:
    """Resolve the caller's session, at most once per request.

    Returns None for "no session": missing, invalid and expired credentials
    are a normal branch here, never an exception.
    """
    if getattr(request.state, _RESOLVED, False):
        return request.state.session  # type: ignore[no-any-return]

    session = await _load_session(request, get_auth_provider(request), get_session_issuer(request))
    request.state.session = session
    setattr(request.state, _RESOLVED, True)
    return session


async def get_optional_session(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security),
    ],
) -> Session | None:
    """
    Dependency to get the current session if authenticated.

    Returns:
        Session if authenticated, None otherwise (no exception raised)
    """
    return await resolve_session(request)


async def get_current_session(
    session: Annotated[Session | None, Depends(get_optional_session)],
) -> Session:
    """
    Dependency to get the current authenticated session.

    Raises:
        AuthenticationError: If no valid credentials were presented
    """
    if session is None:
        raise AuthenticationError()
    return session


# Type aliases for convenience in route handlers
CurrentSession = Annotated[Session, Depends(get_current_session)]
OptionalSession = Annotated[Session | None, Depends(get_optional_session)]


# --- Page guards ---


def require_page(
    required_role: Role | None = None,
) -> Callable[..., Awaitable[Session]]:
    """Build a dependency that applies the authorization gate to a page.

    A denied caller gets a redirect (sign-in or the default dashboard),
    never an error body.
    """

    async def guard(
        request: Request,
        session: Annotated[Session | None, Depends(get_optional_session)],
        gate: Annotated[AuthorizationGate, Depends(get_authorization_gate)],
    ) -> Session:
        return_to = request.url.path
        if request.url.query:
            return_to = f"{return_to}?{request.url.query}"
        if session is None:
            raise GateRedirect(sign_in_redirect(return_to).location)
        decision = await gate.authorize(session.identity.id, return_to, required_role)
        if isinstance(decision, RedirectTo):
            raise GateRedirect(decision.location)
        return session

    return guard
