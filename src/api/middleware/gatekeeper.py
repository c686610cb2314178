"""Edge gatekeeper: coarse route protection ahead of the page handlers.

Only the sign-in page and the dashboard tree are inspected; everything
else (API routes, health checks, static assets) passes straight through.
The page guards repeat the same check, so turning this off in local
development never opens a protected page.
"""

from typing import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from api.dependencies.auth import apply_refreshed_cookies, resolve_session
from api.dependencies.services import get_authorization_gate
from domain.services.authorization import (
    DEFAULT_DASHBOARD,
    PROTECTED_PREFIX,
    SIGN_IN_PATH,
    AuthorizationGate,
    RedirectTo,
    required_role_for_path,
)

logger = structlog.get_logger()

STATIC_PREFIXES = ("/static/", "/_next/static/", "/_next/image")
STATIC_SUFFIXES = (".ico", ".svg", ".png", ".jpg", ".jpeg", ".gif", ".webp", ".css", ".js")


def is_static_asset(path: str) -> bool:
    return path.startswith(STATIC_PREFIXES) or path.lower().endswith(STATIC_SUFFIXES)


def is_protected(path: str) -> bool:
    return path == PROTECTED_PREFIX or path.startswith(PROTECTED_PREFIX + "/")


class GatekeeperMiddleware(BaseHTTPMiddleware):
    """Redirect anonymous or under-privileged callers before routing."""

    def __init__(
        self,
        app: ASGIApp,
        enabled: bool = True,
        gate_factory: Callable[[], AuthorizationGate] = get_authorization_gate,
    ) -> None:
        super().__init__(app)
        self._enabled = enabled
        self._gate_factory = gate_factory

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        path = request.url.path

        if self._enabled and not is_static_asset(path):
            location = await self._check(request, path)
            if location is not None:
                logger.info("gatekeeper_redirect", path=path, location=location)
                redirect = RedirectResponse(location, status_code=307)
                apply_refreshed_cookies(request, redirect)
                return redirect

        response = await call_next(request)
        apply_refreshed_cookies(request, response)
        return response

    async def _check(self, request: Request, path: str) -> str | None:
        if path == SIGN_IN_PATH:
            session = await resolve_session(request)
            return DEFAULT_DASHBOARD if session else None

        if not is_protected(path):
            return None

        session = await resolve_session(request)
        return_to = f"{path}?{request.url.query}" if request.url.query else path
        decision = await self._gate_factory().authorize(
            session.identity.id if session else None,
            return_to,
            required_role_for_path(path),
        )
        return decision.location if isinstance(decision, RedirectTo) else None
