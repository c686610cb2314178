"""Request logging middleware."""

import time
from typing import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

QUIET_PATHS = frozenset({"/health"})


def _user_id(request: Request) -> str | None:
    session = getattr(request.state, "session", None)
    return str(session.identity.id) if session is not None else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing and the resolved caller, if any."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()
        request_id = getattr(request.state, "request_id", "unknown")

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "request_failed",
                error=str(e),
                user_id=_user_id(request),
                duration_ms=round(duration_ms, 2),
            )
            raise

        if request.url.path not in QUIET_PATHS:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "request_completed",
                status_code=response.status_code,
                user_id=_user_id(request),
                duration_ms=round(duration_ms, 2),
            )
        return response
