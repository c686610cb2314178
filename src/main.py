"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.gatekeeper import GatekeeperMiddleware
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.auth import router as auth_router
from api.routes.dashboard import router as dashboard_router
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.supabase_client import SupabaseAuthClient
from infrastructure.database.session import dispose_engine

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


def _install_auth_providers(app: FastAPI, http_client: httpx.AsyncClient | None) -> None:
    app.state.auth_provider = JWTAuthProvider(http_client=http_client)
    app.state.supabase_auth = (
        SupabaseAuthClient.from_settings(settings, http_client)
        if settings.supabase_url and http_client is not None
        else None
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the outbound HTTP client used for JWKS and Supabase Auth calls."""
    async with httpx.AsyncClient(timeout=settings.supabase_timeout_seconds) as client:
        _install_auth_providers(app, client)
        logger.info(
            "application_started",
            environment=settings.app_env,
            supabase_configured=app.state.supabase_auth is not None,
            edge_gate_enabled=settings.edge_gate_enabled,
        )
        yield
    await dispose_engine()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Circuit Breaker Club Portal\n\n"
            "Member profiles, role requests and the admin review workflow "
            "for the university electronics club.\n\n"
            "### Features\n"
            "- **Profiles**: created on first sign-in, editable by their owner\n"
            "- **Role Requests**: members ask for the alumni role, admins review\n"
            "- **Notifications**: inbox with live websocket delivery\n\n"
            "### Authentication\n"
            "API endpoints accept the Supabase access token either as a bearer "
            "header or through the session cookies set by `/auth/callback`:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PATCH: 10 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        contact={
            "name": "Circuit Breaker Club",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Sign-in callback and sign-out",
            },
            {
                "name": "dashboard",
                "description": "Role-gated dashboard pages",
            },
            {
                "name": "profiles",
                "description": "Profile bootstrap and editing",
            },
            {
                "name": "role-requests",
                "description": "Role request submission",
            },
            {
                "name": "admin",
                "description": "Role request review and user management",
            },
            {
                "name": "notifications",
                "description": "Notification inbox operations",
            },
        ],
    )

    # Replaced with the lifespan-owned client on startup
    _install_auth_providers(app, None)

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Route protection runs inside request tracking so redirects are logged
    app.add_middleware(GatekeeperMiddleware, enabled=settings.edge_gate_enabled)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.is_production)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
