"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.activity import router as activity_router
from api.v1.routes.admin import router as admin_router
from api.v1.routes.notifications import router as notifications_router
from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.role_requests import router as role_requests_router

router = APIRouter()
router.include_router(profiles_router)
router.include_router(role_requests_router)
router.include_router(admin_router)
router.include_router(activity_router)
router.include_router(notifications_router)
