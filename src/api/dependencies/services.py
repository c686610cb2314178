"""Dependency injection factories for domain services."""

from functools import lru_cache
from typing import Callable

from domain.services.activity_service import ActivityService
from domain.services.authorization import AuthorizationGate
from domain.services.notification_service import NotificationService
from domain.services.profile_service import ProfileService
from domain.services.role_request_service import RoleRequestService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.realtime.manager import NotificationConnectionManager
from infrastructure.realtime.publisher import RealtimeNotificationPublisher


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_connection_manager() -> NotificationConnectionManager:
    """Process-wide registry of notification websockets."""
    return NotificationConnectionManager()


@lru_cache
def get_activity_service() -> ActivityService:
    """Get Activity service instance."""
    return ActivityService(get_uow_factory())


@lru_cache
def get_notification_service() -> NotificationService:
    """Get Notification service instance."""
    return NotificationService(
        get_uow_factory(),
        publisher=RealtimeNotificationPublisher(get_connection_manager()),
    )


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(
        get_uow_factory(),
        activity_service=get_activity_service(),
    )


@lru_cache
def get_role_request_service() -> RoleRequestService:
    """Get RoleRequest service instance."""
    return RoleRequestService(
        get_uow_factory(),
        notification_service=get_notification_service(),
        activity_service=get_activity_service(),
    )


@lru_cache
def get_authorization_gate() -> AuthorizationGate:
    """Get the authorization gate used by page guards and the edge gatekeeper."""
    return AuthorizationGate(get_uow_factory())
