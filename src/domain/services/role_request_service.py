"""Role request workflow: submission by members, review by admins.

Each workflow step writes the request, the profile role, the outgoing
notifications and the audit entry through one unit of work, so a failure
at any point leaves nothing half-applied. Notifications are pushed to
realtime subscribers only after the commit succeeds.
"""

from collections.abc import Callable
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.exceptions import (
    DuplicateRoleRequestError,
    InvalidRoleError,
    ProfileNotFoundError,
    RoleRequestNotFoundError,
    RoleRequestNotPendingError,
    RoleReviewError,
)
from domain.entities.activity import Actions, EntityTypes
from domain.entities.notification import Notification, NotificationKind
from domain.entities.notification import NotificationTemplates as Templates
from domain.entities.profile import SELF_REQUESTABLE_ROLES, Role, parse_role
from domain.entities.role_request import RoleRequest, RoleRequestStatus
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.activity_service import ActivityService
from domain.services.authorization import require_role
from domain.services.notification_service import NotificationService

logger = structlog.get_logger()

SUBMITTED_MESSAGE = "Role request submitted successfully"
APPROVED_MESSAGE = "Role request approved successfully"
REJECTED_MESSAGE = "Role request rejected successfully"
ROLE_UPDATED_MESSAGE = "User role updated successfully"

APPROVE_FAILED = "Failed to approve role request"
REJECT_FAILED = "Failed to reject role request"
ROLE_UPDATE_FAILED = "Failed to update user role"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = str(exc.orig).lower() if exc.orig else ""
    return "unique" in orig or "duplicate" in orig


class RoleRequestService:
    """Service layer for the role request lifecycle."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        notification_service: NotificationService,
        activity_service: Optional["ActivityService"] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._notification = notification_service
        self._activity = activity_service

    # --- Submission ---

    async def submit_request(self, user_id: UUID, requested_role: str, reason: str) -> RoleRequest:
        """Open a pending request for ``requested_role``.

        Raises:
            InvalidRoleError: role is unknown or not self-requestable (admin).
            ProfileNotFoundError: the requester has not bootstrapped a profile.
            DuplicateRoleRequestError: a pending request already exists.
        """
        role = parse_role(requested_role)
        if role is None or role not in SELF_REQUESTABLE_ROLES:
            raise InvalidRoleError(requested_role)

        sent: list[Notification] = []
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))

            if await uow.role_requests.get_pending_for_user(user_id):
                raise DuplicateRoleRequestError()

            try:
                created = await uow.role_requests.create(
                    RoleRequest(user_id=user_id, requested_role=role, request_reason=reason)
                )
            except IntegrityError as exc:
                await uow.rollback()
                # A concurrent submission won the partial unique index.
                if _is_unique_violation(exc):
                    raise DuplicateRoleRequestError() from exc
                raise

            sent.append(
                await self._notification.notify(
                    uow,
                    user_id=user_id,
                    title=Templates.REQUEST_SUBMITTED_TITLE,
                    message=Templates.REQUEST_SUBMITTED.format(role=role.value),
                )
            )

            for admin_id in await uow.profiles.list_ids_by_role(Role.ADMIN):
                if admin_id == user_id:
                    continue
                sent.append(
                    await self._notification.notify(
                        uow,
                        user_id=admin_id,
                        title=Templates.NEW_REQUEST_TITLE,
                        message=Templates.NEW_REQUEST.format(
                            name=profile.display_name, role=role.value
                        ),
                        action_url=Templates.ADMIN_REVIEW_URL,
                    )
                )

            if self._activity:
                await self._activity.log(
                    uow,
                    actor_id=user_id,
                    action=Actions.ROLE_REQUEST_SUBMITTED,
                    entity_type=EntityTypes.ROLE_REQUEST,
                    entity_id=created.id,
                    metadata={"requested_role": role.value},
                )

            await uow.commit()

        logger.info(
            "role_request_submitted",
            request_id=str(created.id),
            user_id=str(user_id),
            requested_role=role.value,
        )
        await self._notification.publish(sent)
        return created

    # --- Review ---

    async def approve_request(self, actor_id: UUID, request_id: UUID) -> RoleRequest:
        """Approve a pending request and grant the requested role.

        Raises:
            AuthorizationError: actor is not an admin (checked fresh).
            RoleRequestNotFoundError: unknown request id.
            RoleRequestNotPendingError: request already reviewed.
            RoleReviewError: a storage step failed; nothing was applied.
        """
        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            request = await self._load_pending(uow, request_id)
            request.approve(actor_id)

            try:
                await self._write_transition(uow, request)
                if not await uow.profiles.set_role(request.user_id, request.requested_role):
                    raise RoleReviewError(ROLE_UPDATE_FAILED, str(request_id))

                notification = await self._notification.notify(
                    uow,
                    user_id=request.user_id,
                    title=Templates.REQUEST_APPROVED_TITLE,
                    message=Templates.REQUEST_APPROVED.format(role=request.requested_role.value),
                    type=NotificationKind.SUCCESS,
                )

                if self._activity:
                    await self._activity.log(
                        uow,
                        actor_id=actor_id,
                        action=Actions.ROLE_REQUEST_APPROVED,
                        entity_type=EntityTypes.ROLE_REQUEST,
                        entity_id=request.id,
                        metadata={
                            "user_id": str(request.user_id),
                            "granted_role": request.requested_role.value,
                        },
                    )

                await uow.commit()
            except SQLAlchemyError as exc:
                await uow.rollback()
                logger.error(
                    "role_request_review_failed",
                    request_id=str(request_id),
                    decision=RoleRequestStatus.APPROVED.value,
                    error=str(exc),
                )
                raise RoleReviewError(APPROVE_FAILED, str(request_id)) from exc

        logger.info(
            "role_request_approved",
            request_id=str(request_id),
            reviewer_id=str(actor_id),
            user_id=str(request.user_id),
            granted_role=request.requested_role.value,
        )
        await self._notification.publish([notification])
        return request

    async def reject_request(
        self, actor_id: UUID, request_id: UUID, admin_notes: str = ""
    ) -> RoleRequest:
        """Reject a pending request. The requester's role is untouched.

        Notes are stored exactly as given, empty included.
        """
        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            request = await self._load_pending(uow, request_id)
            request.reject(actor_id, admin_notes)

            try:
                await self._write_transition(uow, request)

                notification = await self._notification.notify(
                    uow,
                    user_id=request.user_id,
                    title=Templates.REQUEST_REJECTED_TITLE,
                    message=Templates.REQUEST_REJECTED.format(
                        role=request.requested_role.value,
                        reason=admin_notes or Templates.NO_REASON,
                    ),
                    type=NotificationKind.WARNING,
                )

                if self._activity:
                    await self._activity.log(
                        uow,
                        actor_id=actor_id,
                        action=Actions.ROLE_REQUEST_REJECTED,
                        entity_type=EntityTypes.ROLE_REQUEST,
                        entity_id=request.id,
                        metadata={"user_id": str(request.user_id)},
                    )

                await uow.commit()
            except SQLAlchemyError as exc:
                await uow.rollback()
                logger.error(
                    "role_request_review_failed",
                    request_id=str(request_id),
                    decision=RoleRequestStatus.REJECTED.value,
                    error=str(exc),
                )
                raise RoleReviewError(REJECT_FAILED, str(request_id)) from exc

        logger.info(
            "role_request_rejected",
            request_id=str(request_id),
            reviewer_id=str(actor_id),
            user_id=str(request.user_id),
        )
        await self._notification.publish([notification])
        return request

    async def _load_pending(self, uow: IUnitOfWork, request_id: UUID) -> RoleRequest:
        request = await uow.role_requests.get(request_id)
        if not request:
            raise RoleRequestNotFoundError(str(request_id))
        if not request.is_pending:
            raise RoleRequestNotPendingError(str(request_id), request.status.value)
        return request

    async def _write_transition(self, uow: IUnitOfWork, request: RoleRequest) -> None:
        # Another admin may have reviewed the row since it was read.
        if not await uow.role_requests.transition(request):
            raise RoleRequestNotPendingError(str(request.id), "reviewed")

    # --- Direct role administration ---

    async def update_user_role(self, actor_id: UUID, user_id: UUID, role: str) -> None:
        """Set a user's role directly (admin user management).

        Unlike a request, any role may be granted here, admin included.
        """
        new_role = parse_role(role)
        if new_role is None:
            raise InvalidRoleError(role)

        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            target = await uow.profiles.get(user_id)
            if not target:
                raise ProfileNotFoundError(str(user_id))

            try:
                await uow.profiles.set_role(user_id, new_role)
                notification = await self._notification.notify(
                    uow,
                    user_id=user_id,
                    title=Templates.ROLE_UPDATED_TITLE,
                    message=Templates.ROLE_UPDATED.format(role=new_role.value),
                )
                if self._activity:
                    await self._activity.log(
                        uow,
                        actor_id=actor_id,
                        action=Actions.PROFILE_ROLE_CHANGED,
                        entity_type=EntityTypes.PROFILE,
                        entity_id=user_id,
                        metadata={"old_role": target.role.value, "new_role": new_role.value},
                    )
                await uow.commit()
            except SQLAlchemyError as exc:
                await uow.rollback()
                logger.error("role_update_failed", user_id=str(user_id), error=str(exc))
                raise RoleReviewError(ROLE_UPDATE_FAILED, str(user_id)) from exc

        logger.info(
            "user_role_updated",
            user_id=str(user_id),
            actor_id=str(actor_id),
            old_role=target.role.value,
            new_role=new_role.value,
        )
        await self._notification.publish([notification])

    # --- Reads ---

    async def list_requests(
        self,
        actor_id: UUID,
        status: RoleRequestStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[RoleRequest]:
        """Admin review queue, newest first."""
        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            return await uow.role_requests.get_all(status=status, limit=limit, offset=offset)

    async def list_my_requests(self, user_id: UUID) -> list[RoleRequest]:
        async with self._uow_factory() as uow:
            return await uow.role_requests.list_for_user(user_id)

    async def has_pending_request(self, user_id: UUID) -> bool:
        async with self._uow_factory() as uow:
            return await uow.role_requests.get_pending_for_user(user_id) is not None
