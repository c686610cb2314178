"""Profile service: lazy bootstrap on first sign-in plus profile reads/edits."""

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.exceptions import AuthenticationError, ProfileCreationError, ProfileNotFoundError
from domain.entities.activity import Actions, EntityTypes
from domain.entities.identity import Identity
from domain.entities.profile import Profile, Role
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.activity_service import ActivityService
from domain.services.authorization import require_role

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class AdminOverview:
    """Headline numbers for the admin dashboard."""

    role_counts: dict[Role, int]
    pending_requests: int

    @property
    def total_profiles(self) -> int:
        return sum(self.role_counts.values())


def build_default_profile(identity: Identity) -> Profile:
    """Default profile for a first-time identity.

    Username is the local part of the email, or ``user_<epoch millis>`` when
    the provider gave no email.
    """
    local_part = identity.email.split("@")[0] if identity.email else ""
    username = local_part or f"user_{int(time.time() * 1000)}"
    return Profile(
        id=identity.id,
        email=identity.email or "",
        username=username,
        full_name=identity.full_name or "",
        avatar_url=identity.avatar_url or "",
        role=Role.MEMBER,
    )


class ProfileService:
    """Service layer for Profile business logic."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        activity_service: Optional["ActivityService"] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._activity = activity_service

    async def get_or_create_profile(self, identity: Identity | None) -> Profile:
        """Return the caller's profile, creating it on first contact.

        Concurrent first requests race on the primary key; the loser rolls
        back and returns the winner's row.

        Raises:
            AuthenticationError: no identity.
            ProfileCreationError: the insert failed for any other reason.
        """
        if identity is None:
            raise AuthenticationError()

        async with self._uow_factory() as uow:
            existing = await uow.profiles.get(identity.id)
            if existing:
                return existing

            profile = build_default_profile(identity)
            try:
                created = await uow.profiles.create(profile)
                if self._activity:
                    await self._activity.log(
                        uow,
                        actor_id=identity.id,
                        action=Actions.PROFILE_CREATED,
                        entity_type=EntityTypes.PROFILE,
                        entity_id=identity.id,
                        metadata={"username": created.username},
                    )
                await uow.commit()
                logger.info("profile_created", user_id=str(identity.id))
                return created
            except IntegrityError as exc:
                await uow.rollback()
                orig = str(exc.orig).lower() if exc.orig else ""
                if "unique" in orig or "duplicate" in orig:
                    winner = await uow.profiles.get(identity.id)
                    if winner:
                        logger.info("profile_creation_race_resolved", user_id=str(identity.id))
                        return winner
                logger.error("profile_creation_failed", user_id=str(identity.id), error=orig)
                raise ProfileCreationError() from exc
            except SQLAlchemyError as exc:
                await uow.rollback()
                logger.error("profile_creation_failed", user_id=str(identity.id), error=str(exc))
                raise ProfileCreationError() from exc

    async def profile_exists(self, user_id: UUID) -> bool:
        """Whether the identity has completed bootstrap."""
        async with self._uow_factory() as uow:
            return await uow.profiles.exists(user_id)

    async def get_role(self, user_id: UUID) -> Role | None:
        async with self._uow_factory() as uow:
            return await uow.profiles.get_role(user_id)

    async def get_profile(self, user_id: UUID) -> Profile:
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))
            return profile

    async def update_profile(
        self,
        user_id: UUID,
        username: str | None = None,
        full_name: str | None = None,
        avatar_url: str | None = None,
    ) -> Profile:
        """Edit the caller's own profile. The role is never editable here."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))

            changed: list[str] = []
            if username is not None and username != profile.username:
                profile.username = username
                changed.append("username")
            if full_name is not None and full_name != profile.full_name:
                profile.full_name = full_name
                changed.append("full_name")
            if avatar_url is not None and avatar_url != profile.avatar_url:
                profile.avatar_url = avatar_url
                changed.append("avatar_url")

            if not changed:
                return profile

            profile.updated_at = datetime.utcnow()
            updated = await uow.profiles.update(profile)

            if self._activity:
                await self._activity.log(
                    uow,
                    actor_id=user_id,
                    action=Actions.PROFILE_UPDATED,
                    entity_type=EntityTypes.PROFILE,
                    entity_id=user_id,
                    metadata={"fields": changed},
                )

            await uow.commit()
            return updated

    async def list_profiles(
        self,
        actor_id: UUID,
        role: Role | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Profile]:
        """Admin user listing."""
        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            return await uow.profiles.get_all(role=role, limit=limit, offset=offset)

    async def get_admin_overview(self, actor_id: UUID) -> AdminOverview:
        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            counts = await uow.profiles.count_by_role()
            pending = await uow.role_requests.count_pending()
            return AdminOverview(role_counts=counts, pending_requests=pending)
