"""SQLAlchemy implementation of Profile repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile, Role
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: UUID) -> Profile | None:
        """Get a profile by identity id."""
        model = await self._session.get(ProfileModel, user_id)
        return self._to_entity(model) if model else None

    async def exists(self, user_id: UUID) -> bool:
        """Check whether a profile row exists for the identity."""
        stmt = select(ProfileModel.id).where(ProfileModel.id == user_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_role(self, user_id: UUID) -> Role | None:
        """Read only the role column."""
        stmt = select(ProfileModel.role).where(ProfileModel.id == user_id)
        result = await self._session.execute(stmt)
        role = result.scalar_one_or_none()
        return Role(role) if role else None

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile; flush so a duplicate id surfaces as IntegrityError here."""
        model = self._to_model(profile)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, profile: Profile) -> Profile:
        """Persist editable profile fields."""
        model = await self._session.get(ProfileModel, profile.id)
        if model:
            model.username = profile.username
            model.full_name = profile.full_name
            model.avatar_url = profile.avatar_url
            model.updated_at = profile.updated_at
            await self._session.flush()
            await self._session.refresh(model)
            return self._to_entity(model)
        return profile

    async def set_role(self, user_id: UUID, role: Role) -> bool:
        """Set the role of a profile. Returns False when no row matched."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == user_id)
            .values(role=role.value, updated_at=datetime.utcnow())
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0  # type: ignore[attr-defined,no-any-return]

    async def get_all(
        self,
        role: Role | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Profile]:
        """List profiles, newest first, optionally filtered by role."""
        stmt = select(ProfileModel)
        if role is not None:
            stmt = stmt.where(ProfileModel.role == role.value)
        stmt = stmt.order_by(ProfileModel.created_at.desc()).offset(offset).limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def list_ids_by_role(self, role: Role) -> list[UUID]:
        """Get the ids of every profile holding ``role``."""
        stmt = select(ProfileModel.id).where(ProfileModel.role == role.value)
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def count_by_role(self) -> dict[Role, int]:
        """Count profiles per role (roles with no profiles report 0)."""
        stmt = select(ProfileModel.role, func.count()).group_by(ProfileModel.role)
        result = await self._session.execute(stmt)
        counts = {role: 0 for role in Role}
        for role, count in result.all():
            counts[Role(role)] = count
        return counts

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            email=model.email,
            username=model.username,
            full_name=model.full_name,
            avatar_url=model.avatar_url,
            role=Role(model.role),
            points=model.points,
            projects_count=model.projects_count,
            events_attended=model.events_attended,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            email=entity.email,
            username=entity.username,
            full_name=entity.full_name,
            avatar_url=entity.avatar_url,
            role=entity.role.value,
            points=entity.points,
            projects_count=entity.projects_count,
            events_attended=entity.events_attended,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
