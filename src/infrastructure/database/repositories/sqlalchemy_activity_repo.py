"""SQLAlchemy implementation of the audit trail repository."""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.activity import ActivityLog
from infrastructure.database.models import ActivityLogModel


class SQLAlchemyActivityRepository:
    """Append-only store for ActivityLog entries. Rows are never updated."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, activity: ActivityLog) -> ActivityLog:
        self._session.add(
            ActivityLogModel(
                id=activity.id,
                actor_id=activity.actor_id,
                action=activity.action,
                entity_type=activity.entity_type,
                entity_id=activity.entity_id,
                metadata_=activity.metadata,
                created_at=activity.created_at,
            )
        )
        await self._session.flush()
        return activity

    async def list_recent(
        self,
        limit: int = 50,
        offset: int = 0,
        performed_by: UUID | None = None,
        action: str | None = None,
    ) -> list[ActivityLog]:
        """Club-wide feed, newest first, optionally narrowed to one actor or action."""
        stmt = self._newest_first()
        if performed_by is not None:
            stmt = stmt.where(ActivityLogModel.actor_id == performed_by)
        if action is not None:
            stmt = stmt.where(ActivityLogModel.action == action)
        return await self._fetch(stmt.offset(offset).limit(limit))

    async def get_for_entity(
        self,
        entity_type: str,
        entity_id: UUID,
        limit: int = 50,
    ) -> list[ActivityLog]:
        stmt = self._newest_first().where(
            ActivityLogModel.entity_type == entity_type,
            ActivityLogModel.entity_id == entity_id,
        )
        return await self._fetch(stmt.limit(limit))

    @staticmethod
    def _newest_first() -> Select[tuple[ActivityLogModel]]:
        return select(ActivityLogModel).order_by(ActivityLogModel.created_at.desc())

    async def _fetch(self, stmt: Select[tuple[ActivityLogModel]]) -> list[ActivityLog]:
        result = await self._session.scalars(stmt)
        return [
            ActivityLog(
                id=row.id,
                actor_id=row.actor_id,
                action=row.action,
                entity_type=row.entity_type,
                entity_id=row.entity_id,
                metadata=row.metadata_,
                created_at=row.created_at,
            )
            for row in result
        ]
