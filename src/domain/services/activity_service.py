"""Audit trail: who changed which profile or role request, and when."""

from collections.abc import Callable
from typing import Any
from uuid import UUID

from domain.entities.activity import ActivityLog
from domain.entities.profile import Role
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.authorization import require_role


class ActivityService:
    """Writes audit entries inside callers' transactions and serves the admin feed."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def log(
        self,
        uow: IUnitOfWork,
        actor_id: UUID,
        action: str,
        entity_type: str,
        entity_id: UUID,
        metadata: dict[str, Any] | None = None,
    ) -> ActivityLog:
        """Record an entry in the caller's unit of work.

        Nothing is committed here; the entry lands together with the change
        it describes, or not at all.
        """
        return await uow.activities.create(
            ActivityLog(
                actor_id=actor_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                metadata=metadata,
            )
        )

    async def get_recent_activity(
        self,
        actor_id: UUID,
        limit: int = 50,
        offset: int = 0,
        performed_by: UUID | None = None,
        action: str | None = None,
    ) -> list[ActivityLog]:
        """Club-wide feed for admins."""
        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            return await uow.activities.list_recent(
                limit=limit, offset=offset, performed_by=performed_by, action=action
            )

    async def get_entity_history(
        self,
        actor_id: UUID,
        entity_type: str,
        entity_id: UUID,
        limit: int = 50,
    ) -> list[ActivityLog]:
        async with self._uow_factory() as uow:
            await require_role(uow, actor_id, Role.ADMIN)
            return await uow.activities.get_for_entity(entity_type, entity_id, limit=limit)
