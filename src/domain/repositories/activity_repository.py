"""Audit trail repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.activity import ActivityLog


class IActivityRepository(Protocol):
    """Append-only store for audit entries."""

    async def create(self, activity: ActivityLog) -> ActivityLog: ...

    async def list_recent(
        self,
        limit: int = 50,
        offset: int = 0,
        performed_by: UUID | None = None,
        action: str | None = None,
    ) -> list[ActivityLog]:
        """Newest entries first, optionally filtered by actor and action."""
        ...

    async def get_for_entity(
        self,
        entity_type: str,
        entity_id: UUID,
        limit: int = 50,
    ) -> list[ActivityLog]:
        """History of one profile or role request, newest first."""
        ...
