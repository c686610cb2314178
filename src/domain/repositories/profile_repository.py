"""Profile repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.profile import Profile, Role


class IProfileRepository(Protocol):
    """Repository interface for Profile entities."""

    async def get(self, user_id: UUID) -> Profile | None:
        """Get a profile by identity id."""
        ...

    async def exists(self, user_id: UUID) -> bool:
        """Check whether a profile row exists for the identity."""
        ...

    async def get_role(self, user_id: UUID) -> Role | None:
        """Read only the role column (fresh, never cached)."""
        ...

    async def create(self, profile: Profile) -> Profile:
        """Insert a new profile. Raises IntegrityError on duplicate id."""
        ...

    async def update(self, profile: Profile) -> Profile:
        """Persist editable profile fields."""
        ...

    async def set_role(self, user_id: UUID, role: Role) -> bool:
        """Set the role of a profile. Returns False when no row matched."""
        ...

    async def get_all(
        self,
        role: Role | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Profile]:
        """List profiles, newest first, optionally filtered by role."""
        ...

    async def list_ids_by_role(self, role: Role) -> list[UUID]:
        """Get the ids of every profile holding ``role``."""
        ...

    async def count_by_role(self) -> dict[Role, int]:
        """Count profiles per role."""
        ...
