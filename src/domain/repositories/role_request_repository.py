"""Role request repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.role_request import RoleRequest, RoleRequestStatus


class IRoleRequestRepository(Protocol):
    """Repository interface for RoleRequest entities."""

    async def get(self, request_id: UUID) -> RoleRequest | None:
        """Get a role request by ID."""
        ...

    async def get_pending_for_user(self, user_id: UUID) -> RoleRequest | None:
        """Get the user's pending request, if any."""
        ...

    async def create(self, request: RoleRequest) -> RoleRequest:
        """Insert a request. Raises IntegrityError if the user already has a pending one."""
        ...

    async def transition(self, request: RoleRequest) -> bool:
        """Write the reviewed state only if the stored row is still pending.

        Returns False when another reviewer got there first.
        """
        ...

    async def get_all(
        self,
        status: RoleRequestStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[RoleRequest]:
        """List requests newest first, optionally filtered by status."""
        ...

    async def list_for_user(self, user_id: UUID) -> list[RoleRequest]:
        """Get a user's requests, newest first."""
        ...

    async def count_pending(self) -> int:
        """Count requests awaiting review."""
        ...
