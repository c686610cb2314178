"""Role request domain entity and its review state machine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from core.exceptions import RoleRequestNotPendingError
from domain.entities.profile import Role


class RoleRequestStatus(StrEnum):
    """Lifecycle states. Approved and rejected are terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class RoleRequest:
    """A user's request to be granted a different club role."""

    user_id: UUID
    requested_role: Role
    request_reason: str = ""
    id: UUID = field(default_factory=uuid4)
    status: RoleRequestStatus = RoleRequestStatus.PENDING
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    admin_notes: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_pending(self) -> bool:
        return self.status == RoleRequestStatus.PENDING

    def approve(self, reviewer_id: UUID, now: datetime | None = None) -> None:
        """Move pending -> approved, stamping the reviewer."""
        self._review(RoleRequestStatus.APPROVED, reviewer_id, now)

    def reject(self, reviewer_id: UUID, admin_notes: str = "", now: datetime | None = None) -> None:
        """Move pending -> rejected, stamping the reviewer and storing notes verbatim."""
        self._review(RoleRequestStatus.REJECTED, reviewer_id, now)
        self.admin_notes = admin_notes

    def _review(
        self, status: RoleRequestStatus, reviewer_id: UUID, now: datetime | None
    ) -> None:
        if not self.is_pending:
            raise RoleRequestNotPendingError(str(self.id), self.status.value)
        stamp = now or datetime.utcnow()
        self.status = status
        self.reviewed_by = reviewer_id
        self.reviewed_at = stamp
        self.updated_at = stamp
