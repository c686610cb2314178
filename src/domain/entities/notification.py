"""Notification domain entity and message templates."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class NotificationKind(StrEnum):
    """Visual severity of a notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class NotificationTemplates:
    """Titles and message formats for workflow notifications."""

    REQUEST_SUBMITTED_TITLE = "Role Request Submitted"
    REQUEST_SUBMITTED = (
        "Your request to become a {role} has been submitted and is pending approval."
    )

    NEW_REQUEST_TITLE = "New Role Request"
    NEW_REQUEST = "{name} has requested to become {role}"

    REQUEST_APPROVED_TITLE = "Role Request Approved"
    REQUEST_APPROVED = "Your request to become a {role} has been approved."

    REQUEST_REJECTED_TITLE = "Role Request Rejected"
    REQUEST_REJECTED = "Your request to become a {role} has been rejected. Reason: {reason}"
    NO_REASON = "No reason provided"

    ROLE_UPDATED_TITLE = "Role Updated"
    ROLE_UPDATED = "Your role has been updated to {role}."

    ADMIN_REVIEW_URL = "/dashboard/admin/users"


@dataclass
class Notification:
    """A message addressed to exactly one user."""

    user_id: UUID
    title: str
    message: str
    type: NotificationKind = NotificationKind.INFO
    action_url: str | None = None
    id: UUID = field(default_factory=uuid4)
    is_read: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_payload(self) -> dict[str, object]:
        """Serializable shape pushed to realtime subscribers."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "action_url": self.action_url,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }
