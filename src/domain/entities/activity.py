"""Activity log domain entity and action constants."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

# --- Activity Action Constants ---
# Format: {entity_type}.{action}


class Actions:
    """Activity action constants using dot-notation."""

    # Profile actions
    PROFILE_CREATED = "profile.created"
    PROFILE_UPDATED = "profile.updated"
    PROFILE_ROLE_CHANGED = "profile.role_changed"

    # Role request actions
    ROLE_REQUEST_SUBMITTED = "role_request.submitted"
    ROLE_REQUEST_APPROVED = "role_request.approved"
    ROLE_REQUEST_REJECTED = "role_request.rejected"


class EntityTypes:
    PROFILE = "profile"
    ROLE_REQUEST = "role_request"


@dataclass
class ActivityLog:
    """Domain entity for an audit log entry."""

    actor_id: UUID
    action: str
    entity_type: str
    entity_id: UUID
    id: UUID = field(default_factory=uuid4)
    metadata: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
