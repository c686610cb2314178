"""Profile domain entity and club roles."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class Role(StrEnum):
    """Club roles stored on a profile."""

    MEMBER = "member"
    ADMIN = "admin"
    ALUMNI = "alumni"


# Roles a user may ask for through a role request. Admin is only ever
# granted by another admin through a direct role change.
SELF_REQUESTABLE_ROLES: frozenset[Role] = frozenset({Role.MEMBER, Role.ALUMNI})


def parse_role(value: str) -> Role | None:
    """Return the Role for ``value`` or None when it is not a known role."""
    try:
        return Role(value)
    except ValueError:
        return None


@dataclass
class Profile:
    """Domain entity for a club member's profile (one per auth identity)."""

    id: UUID = field(default_factory=uuid4)
    email: str = ""
    username: str = ""
    full_name: str = ""
    avatar_url: str = ""
    role: Role = Role.MEMBER
    points: int = 0
    projects_count: int = 0
    events_attended: int = 0
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def display_name(self) -> str:
        """Name used in admin-facing messages."""
        return self.full_name or self.username or self.email
