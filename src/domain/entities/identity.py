"""Authenticated identity as issued by the hosted auth provider."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID


@dataclass
class Identity:
    """Represents a user extracted from an auth token."""

    id: UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    # Provider-side role claim ("authenticated"), unrelated to the club role.
    provider_role: Optional[str] = None
