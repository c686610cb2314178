"""Pydantic schemas for Profile API."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.profile import Role


class ProfileResponse(BaseModel):
    """Profile as returned to its owner and to admins."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    username: str
    full_name: str
    avatar_url: str
    role: Role
    points: int
    projects_count: int
    events_attended: int
    created_at: datetime
    updated_at: datetime


class ProfileListResponse(BaseModel):
    """Admin user listing."""

    data: list[ProfileResponse]
    meta: dict[str, int] = Field(default_factory=dict)


class ProfileUpdate(BaseModel):
    """Editable fields of one's own profile. The role is not among them."""

    username: str | None = Field(None, min_length=1, max_length=100)
    full_name: str | None = Field(None, max_length=255)
    avatar_url: str | None = Field(None, max_length=500)


class ProfileSetupRequest(BaseModel):
    """First-run profile setup, optionally asking for the alumni role."""

    full_name: str | None = Field(None, max_length=255)
    username: str | None = Field(None, min_length=1, max_length=100)
    requested_role: Literal["member", "alumni"] = "member"
    reason: str | None = Field(None, max_length=2000)


class ProfileSetupResponse(BaseModel):
    profile: ProfileResponse
    role_request_id: UUID | None = None
    redirect_to: str


class RoleUpdateRequest(BaseModel):
    """Admin direct role change. Unknown roles are rejected by the service."""

    role: str = Field(..., min_length=1, max_length=20)


class AdminOverviewResponse(BaseModel):
    total_profiles: int
    role_counts: dict[str, int]
    pending_requests: int
