"""Pydantic schemas for RoleRequest API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.profile import Role
from domain.entities.role_request import RoleRequestStatus


class RoleRequestCreate(BaseModel):
    """Role submission. ``role`` is validated by the service so the error
    body matches the other domain errors ("Invalid role")."""

    role: str = Field(..., max_length=20)
    reason: str = Field("", max_length=2000)


class RoleRequestReject(BaseModel):
    admin_notes: str = Field("", max_length=2000)


class RoleRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    requested_role: Role
    request_reason: str
    status: RoleRequestStatus
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    admin_notes: str | None = None
    created_at: datetime


class RoleRequestListResponse(BaseModel):
    data: list[RoleRequestResponse]
