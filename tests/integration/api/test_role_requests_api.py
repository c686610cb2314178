"""Integration tests for the role request lifecycle."""

from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from domain.entities.identity import Identity
from infrastructure.database.models import (
    ActivityLogModel,
    NotificationModel,
    ProfileModel,
    RoleRequestModel,
)


async def _notifications_for(session_factory, user_id: UUID) -> list[NotificationModel]:
    async with session_factory() as session:
        result = await session.scalars(
            select(NotificationModel)
            .where(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.created_at)
        )
        return list(result.all())


async def _pending_request_id(session_factory, user_id: UUID) -> UUID:
    async with session_factory() as session:
        request = await session.scalar(
            select(RoleRequestModel).where(
                RoleRequestModel.user_id == user_id,
                RoleRequestModel.status == "pending",
            )
        )
    assert request is not None
    return request.id


@pytest.fixture
async def member(seed_profile, headers_for) -> tuple[UUID, dict[str, str]]:
    user_id = await seed_profile(role="member", email="grace@uni.edu", full_name="Grace Hopper")
    return user_id, headers_for(Identity(id=user_id, email="grace@uni.edu"))


class TestSubmitRoleRequest:
    @pytest.mark.asyncio
    async def test_submit_notifies_requester_and_admins(
        self, client: AsyncClient, member, admin_headers, session_factory
    ) -> None:
        user_id, headers = member

        response = await client.post(
            "/api/v1/role-requests",
            json={"role": "alumni", "reason": "Graduated in 2024"},
            headers=headers,
        )

        assert response.status_code == 201
        assert response.json() == {"success": "Role request submitted successfully"}

        mine = await _notifications_for(session_factory, user_id)
        assert len(mine) == 1
        assert mine[0].title == "Role Request Submitted"
        assert (
            mine[0].message
            == "Your request to become a alumni has been submitted and is pending approval."
        )

        async with session_factory() as session:
            admin = await session.scalar(
                select(ProfileModel).where(ProfileModel.role == "admin")
            )
        assert admin is not None
        theirs = await _notifications_for(session_factory, admin.id)
        assert len(theirs) == 1
        assert theirs[0].title == "New Role Request"
        assert theirs[0].message == "Grace Hopper has requested to become alumni"
        assert theirs[0].action_url == "/dashboard/admin/users"

    @pytest.mark.asyncio
    async def test_duplicate_pending_request(self, client: AsyncClient, member) -> None:
        _, headers = member
        first = await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)
        second = await client.post(
            "/api/v1/role-requests", json={"role": "alumni"}, headers=headers
        )

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error_code"] == "DUPLICATE_ROLE_REQUEST"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["admin", "president", ""])
    async def test_invalid_role(self, client: AsyncClient, member, role: str) -> None:
        _, headers = member

        response = await client.post("/api/v1/role-requests", json={"role": role}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid role"

    @pytest.mark.asyncio
    async def test_requires_profile(self, authenticated_client: AsyncClient) -> None:
        response = await authenticated_client.post(
            "/api/v1/role-requests", json={"role": "alumni"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/role-requests", json={"role": "alumni"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_list_my_requests(self, client: AsyncClient, member) -> None:
        _, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)

        response = await client.get("/api/v1/role-requests/me", headers=headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["status"] == "pending"
        assert data[0]["requested_role"] == "alumni"


class TestReviewRoleRequest:
    @pytest.mark.asyncio
    async def test_approve_grants_role(
        self, client: AsyncClient, member, admin_headers, session_factory
    ) -> None:
        user_id, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)
        request_id = await _pending_request_id(session_factory, user_id)

        response = await client.post(
            f"/api/v1/admin/role-requests/{request_id}/approve", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json() == {"success": "Role request approved successfully"}

        async with session_factory() as session:
            profile = await session.get(ProfileModel, user_id)
            request = await session.get(RoleRequestModel, request_id)
            audit = await session.scalar(
                select(ActivityLogModel).where(ActivityLogModel.entity_id == request_id)
                .where(ActivityLogModel.action == "role_request.approved")
            )
        assert profile is not None and profile.role == "alumni"
        assert request is not None
        assert request.status == "approved"
        assert request.reviewed_by is not None
        assert request.reviewed_at is not None
        assert audit is not None

        titles = [n.title for n in await _notifications_for(session_factory, user_id)]
        assert titles == ["Role Request Submitted", "Role Request Approved"]

    @pytest.mark.asyncio
    async def test_reject_keeps_role_and_stores_notes(
        self, client: AsyncClient, member, admin_headers, session_factory
    ) -> None:
        user_id, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)
        request_id = await _pending_request_id(session_factory, user_id)

        response = await client.post(
            f"/api/v1/admin/role-requests/{request_id}/reject",
            json={"admin_notes": "Please add your graduation year"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": "Role request rejected successfully"}

        async with session_factory() as session:
            profile = await session.get(ProfileModel, user_id)
            request = await session.get(RoleRequestModel, request_id)
        assert profile is not None and profile.role == "member"
        assert request is not None
        assert request.status == "rejected"
        assert request.admin_notes == "Please add your graduation year"

        notifications = await _notifications_for(session_factory, user_id)
        assert notifications[-1].type == "warning"
        assert notifications[-1].message == (
            "Your request to become a alumni has been rejected. "
            "Reason: Please add your graduation year"
        )

    @pytest.mark.asyncio
    async def test_reject_without_notes(
        self, client: AsyncClient, member, admin_headers, session_factory
    ) -> None:
        user_id, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)
        request_id = await _pending_request_id(session_factory, user_id)

        response = await client.post(
            f"/api/v1/admin/role-requests/{request_id}/reject", headers=admin_headers
        )

        assert response.status_code == 200
        notifications = await _notifications_for(session_factory, user_id)
        assert notifications[-1].message.endswith("Reason: No reason provided")

    @pytest.mark.asyncio
    async def test_second_review_conflicts(
        self, client: AsyncClient, member, admin_headers, session_factory
    ) -> None:
        user_id, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)
        request_id = await _pending_request_id(session_factory, user_id)
        await client.post(f"/api/v1/admin/role-requests/{request_id}/approve", headers=admin_headers)

        response = await client.post(
            f"/api/v1/admin/role-requests/{request_id}/reject", headers=admin_headers
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "ROLE_REQUEST_NOT_PENDING"
        async with session_factory() as session:
            profile = await session.get(ProfileModel, user_id)
        assert profile is not None and profile.role == "alumni"

    @pytest.mark.asyncio
    async def test_new_request_allowed_after_review(
        self, client: AsyncClient, member, admin_headers, session_factory
    ) -> None:
        user_id, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)
        request_id = await _pending_request_id(session_factory, user_id)
        await client.post(f"/api/v1/admin/role-requests/{request_id}/reject", headers=admin_headers)

        response = await client.post(
            "/api/v1/role-requests", json={"role": "alumni"}, headers=headers
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_unknown_request(self, client: AsyncClient, admin_headers) -> None:
        response = await client.post(
            f"/api/v1/admin/role-requests/{uuid4()}/approve", headers=admin_headers
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Request not found"

    @pytest.mark.asyncio
    async def test_member_cannot_review(
        self, client: AsyncClient, member, session_factory
    ) -> None:
        user_id, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)
        request_id = await _pending_request_id(session_factory, user_id)

        response = await client.post(
            f"/api/v1/admin/role-requests/{request_id}/approve", headers=headers
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Unauthorized"
        async with session_factory() as session:
            request = await session.get(RoleRequestModel, request_id)
        assert request is not None and request.status == "pending"

    @pytest.mark.asyncio
    async def test_review_queue(self, client: AsyncClient, member, admin_headers) -> None:
        _, headers = member
        await client.post("/api/v1/role-requests", json={"role": "alumni"}, headers=headers)

        pending = await client.get(
            "/api/v1/admin/role-requests", params={"status": "pending"}, headers=admin_headers
        )
        approved = await client.get(
            "/api/v1/admin/role-requests", params={"status": "approved"}, headers=admin_headers
        )

        assert len(pending.json()["data"]) == 1
        assert approved.json()["data"] == []
