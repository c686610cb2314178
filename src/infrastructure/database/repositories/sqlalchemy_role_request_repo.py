"""SQLAlchemy implementation of RoleRequest repository."""

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Role
from domain.entities.role_request import RoleRequest, RoleRequestStatus
from infrastructure.database.models import RoleRequestModel


class SQLAlchemyRoleRequestRepository:
    """SQLAlchemy implementation of IRoleRequestRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, request_id: UUID) -> RoleRequest | None:
        """Get a role request by ID."""
        model = await self._session.get(RoleRequestModel, request_id)
        return self._to_entity(model) if model else None

    async def get_pending_for_user(self, user_id: UUID) -> RoleRequest | None:
        """Get the user's pending request, if any."""
        stmt = select(RoleRequestModel).where(
            RoleRequestModel.user_id == user_id,
            RoleRequestModel.status == RoleRequestStatus.PENDING.value,
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def create(self, request: RoleRequest) -> RoleRequest:
        """Insert a request; the pending-per-user index raises IntegrityError on flush."""
        model = self._to_model(request)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def transition(self, request: RoleRequest) -> bool:
        """Conditionally write the reviewed state (compare-and-set on status)."""
        stmt = (
            update(RoleRequestModel)
            .where(
                RoleRequestModel.id == request.id,
                RoleRequestModel.status == RoleRequestStatus.PENDING.value,
            )
            .values(
                status=request.status.value,
                reviewed_by=request.reviewed_by,
                reviewed_at=request.reviewed_at,
                admin_notes=request.admin_notes,
                updated_at=request.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0  # type: ignore[attr-defined,no-any-return]

    async def get_all(
        self,
        status: RoleRequestStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[RoleRequest]:
        """List requests newest first, optionally filtered by status."""
        stmt = select(RoleRequestModel)
        if status is not None:
            stmt = stmt.where(RoleRequestModel.status == status.value)
        stmt = stmt.order_by(RoleRequestModel.created_at.desc()).offset(offset).limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def list_for_user(self, user_id: UUID) -> list[RoleRequest]:
        """Get a user's requests, newest first."""
        stmt = (
            select(RoleRequestModel)
            .where(RoleRequestModel.user_id == user_id)
            .order_by(RoleRequestModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    async def count_pending(self) -> int:
        """Count requests awaiting review."""
        stmt = select(func.count()).where(
            RoleRequestModel.status == RoleRequestStatus.PENDING.value
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    def _to_entity(self, model: RoleRequestModel) -> RoleRequest:
        """Convert ORM model to domain entity."""
        return RoleRequest(
            id=model.id,
            user_id=model.user_id,
            requested_role=Role(model.requested_role),
            request_reason=model.request_reason,
            status=RoleRequestStatus(model.status),
            reviewed_by=model.reviewed_by,
            reviewed_at=model.reviewed_at,
            admin_notes=model.admin_notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: RoleRequest) -> RoleRequestModel:
        """Convert domain entity to ORM model."""
        return RoleRequestModel(
            id=entity.id,
            user_id=entity.user_id,
            requested_role=entity.requested_role.value,
            request_reason=entity.request_reason,
            status=entity.status.value,
            reviewed_by=entity.reviewed_by,
            reviewed_at=entity.reviewed_at,
            admin_notes=entity.admin_notes,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
