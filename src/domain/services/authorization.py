"""Role-based authorization policy shared by pages, the edge gate and actions.

Every consumer funnels through :func:`evaluate`, so a route guarded at the
edge, the page that renders it and the action it posts to can never
disagree about who is allowed in.
"""

from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import quote
from uuid import UUID

from core.exceptions import AuthorizationError
from domain.entities.profile import Profile, Role
from domain.repositories.unit_of_work import IUnitOfWork

SIGN_IN_PATH = "/auth"
PROFILE_SETUP_PATH = "/auth/setup"
DEFAULT_DASHBOARD = "/dashboard"
PROTECTED_PREFIX = "/dashboard"
ADMIN_PREFIX = "/dashboard/admin"

_ROLE_DASHBOARDS: dict[Role, str] = {
    Role.ADMIN: "/dashboard/admin",
    Role.ALUMNI: "/dashboard/alumni",
    Role.MEMBER: "/dashboard/member",
}


@dataclass(frozen=True, slots=True)
class Allow:
    """The caller may proceed."""


@dataclass(frozen=True, slots=True)
class RedirectTo:
    """The caller must be sent elsewhere."""

    location: str


Decision = Allow | RedirectTo


def sign_in_redirect(return_to: str) -> RedirectTo:
    """Redirect to sign-in, remembering where the user was headed."""
    return RedirectTo(f"{SIGN_IN_PATH}?redirectTo={quote(return_to, safe='/')}")


def evaluate(
    user_id: UUID | None,
    role: Role | None,
    return_to: str,
    required_role: Role | None = None,
) -> Decision:
    """Decide whether a caller may reach a resource.

    Rules, in order:
      1. no session -> sign-in redirect carrying ``return_to``
      2. no role required -> allow
      3. role matches exactly -> allow
      4. otherwise -> default dashboard

    A role of None (signed in, no profile yet) only passes rule 2.
    """
    if user_id is None:
        return sign_in_redirect(return_to)
    if required_role is None:
        return Allow()
    if role == required_role:
        return Allow()
    return RedirectTo(DEFAULT_DASHBOARD)


def dashboard_path_for(role: Role | None) -> str:
    """Landing page for a role; unknown or missing roles get the member view."""
    if role is None:
        return _ROLE_DASHBOARDS[Role.MEMBER]
    return _ROLE_DASHBOARDS.get(role, _ROLE_DASHBOARDS[Role.MEMBER])


def required_role_for_path(path: str) -> Role | None:
    """Role a protected path demands, or None when any session will do."""
    if path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/"):
        return Role.ADMIN
    return None


async def require_role(uow: IUnitOfWork, user_id: UUID, required_role: Role) -> Profile:
    """Action-level guard: re-read the actor's profile and demand ``required_role``.

    The role is read inside the caller's unit of work so the check and the
    mutation it protects see the same data.

    Raises:
        AuthorizationError: the actor has no profile or the wrong role.
    """
    profile = await uow.profiles.get(user_id)
    role = profile.role if profile else None
    decision = evaluate(user_id, role, return_to=DEFAULT_DASHBOARD, required_role=required_role)
    if isinstance(decision, RedirectTo) or profile is None:
        raise AuthorizationError("Unauthorized")
    return profile


class AuthorizationGate:
    """Resolve a caller's role and apply :func:`evaluate` (page and edge use)."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def role_of(self, user_id: UUID) -> Role | None:
        async with self._uow_factory() as uow:
            return await uow.profiles.get_role(user_id)

    async def authorize(
        self,
        user_id: UUID | None,
        return_to: str,
        required_role: Role | None = None,
    ) -> Decision:
        """Fresh role lookup followed by the shared policy."""
        if user_id is None or required_role is None:
            return evaluate(user_id, None, return_to, required_role)
        role = await self.role_of(user_id)
        return evaluate(user_id, role, return_to, required_role)
