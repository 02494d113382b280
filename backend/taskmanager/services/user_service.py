"""User Service — self-service profile, directory search and admin user management.

Invariants:
    - updateSelf changes only the email; the new email differs from the current
      one and is globally unique
    - search never returns the principal and exposes only username/email
    - ADMIN accounts are never deleted; deleting a user removes their collaborator
      rows and their owned projects (full cascade) in one transaction
    - A user who is the responsible collaborator of a task outside their own
      projects is not deleted; the task owner promotes a replacement first
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.domain_types import (
    AuthenticatedPrincipal, ResourceKind, Role,
)
from taskmanager.core.errors import (
    ConflictError, InvalidArgumentError, ResourceNotFoundError,
)
from taskmanager.core.patch_semantics import overlay_patch
from taskmanager.core.query_spec import build_query_spec, build_user_search_spec
from taskmanager.core.repository_protocols import Page
from taskmanager.infrastructure.repositories import (
    CollaborationRepository, ProjectRepository, UserRepository,
)
from taskmanager.models import Collaboration, User
from taskmanager.schemas.user import (
    UpdateUserRequest, UserResponse, UserSearchResponse,
)
from taskmanager.services.project_service import delete_projects_cascade

logger = logging.getLogger(__name__)

EMAIL_UNCHANGED = "New email must be different from current email."
EMAIL_TAKEN = "Email is already in use."
ADMIN_UNDELETABLE = "Admin accounts cannot be deleted."
RESPONSIBLE_ELSEWHERE = (
    "User is the responsible collaborator of a task in another user's project; "
    "assign another responsible first."
)
USER_NOT_FOUND = "User not found."


def _view(user: User, values: dict | None = None) -> UserResponse:
    values = values or {}
    return UserResponse(
        id=user.id,
        username=user.username,
        email=values.get("email", user.email),
        role=user.role,
        created_at=user.created_at,
    )


class UserService:
    """Profile and directory operations for authenticated users, plus admin tools."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)

    async def _load(self, user_id: int) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id, message=USER_NOT_FOUND)
        return user

    async def get_self(self, principal: AuthenticatedPrincipal) -> UserResponse:
        return _view(await self._load(principal.id))

    async def update_self(
        self, principal: AuthenticatedPrincipal, body: UpdateUserRequest,
    ) -> UserResponse:
        user = await self._load(principal.id)
        if body.email is not None:
            if body.email == user.email:
                raise InvalidArgumentError(EMAIL_UNCHANGED, field="email")
            if await self.users.exists_by_email(body.email):
                raise ConflictError(EMAIL_TAKEN)

        effective, changes = overlay_patch(
            {"email": user.email}, body.model_dump(),
        )
        await self.users.update_fields(user.id, changes)
        await self.db.commit()
        if changes:
            logger.info("User email updated", extra={"user_id": user.id})
        return _view(user, effective)

    async def search(
        self,
        principal: AuthenticatedPrincipal,
        page: int = 0,
        size: int = 20,
        username: str | None = None,
        email: str | None = None,
    ) -> Page[UserSearchResponse]:
        spec = build_user_search_spec(principal, page, size, username, email)
        result = await self.users.find_page(spec)
        return result.map(
            lambda u: UserSearchResponse(username=u.username, email=u.email),
        )

    # ─── Admin ──────────────────────────────────────────────────────

    async def admin_list(
        self,
        page: int = 0,
        size: int = 20,
        sort_by: str = "username",
        direction: str = "ASC",
        username: str | None = None,
        email: str | None = None,
        role: Role | None = None,
        creation_date: date | None = None,
    ) -> Page[UserResponse]:
        """Unscoped listing; the transport restricts this to the ADMIN role."""
        spec = build_query_spec(
            ResourceKind.ADMIN_USER, page, size, sort_by, direction,
            filters={
                "username": username, "email": email,
                "role": role, "creationDate": creation_date,
            },
        )
        return (await self.users.find_page(spec)).map(_view)

    async def admin_delete(
        self, principal: AuthenticatedPrincipal, user_id: int,
    ) -> None:
        user = await self._load(user_id)
        if user.role == Role.ADMIN.value:
            raise ConflictError(ADMIN_UNDELETABLE)

        project_ids = await ProjectRepository(self.db).ids_for_owner(user.id)
        collaborations = CollaborationRepository(self.db)
        if await collaborations.holds_responsibility_outside(user.id, project_ids):
            raise ConflictError(RESPONSIBLE_ELSEWHERE)

        await collaborations.delete_where(Collaboration.user_id == user.id)
        await delete_projects_cascade(self.db, project_ids)
        await self.users.delete(user)
        await self.db.commit()
        logger.info(
            f"User deleted by admin: id={user_id} projects={len(project_ids)}",
            extra={"user_id": principal.id},
        )
