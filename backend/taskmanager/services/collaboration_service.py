"""Collaboration Service — collaborator assignment and the responsible-collaborator rule.

Invariants:
    - At most one responsible row per task between operations
    - Mutations take the per-task row lock before reading collaborator state
    - Demotion of the previous responsible row is written BEFORE the promotion,
      so the partial unique index never sees two responsible rows
    - The responsible row is never removed; a replacement must be promoted first
    - The task's rows are re-derived before commit; two responsible rows abort the
      transaction

Design Decisions:
    - Decisions come from core/enforce_responsibility.py (pure); this module only
      loads snapshots and applies the returned plan
    - The partial unique index is the backstop where row locks are unavailable (SQLite)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.domain_types import AuthenticatedPrincipal, ResourceKind
from taskmanager.core.enforce_responsibility import (
    CollaboratorSnapshot, ResponsibilityState, check_removal, derive_state,
    plan_assignment, require_responsible,
)
from taskmanager.core.errors import ResourceNotFoundError
from taskmanager.core.query_spec import build_query_spec, task_scope
from taskmanager.core.repository_protocols import Page
from taskmanager.infrastructure.repositories import (
    CollaborationRepository, TaskRepository, UserRepository,
)
from taskmanager.models import Collaboration, User
from taskmanager.schemas.collaboration import (
    AddCollaboratorRequest, CollaboratorResponse,
)
from taskmanager.services.ownership_resolver import OwnershipResolver

logger = logging.getLogger(__name__)

COLLABORATOR_USER_NOT_FOUND = "Collaborator user not found."
COLLABORATOR_NOT_FOUND = "Collaborator not found for this task."


def _snapshot(row: Collaboration | None) -> CollaboratorSnapshot | None:
    if row is None:
        return None
    return CollaboratorSnapshot(user_id=row.user_id, responsible=row.responsible)


def _view(user: User, responsible: bool) -> CollaboratorResponse:
    return CollaboratorResponse(
        user_id=user.id,
        username=user.username,
        email=user.email,
        responsible=responsible,
    )


class CollaborationService:
    """Collaborators of tasks the principal owns."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.collaborations = CollaborationRepository(db)
        self.tasks = TaskRepository(db)
        self.users = UserRepository(db)
        self.resolver = OwnershipResolver(db)

    async def _settled_state(self, task_id: int) -> ResponsibilityState:
        """Re-read the task's rows after the writes; two responsible rows raise."""
        rows = await self.collaborations.find_for_task(task_id)
        return derive_state(_snapshot(r) for r in rows)

    async def _collaborator_user(self, user_id: int) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError(
                "User", user_id, message=COLLABORATOR_USER_NOT_FOUND,
            )
        return user

    async def add_or_update(
        self,
        principal: AuthenticatedPrincipal,
        task_id: int,
        body: AddCollaboratorRequest,
    ) -> CollaboratorResponse:
        """Create or update a collaborator row, moving responsibility if requested."""
        await self.resolver.task(principal, task_id, ResourceKind.COLLABORATOR)
        await self.tasks.lock(task_id)
        user = await self._collaborator_user(body.user_id)

        existing = await self.collaborations.find_by_task_and_user(task_id, user.id)
        current = await self.collaborations.find_responsible(task_id)
        plan = plan_assignment(
            user.id, _snapshot(existing), _snapshot(current), body.responsible,
        )

        if plan.demote_user_id is not None:
            await self.collaborations.update_fields(current.id, {"responsible": False})
        if plan.create_row:
            await self.collaborations.save(Collaboration(
                task_id=task_id, user_id=user.id, responsible=plan.responsible,
            ))
        else:
            await self.collaborations.update_fields(
                existing.id, {"responsible": plan.responsible},
            )
        state = await self._settled_state(task_id)
        await self.db.commit()

        logger.info(
            f"Collaborator assigned: user={user.id} responsible={plan.responsible} "
            f"demoted={plan.demote_user_id} state={state.value}",
            extra={"user_id": principal.id, "task_id": task_id},
        )
        return _view(user, plan.responsible)

    async def list_page(
        self,
        principal: AuthenticatedPrincipal,
        task_id: int,
        page: int = 0,
        size: int = 20,
        sort_by: str = "username",
        direction: str = "ASC",
        username: str | None = None,
        email: str | None = None,
    ) -> Page[CollaboratorResponse]:
        await self.resolver.task(principal, task_id, ResourceKind.COLLABORATOR)
        spec = build_query_spec(
            ResourceKind.COLLABORATOR, page, size, sort_by, direction,
            filters={"username": username, "email": email},
            scope=task_scope(task_id),
        )
        result = await self.collaborations.find_page(spec)
        return result.map(lambda c: _view(c.user, c.responsible))

    async def get_responsible(
        self, principal: AuthenticatedPrincipal, task_id: int,
    ) -> CollaboratorResponse:
        await self.resolver.task(principal, task_id, ResourceKind.COLLABORATOR)
        current = await self.collaborations.find_responsible(task_id)
        require_responsible(_snapshot(current))
        return _view(current.user, True)

    async def remove(
        self, principal: AuthenticatedPrincipal, task_id: int, user_id: int,
    ) -> None:
        await self.resolver.task(principal, task_id, ResourceKind.COLLABORATOR)
        await self.tasks.lock(task_id)
        user = await self._collaborator_user(user_id)

        row = await self.collaborations.find_by_task_and_user(task_id, user.id)
        if row is None:
            raise ResourceNotFoundError(
                "Collaborator", user_id, message=COLLABORATOR_NOT_FOUND,
            )
        current = await self.collaborations.find_responsible(task_id)
        check_removal(_snapshot(row), _snapshot(current))

        await self.collaborations.delete(row)
        state = await self._settled_state(task_id)
        await self.db.commit()
        logger.info(
            f"Collaborator removed: user={user.id} state={state.value}",
            extra={"user_id": principal.id, "task_id": task_id},
        )
