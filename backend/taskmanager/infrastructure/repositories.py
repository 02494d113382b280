"""SQL Repositories — async SQLAlchemy persistence for every aggregate.

Invariants:
    - Repositories never commit; the owning service commits once per operation
    - Every write is flushed immediately so constraint violations surface at the
      statement that caused them
    - IntegrityError on flush becomes ConflictError (unique/partial-unique indexes)
    - find_by_id always re-reads persisted state (populate_existing)

Design Decisions:
    - update_fields issues an explicit UPDATE with the computed next-state values
      instead of mutating a loaded entity
    - Bulk child deletes (delete_where) support explicit, ordered cascades
"""

import logging
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.errors import ConflictError
from taskmanager.core.query_spec import QuerySpec
from taskmanager.core.repository_protocols import Page
from taskmanager.db.base import Base
from taskmanager.infrastructure.query_compiler import (
    compile_count_query, compile_page_query,
)
from taskmanager.models import Collaboration, Project, Task, TaskFile, User

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)

CONFLICT_MESSAGE = "Request conflicts with the current state of the resource."


class SqlRepository(Generic[ModelType]):
    """Generic CRUD over one mapped class."""

    model: type[ModelType]

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.warning(f"IntegrityError on {self.model.__name__}: {e.orig}")
            raise ConflictError(CONFLICT_MESSAGE)

    async def find_by_id(self, entity_id: int) -> ModelType | None:
        return await self.db.get(self.model, entity_id, populate_existing=True)

    async def find_page(self, spec: QuerySpec) -> Page[ModelType]:
        total = (
            await self.db.execute(compile_count_query(self.model, spec))
        ).scalar_one()
        rows = (
            await self.db.execute(compile_page_query(self.model, spec))
        ).scalars().all()
        return Page(
            content=list(rows), total_elements=total,
            page=spec.page, size=spec.size,
        )

    async def save(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        await self._flush()
        await self.db.refresh(entity)
        return entity

    async def update_fields(self, entity_id: int, changes: dict[str, Any]) -> None:
        if not changes:
            return
        try:
            await self.db.execute(
                update(self.model)
                .where(self.model.id == entity_id)
                .values(**changes)
                .execution_options(synchronize_session="fetch")
            )
        except IntegrityError as e:
            logger.warning(f"IntegrityError on {self.model.__name__}: {e.orig}")
            raise ConflictError(CONFLICT_MESSAGE)

    async def delete(self, entity: ModelType) -> None:
        await self.db.delete(entity)
        await self._flush()

    async def delete_where(self, *criteria) -> int:
        result = await self.db.execute(
            delete(self.model)
            .where(*criteria)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class UserRepository(SqlRepository[User]):
    model = User

    async def find_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def exists_by_username(self, username: str) -> bool:
        result = await self.db.execute(
            select(exists().where(User.username == username)),
        )
        return bool(result.scalar())

    async def exists_by_email(self, email: str) -> bool:
        result = await self.db.execute(select(exists().where(User.email == email)))
        return bool(result.scalar())


class ProjectRepository(SqlRepository[Project]):
    model = Project

    async def ids_for_owner(self, owner_id: int) -> list[int]:
        result = await self.db.execute(
            select(Project.id).where(Project.owner_id == owner_id),
        )
        return list(result.scalars().all())


class TaskRepository(SqlRepository[Task]):
    model = Task

    async def ids_for_projects(self, project_ids: list[int]) -> list[int]:
        if not project_ids:
            return []
        result = await self.db.execute(
            select(Task.id).where(Task.project_id.in_(project_ids)),
        )
        return list(result.scalars().all())

    async def lock(self, task_id: int) -> None:
        """Pessimistic per-task lock held until the transaction ends (no-op on SQLite)."""
        await self.db.execute(
            select(Task.id).where(Task.id == task_id).with_for_update(),
        )


class FileRepository(SqlRepository[TaskFile]):
    model = TaskFile


class CollaborationRepository(SqlRepository[Collaboration]):
    model = Collaboration

    async def find_by_task_and_user(
        self, task_id: int, user_id: int,
    ) -> Collaboration | None:
        result = await self.db.execute(
            select(Collaboration)
            .where(Collaboration.task_id == task_id)
            .where(Collaboration.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_responsible(self, task_id: int) -> Collaboration | None:
        result = await self.db.execute(
            select(Collaboration)
            .where(Collaboration.task_id == task_id)
            .where(Collaboration.responsible.is_(True))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_for_task(self, task_id: int) -> list[Collaboration]:
        result = await self.db.execute(
            select(Collaboration)
            .where(Collaboration.task_id == task_id)
            .order_by(Collaboration.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def holds_responsibility_outside(
        self, user_id: int, project_ids: list[int],
    ) -> bool:
        """True when the user is responsible on a task of a project not in project_ids."""
        criteria = [
            Collaboration.user_id == user_id,
            Collaboration.responsible.is_(True),
        ]
        if project_ids:
            criteria.append(Task.project_id.not_in(project_ids))
        result = await self.db.execute(
            select(exists().where(
                Collaboration.task_id == Task.id, *criteria,
            )),
        )
        return bool(result.scalar())
