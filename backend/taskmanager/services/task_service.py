"""Task Service — task CRUD under an owned project.

Invariants:
    - Every operation resolves the owning project (or the task and its chain) first
    - PATCH/DELETE also enforce the path-parent check (task belongs to {project_id})
    - Delete cascades files and collaborator rows before the task, one transaction
    - Views are built from the computed next-state values, never from a mutated entity
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.domain_types import (
    AuthenticatedPrincipal, ResourceKind, TaskStatus,
)
from taskmanager.core.enforce_dates import check_not_in_past
from taskmanager.core.patch_semantics import overlay_patch
from taskmanager.core.query_spec import build_query_spec, project_scope
from taskmanager.core.repository_protocols import Page
from taskmanager.infrastructure.repositories import (
    CollaborationRepository, FileRepository, TaskRepository,
)
from taskmanager.models import Collaboration, Task, TaskFile
from taskmanager.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskmanager.services.ownership_resolver import OwnershipResolver

logger = logging.getLogger(__name__)


def _view(task_id: int, project_id: int, values: dict) -> TaskResponse:
    return TaskResponse(id=task_id, project_id=project_id, **values)


def _state(task: Task) -> dict:
    return {
        "name": task.name,
        "status": task.status,
        "due_date": task.due_date,
        "description": task.description,
    }


async def delete_tasks_cascade(db: AsyncSession, task_ids: list[int]) -> None:
    """Delete tasks with their files and collaborator rows, children first."""
    if not task_ids:
        return
    await FileRepository(db).delete_where(TaskFile.task_id.in_(task_ids))
    await CollaborationRepository(db).delete_where(
        Collaboration.task_id.in_(task_ids),
    )
    await TaskRepository(db).delete_where(Task.id.in_(task_ids))


class TaskService:
    """Create, read, list, update and delete tasks of owned projects."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tasks = TaskRepository(db)
        self.resolver = OwnershipResolver(db)

    async def create(
        self, principal: AuthenticatedPrincipal, project_id: int, body: TaskCreate,
    ) -> TaskResponse:
        check_not_in_past(body.due_date, "due_date", date.today())
        await self.resolver.project(principal, project_id)

        task = await self.tasks.save(Task(
            project_id=project_id,
            name=body.name,
            status=body.status.value,
            due_date=body.due_date,
            description=body.description,
        ))
        await self.db.commit()
        logger.info(
            f"Task created: id={task.id}",
            extra={"user_id": principal.id, "project_id": project_id, "task_id": task.id},
        )
        return _view(task.id, project_id, _state(task))

    async def get(
        self, principal: AuthenticatedPrincipal, project_id: int, task_id: int,
    ) -> TaskResponse:
        task = await self.resolver.task_in_project(principal, project_id, task_id)
        return _view(task.id, task.project_id, _state(task))

    async def list_page(
        self,
        principal: AuthenticatedPrincipal,
        project_id: int,
        page: int = 0,
        size: int = 20,
        sort_by: str = "name",
        direction: str = "ASC",
        name: str | None = None,
        status: TaskStatus | None = None,
        due_date: date | None = None,
    ) -> Page[TaskResponse]:
        await self.resolver.project(principal, project_id)
        spec = build_query_spec(
            ResourceKind.TASK, page, size, sort_by, direction,
            filters={"name": name, "status": status, "dueDate": due_date},
            scope=project_scope(project_id),
        )
        result = await self.tasks.find_page(spec)
        return result.map(lambda t: _view(t.id, t.project_id, _state(t)))

    async def update(
        self,
        principal: AuthenticatedPrincipal,
        project_id: int,
        task_id: int,
        body: TaskUpdate,
    ) -> TaskResponse:
        task = await self.resolver.task_in_project(principal, project_id, task_id)
        if body.due_date is not None:
            check_not_in_past(body.due_date, "due_date", date.today())

        patch = body.model_dump()
        if body.status is not None:
            patch["status"] = body.status.value
        effective, changes = overlay_patch(_state(task), patch)

        await self.tasks.update_fields(task.id, changes)
        await self.db.commit()
        logger.info(
            f"Task updated: id={task.id} fields={sorted(changes)}",
            extra={"user_id": principal.id, "project_id": project_id, "task_id": task.id},
        )
        return _view(task.id, task.project_id, effective)

    async def delete(
        self, principal: AuthenticatedPrincipal, project_id: int, task_id: int,
    ) -> None:
        task = await self.resolver.task_in_project(principal, project_id, task_id)
        await delete_tasks_cascade(self.db, [task.id])
        await self.db.commit()
        logger.info(
            f"Task deleted: id={task.id}",
            extra={"user_id": principal.id, "project_id": project_id, "task_id": task.id},
        )
