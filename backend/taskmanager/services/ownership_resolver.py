"""Ownership Resolver — loads a target and its chain, then delegates the decision to core.

Invariants:
    - Every call re-reads persisted state; nothing is cached between calls
    - NotFound is decided before AccessDenied, AccessDenied before the path-parent check
    - A task is resolved through its path project: the project must be owned before
      the task is looked up
    - A file is resolved through its path task: the task must be owned before the
      file is looked up
    - The owner compared is always the chain root (project.owner_id)

Design Decisions:
    - Task and File rows eager-load their chain (joined relationships), so one
      query resolves the whole chain
    - Accept/reject logic lives in core/enforce_ownership.py
"""

from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.domain_types import AuthenticatedPrincipal, ResourceKind
from taskmanager.core.enforce_ownership import check_owner, check_parent
from taskmanager.core.errors import ResourceNotFoundError
from taskmanager.infrastructure.repositories import (
    FileRepository, ProjectRepository, TaskRepository,
)
from taskmanager.models import Project, Task, TaskFile


class OwnershipResolver:
    """Resolve owned projects, tasks and files for one principal."""

    def __init__(self, db: AsyncSession):
        self.projects = ProjectRepository(db)
        self.tasks = TaskRepository(db)
        self.files = FileRepository(db)

    async def project(
        self, principal: AuthenticatedPrincipal, project_id: int,
    ) -> Project:
        project = await self.projects.find_by_id(project_id)
        if project is None:
            raise ResourceNotFoundError("Project", project_id)
        check_owner(principal, project.owner_id, ResourceKind.PROJECT)
        return project

    async def task(
        self, principal: AuthenticatedPrincipal, task_id: int,
        kind: ResourceKind = ResourceKind.TASK,
    ) -> Task:
        """Owned task; `kind` only selects the denial message."""
        task = await self.tasks.find_by_id(task_id)
        if task is None:
            raise ResourceNotFoundError("Task", task_id)
        check_owner(principal, task.project.owner_id, kind)
        return task

    async def task_in_project(
        self, principal: AuthenticatedPrincipal, project_id: int, task_id: int,
    ) -> Task:
        """Owned path project first, then the owned task, then the parent link."""
        await self.project(principal, project_id)
        task = await self.task(principal, task_id)
        check_parent(
            task.project_id, project_id, ResourceKind.TASK, ResourceKind.PROJECT,
        )
        return task

    async def file_in_task(
        self, principal: AuthenticatedPrincipal, task_id: int, file_id: int,
    ) -> TaskFile:
        await self.task(principal, task_id, ResourceKind.FILE)
        file = await self.files.find_by_id(file_id)
        if file is None:
            raise ResourceNotFoundError("File", file_id)
        check_parent(file.task_id, task_id, ResourceKind.FILE, ResourceKind.TASK)
        return file
