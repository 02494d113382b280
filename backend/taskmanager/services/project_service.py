"""Project Service — CRUD over projects owned by the principal.

Invariants:
    - Reads and writes only touch projects whose owner_id is the principal
    - end_date >= start_date on create and on the EFFECTIVE values of an update,
      checked before anything is written
    - Delete removes tasks (with their files and collaborators) before the
      project, all inside one transaction
    - Views are built from the computed next-state values
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.domain_types import (
    AuthenticatedPrincipal, ProjectStatus, ResourceKind,
)
from taskmanager.core.enforce_dates import check_date_range, check_not_in_past
from taskmanager.core.patch_semantics import overlay_patch
from taskmanager.core.query_spec import build_query_spec, owner_scope
from taskmanager.core.repository_protocols import Page
from taskmanager.infrastructure.repositories import (
    ProjectRepository, TaskRepository,
)
from taskmanager.models import Project
from taskmanager.schemas.project import (
    ProjectCreate, ProjectResponse, ProjectUpdate,
)
from taskmanager.services.ownership_resolver import OwnershipResolver
from taskmanager.services.task_service import delete_tasks_cascade

logger = logging.getLogger(__name__)


def _view(project_id: int, owner_id: int, values: dict) -> ProjectResponse:
    return ProjectResponse(id=project_id, owner_id=owner_id, **values)


def _state(project: Project) -> dict:
    return {
        "name": project.name,
        "status": project.status,
        "start_date": project.start_date,
        "end_date": project.end_date,
    }


async def delete_projects_cascade(db: AsyncSession, project_ids: list[int]) -> None:
    """Delete projects and everything below them, leaves first."""
    if not project_ids:
        return
    task_ids = await TaskRepository(db).ids_for_projects(project_ids)
    await delete_tasks_cascade(db, task_ids)
    await ProjectRepository(db).delete_where(Project.id.in_(project_ids))


class ProjectService:
    """Create, read, list, update and delete the principal's projects."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.projects = ProjectRepository(db)
        self.resolver = OwnershipResolver(db)

    async def create(
        self, principal: AuthenticatedPrincipal, body: ProjectCreate,
    ) -> ProjectResponse:
        check_not_in_past(body.start_date, "start_date", date.today())
        check_date_range(body.start_date, body.end_date)

        project = await self.projects.save(Project(
            owner_id=principal.id,
            name=body.name,
            status=body.status.value,
            start_date=body.start_date,
            end_date=body.end_date,
        ))
        await self.db.commit()
        logger.info(
            f"Project created: id={project.id}",
            extra={"user_id": principal.id, "project_id": project.id},
        )
        return _view(project.id, project.owner_id, _state(project))

    async def get(
        self, principal: AuthenticatedPrincipal, project_id: int,
    ) -> ProjectResponse:
        project = await self.resolver.project(principal, project_id)
        return _view(project.id, project.owner_id, _state(project))

    async def list_page(
        self,
        principal: AuthenticatedPrincipal,
        page: int = 0,
        size: int = 20,
        sort_by: str = "name",
        direction: str = "ASC",
        name: str | None = None,
        status: ProjectStatus | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Page[ProjectResponse]:
        spec = build_query_spec(
            ResourceKind.PROJECT, page, size, sort_by, direction,
            filters={
                "name": name, "status": status,
                "startDate": start_date, "endDate": end_date,
            },
            scope=owner_scope(principal),
        )
        result = await self.projects.find_page(spec)
        return result.map(lambda p: _view(p.id, p.owner_id, _state(p)))

    async def update(
        self, principal: AuthenticatedPrincipal, project_id: int, body: ProjectUpdate,
    ) -> ProjectResponse:
        project = await self.resolver.project(principal, project_id)
        if body.start_date is not None:
            check_not_in_past(body.start_date, "start_date", date.today())

        patch = body.model_dump()
        if body.status is not None:
            patch["status"] = body.status.value
        effective, changes = overlay_patch(_state(project), patch)
        check_date_range(effective["start_date"], effective["end_date"])

        await self.projects.update_fields(project.id, changes)
        await self.db.commit()
        logger.info(
            f"Project updated: id={project.id} fields={sorted(changes)}",
            extra={"user_id": principal.id, "project_id": project.id},
        )
        return _view(project.id, project.owner_id, effective)

    async def delete(
        self, principal: AuthenticatedPrincipal, project_id: int,
    ) -> None:
        project = await self.resolver.project(principal, project_id)
        await delete_projects_cascade(self.db, [project.id])
        await self.db.commit()
        logger.info(
            f"Project deleted: id={project.id}",
            extra={"user_id": principal.id, "project_id": project.id},
        )
