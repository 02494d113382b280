"""Project Routes — CRUD over the caller's projects."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from taskmanager.api.dependencies import (
    get_current_principal, get_project_service, project_status_filter,
)
from taskmanager.core.domain_types import AuthenticatedPrincipal, ProjectStatus
from taskmanager.schemas.common import PageResponse
from taskmanager.schemas.project import (
    ProjectCreate, ProjectResponse, ProjectUpdate,
)
from taskmanager.services.project_service import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post(
    "", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED,
)
async def create_project(
    body: ProjectCreate,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.create(principal, body)


@router.get("/page", response_model=PageResponse[ProjectResponse])
async def list_projects(
    page: int = Query(0),
    size: int = Query(20),
    sort_by: str = Query("name", alias="sortBy"),
    direction: str = Query("ASC"),
    name: str | None = Query(None),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    project_status: ProjectStatus | None = Depends(project_status_filter),
    projects: ProjectService = Depends(get_project_service),
):
    result = await projects.list_page(
        principal, page, size, sort_by, direction,
        name=name, status=project_status,
        start_date=start_date, end_date=end_date,
    )
    return PageResponse[ProjectResponse].from_page(result)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.get(principal, project_id)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    body: ProjectUpdate,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    projects: ProjectService = Depends(get_project_service),
):
    return await projects.update(principal, project_id, body)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    projects: ProjectService = Depends(get_project_service),
):
    """Delete the project with its tasks, files and collaborators."""
    await projects.delete(principal, project_id)
