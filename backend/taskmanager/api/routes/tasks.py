"""Task Routes — CRUD over tasks of an owned project.

Invariants:
    - GET/PATCH/DELETE on /projects/{project_id}/tasks/{task_id} reject a task
      that belongs to a different project (400), even an owned one
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from taskmanager.api.dependencies import (
    get_current_principal, get_task_service, task_status_filter,
)
from taskmanager.core.domain_types import AuthenticatedPrincipal, TaskStatus
from taskmanager.schemas.common import PageResponse
from taskmanager.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskmanager.services.task_service import TaskService

router = APIRouter(prefix="/projects/{project_id}/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    project_id: int,
    body: TaskCreate,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    tasks: TaskService = Depends(get_task_service),
):
    return await tasks.create(principal, project_id, body)


@router.get("/page", response_model=PageResponse[TaskResponse])
async def list_tasks(
    project_id: int,
    page: int = Query(0),
    size: int = Query(20),
    sort_by: str = Query("name", alias="sortBy"),
    direction: str = Query("ASC"),
    name: str | None = Query(None),
    due_date: date | None = Query(None, alias="dueDate"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    task_status: TaskStatus | None = Depends(task_status_filter),
    tasks: TaskService = Depends(get_task_service),
):
    result = await tasks.list_page(
        principal, project_id, page, size, sort_by, direction,
        name=name, status=task_status, due_date=due_date,
    )
    return PageResponse[TaskResponse].from_page(result)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    project_id: int,
    task_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    tasks: TaskService = Depends(get_task_service),
):
    return await tasks.get(principal, project_id, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    project_id: int,
    task_id: int,
    body: TaskUpdate,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    tasks: TaskService = Depends(get_task_service),
):
    return await tasks.update(principal, project_id, task_id, body)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    project_id: int,
    task_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    tasks: TaskService = Depends(get_task_service),
):
    await tasks.delete(principal, project_id, task_id)
