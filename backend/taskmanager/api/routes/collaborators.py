"""Collaborator Routes — assignment, listing, responsible lookup and removal."""

from fastapi import APIRouter, Depends, Query, status

from taskmanager.api.dependencies import (
    get_collaboration_service, get_current_principal,
)
from taskmanager.core.domain_types import AuthenticatedPrincipal
from taskmanager.schemas.collaboration import (
    AddCollaboratorRequest, CollaboratorResponse,
)
from taskmanager.schemas.common import PageResponse
from taskmanager.services.collaboration_service import CollaborationService

router = APIRouter(prefix="/tasks/{task_id}", tags=["collaborators"])


@router.post(
    "/collaborators",
    response_model=CollaboratorResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_or_update_collaborator(
    task_id: int,
    body: AddCollaboratorRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    collaborations: CollaborationService = Depends(get_collaboration_service),
):
    return await collaborations.add_or_update(principal, task_id, body)


@router.get("/collaborators", response_model=PageResponse[CollaboratorResponse])
async def list_collaborators(
    task_id: int,
    page: int = Query(0),
    size: int = Query(20),
    sort_by: str = Query("username", alias="sortBy"),
    direction: str = Query("ASC"),
    username: str | None = Query(None),
    email: str | None = Query(None),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    collaborations: CollaborationService = Depends(get_collaboration_service),
):
    result = await collaborations.list_page(
        principal, task_id, page, size, sort_by, direction, username, email,
    )
    return PageResponse[CollaboratorResponse].from_page(result)


@router.get("/responsible", response_model=CollaboratorResponse)
async def get_responsible(
    task_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    collaborations: CollaborationService = Depends(get_collaboration_service),
):
    return await collaborations.get_responsible(principal, task_id)


@router.delete(
    "/collaborators/{user_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_collaborator(
    task_id: int,
    user_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    collaborations: CollaborationService = Depends(get_collaboration_service),
):
    await collaborations.remove(principal, task_id, user_id)
