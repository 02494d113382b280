"""File Routes — multipart upload, list, read and delete of task files."""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from taskmanager.api.dependencies import (
    enforce_request_ceiling, get_current_principal, get_file_service,
)
from taskmanager.core.domain_types import AuthenticatedPrincipal
from taskmanager.schemas.common import PageResponse
from taskmanager.schemas.file import FileResponse
from taskmanager.services.file_service import FileService

router = APIRouter(prefix="/tasks/{task_id}/files", tags=["files"])


@router.post(
    "",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_request_ceiling)],
)
async def upload_file(
    task_id: int,
    file: UploadFile = File(...),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    files: FileService = Depends(get_file_service),
):
    """Record an uploaded file's metadata; the bytes are only measured."""
    content = await file.read()
    return await files.upload(
        principal, task_id, file.filename or "", file.content_type, len(content),
    )


@router.get("/page", response_model=PageResponse[FileResponse])
async def list_files(
    task_id: int,
    page: int = Query(0),
    size: int = Query(20),
    sort_by: str = Query("filename", alias="sortBy"),
    direction: str = Query("ASC"),
    filename: str | None = Query(None),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    files: FileService = Depends(get_file_service),
):
    result = await files.list_page(
        principal, task_id, page, size, sort_by, direction, filename,
    )
    return PageResponse[FileResponse].from_page(result)


@router.get("/{file_id}", response_model=FileResponse)
async def get_file(
    task_id: int,
    file_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    files: FileService = Depends(get_file_service),
):
    return await files.get(principal, task_id, file_id)


@router.delete("/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    task_id: int,
    file_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    files: FileService = Depends(get_file_service),
):
    await files.delete(principal, task_id, file_id)
