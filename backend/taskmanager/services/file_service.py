"""File Service — upload metadata, list, read and delete files of owned tasks.

Invariants:
    - Payload checks (empty, > 2 MiB) run before any ownership resolution
    - Only metadata is persisted; file_url comes from the BlobLocator
    - Files have no update operation
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.domain_types import AuthenticatedPrincipal, ResourceKind
from taskmanager.core.enforce_upload import check_upload_payload
from taskmanager.core.query_spec import build_query_spec, task_scope
from taskmanager.core.repository_protocols import BlobLocator, Page
from taskmanager.infrastructure.repositories import FileRepository
from taskmanager.models import TaskFile
from taskmanager.schemas.file import FileResponse
from taskmanager.services.ownership_resolver import OwnershipResolver

logger = logging.getLogger(__name__)


def _view(file: TaskFile) -> FileResponse:
    return FileResponse(
        id=file.id,
        filename=file.filename,
        file_url=file.file_url,
        content_type=file.content_type,
        task_id=file.task_id,
    )


class FileService:
    """File metadata under tasks the principal owns."""

    def __init__(self, db: AsyncSession, locator: BlobLocator):
        self.db = db
        self.locator = locator
        self.files = FileRepository(db)
        self.resolver = OwnershipResolver(db)

    async def upload(
        self,
        principal: AuthenticatedPrincipal,
        task_id: int,
        filename: str,
        content_type: str | None,
        size: int,
    ) -> FileResponse:
        check_upload_payload(size)
        await self.resolver.task(principal, task_id, ResourceKind.FILE)

        file = await self.files.save(TaskFile(
            task_id=task_id,
            filename=filename,
            file_url=self.locator.locate(task_id, filename),
            content_type=content_type,
        ))
        await self.db.commit()
        logger.info(
            f"File uploaded: id={file.id} size={size}",
            extra={"user_id": principal.id, "task_id": task_id, "file_id": file.id},
        )
        return _view(file)

    async def get(
        self, principal: AuthenticatedPrincipal, task_id: int, file_id: int,
    ) -> FileResponse:
        return _view(await self.resolver.file_in_task(principal, task_id, file_id))

    async def list_page(
        self,
        principal: AuthenticatedPrincipal,
        task_id: int,
        page: int = 0,
        size: int = 20,
        sort_by: str = "filename",
        direction: str = "ASC",
        filename: str | None = None,
    ) -> Page[FileResponse]:
        await self.resolver.task(principal, task_id, ResourceKind.FILE)
        spec = build_query_spec(
            ResourceKind.FILE, page, size, sort_by, direction,
            filters={"filename": filename},
            scope=task_scope(task_id),
        )
        return (await self.files.find_page(spec)).map(_view)

    async def delete(
        self, principal: AuthenticatedPrincipal, task_id: int, file_id: int,
    ) -> None:
        file = await self.resolver.file_in_task(principal, task_id, file_id)
        await self.files.delete(file)
        await self.db.commit()
        logger.info(
            f"File deleted: id={file_id}",
            extra={"user_id": principal.id, "task_id": task_id, "file_id": file_id},
        )
