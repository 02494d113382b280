"""File Schemas — metadata view of an uploaded file."""

from pydantic import BaseModel


class FileResponse(BaseModel):
    id: int
    filename: str
    file_url: str
    content_type: str | None = None
    task_id: int
