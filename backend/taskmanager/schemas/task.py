"""Task Schemas — create/update bodies and the task view.

Invariants:
    - TaskCreate.name: at most 100 chars, stripped, non-blank
    - TaskUpdate.name: 3-255 chars when supplied
    - description: at most 1000 chars
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from taskmanager.core.domain_types import TaskStatus
from taskmanager.schemas.common import upper_enum_input


class TaskCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    status: TaskStatus
    due_date: date
    description: str | None = Field(None, max_length=1000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return upper_enum_input(v)


class TaskUpdate(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=255)
    status: TaskStatus | None = None
    due_date: date | None = None
    description: str | None = Field(None, max_length=1000)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return upper_enum_input(v)


class TaskResponse(BaseModel):
    id: int
    name: str
    status: TaskStatus
    due_date: date
    description: str | None = None
    project_id: int
