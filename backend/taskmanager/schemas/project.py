"""Project Schemas — create/update bodies and the project view.

Invariants:
    - ProjectCreate.name: at most 100 chars, stripped, non-blank
    - ProjectUpdate.name: 3-255 chars when supplied
    - status accepted case-insensitively
    - Calendar rules (not in the past, end >= start) are checked by the service
      on effective values, not here
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator

from taskmanager.core.domain_types import ProjectStatus
from taskmanager.schemas.common import upper_enum_input


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    status: ProjectStatus
    start_date: date
    end_date: date | None = None

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


class ProjectUpdate(BaseModel):
    """Partial update; None means "leave unchanged"."""
    name: str | None = Field(None, min_length=3, max_length=255)
    status: ProjectStatus | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return upper_enum_input(v)


class ProjectResponse(BaseModel):
    id: int
    name: str
    status: ProjectStatus
    start_date: date
    end_date: date | None = None
    owner_id: int
