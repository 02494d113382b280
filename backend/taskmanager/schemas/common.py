"""Common Schemas — the page envelope shared by every list endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel

from taskmanager.core.repository_protocols import Page

T = TypeVar("T")


class PageResponse(BaseModel, Generic[T]):
    """Page envelope: content plus paging metadata."""
    content: list[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "PageResponse":
        return cls(
            content=page.content,
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
        )


def upper_enum_input(v):
    """Case-normalize enum input; non-strings are left for pydantic to reject."""
    return v.strip().upper() if isinstance(v, str) else v
