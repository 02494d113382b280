"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Swappable adapters (tokens, credentials, blob locations) are Protocol types
    - Implementations provided by infrastructure/ via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
"""

import math
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a list result plus the metadata needed to page through it."""
    content: list[T] = field(default_factory=list)
    total_elements: int = 0
    page: int = 0
    size: int = 20

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 0

    def map(self, fn) -> "Page":
        return Page(
            content=[fn(item) for item in self.content],
            total_elements=self.total_elements,
            page=self.page,
            size=self.size,
        )


class TokenService(Protocol):
    """Issues and verifies bearer credentials carrying a subject (username)."""
    def issue(self, subject: str) -> str: ...
    def verify(self, token: str) -> str: ...


class CredentialStore(Protocol):
    """Password hashing black box."""
    def hash(self, raw: str) -> str: ...
    def verify(self, raw: str, hashed: str) -> bool: ...


class BlobLocator(Protocol):
    """Produces the opaque location reference recorded on a File."""
    def locate(self, task_id: int, filename: str) -> str: ...

