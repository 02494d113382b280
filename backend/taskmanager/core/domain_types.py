"""Domain Types — enums and the authenticated principal.

Invariants:
    - All valid states encoded as Enums; no raw string matching in services
    - AuthenticatedPrincipal is immutable and built once per request
    - parse_enum is the single place free-case input becomes an Enum member

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

from taskmanager.core.errors import InvalidArgumentError


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Account roles. ADMIN is the elevated role."""
    USER = "USER"
    ADMIN = "ADMIN"


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class ResourceKind(str, Enum):
    """Listable resource families, each with its own sort whitelist."""
    PROJECT = "project"
    TASK = "task"
    FILE = "file"
    COLLABORATOR = "collaborator"
    ADMIN_USER = "admin_user"
    USER_SEARCH = "user_search"


# ─── Principal ───────────────────────────────────────────────────

@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """The acting user, normalized at the transport boundary."""
    id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ─── Parsing ─────────────────────────────────────────────────────

E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: type[E], raw: str | None, field: str) -> E | None:
    """Case-normalize free-form input into an enum member.

    Blank input means "no filter" and yields None. Unknown values raise
    InvalidArgumentError naming the accepted values.
    """
    if raw is None or not raw.strip():
        return None
    normalized = raw.strip().upper()
    try:
        return enum_cls(normalized)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidArgumentError(
            f"Invalid {field}. Allowed: {allowed}.", field=field,
        )
