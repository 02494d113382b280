"""Query Specification — validates list parameters and compiles them into clauses + ordering.

Invariants:
    - page >= 0 and size > 0, otherwise InvalidArgumentError
    - sort field belongs to the per-resource whitelist (error names the allowed set)
    - ordering is ALWAYS (<validated field> <direction>, id DESC) for stable pagination
    - blank free-text filters are omitted, never matched against ""
    - scope clauses (ownership) are held apart from caller filters and are mandatory
      for every non-admin resource kind
    - Pure: field names here are logical; infrastructure/query_compiler.py maps them
      to columns

Design Decisions:
    - Small frozen clause types (Equals, NotEquals, Contains, Between) instead of
      passing SQLAlchemy expressions through the core
    - Public (API) field names are translated to logical names once, here
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Mapping

from taskmanager.core.domain_types import (
    AuthenticatedPrincipal, ResourceKind, SortDirection,
)
from taskmanager.core.errors import InvalidArgumentError


# ─── Clauses ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class NotEquals:
    field: str
    value: Any


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match; needle is already trimmed and lowercased."""
    field: str
    needle: str


@dataclass(frozen=True)
class Between:
    """Half-open range: lower <= field < upper."""
    field: str
    lower: Any
    upper: Any


Clause = Equals | NotEquals | Contains | Between


@dataclass(frozen=True)
class SortOrder:
    field: str
    direction: SortDirection


@dataclass(frozen=True)
class QuerySpec:
    """Compiled list query: ownership scope AND caller filters, ordered, paged."""
    scope: tuple[Clause, ...]
    filters: tuple[Clause, ...]
    ordering: tuple[SortOrder, ...]
    page: int
    size: int

    @property
    def clauses(self) -> tuple[Clause, ...]:
        return self.scope + self.filters

    @property
    def offset(self) -> int:
        return self.page * self.size


# ─── Per-resource rules ──────────────────────────────────────────

# public sort name -> logical field
SORTABLE_FIELDS: dict[ResourceKind, dict[str, str]] = {
    ResourceKind.PROJECT: {
        "name": "name", "startDate": "start_date", "endDate": "end_date",
    },
    ResourceKind.TASK: {"name": "name", "dueDate": "due_date"},
    ResourceKind.FILE: {"filename": "filename"},
    ResourceKind.COLLABORATOR: {
        "username": "user.username", "email": "user.email",
    },
    ResourceKind.ADMIN_USER: {
        "username": "username", "email": "email", "creationDate": "created_at",
    },
}

CONTAINS = "contains"
EXACT = "exact"
UTC_DAY = "utc_day"

# public filter name -> (logical field, match mode)
FILTER_RULES: dict[ResourceKind, dict[str, tuple[str, str]]] = {
    ResourceKind.PROJECT: {
        "name": ("name", CONTAINS),
        "startDate": ("start_date", EXACT),
        "endDate": ("end_date", EXACT),
        "status": ("status", EXACT),
    },
    ResourceKind.TASK: {
        "name": ("name", CONTAINS),
        "dueDate": ("due_date", EXACT),
        "status": ("status", EXACT),
    },
    ResourceKind.FILE: {"filename": ("filename", CONTAINS)},
    ResourceKind.COLLABORATOR: {
        "username": ("user.username", CONTAINS),
        "email": ("user.email", CONTAINS),
    },
    ResourceKind.ADMIN_USER: {
        "username": ("username", CONTAINS),
        "email": ("email", CONTAINS),
        "role": ("role", EXACT),
        "creationDate": ("created_at", UTC_DAY),
    },
    ResourceKind.USER_SEARCH: {
        "username": ("username", CONTAINS),
        "email": ("email", CONTAINS),
    },
}

_UNSCOPED_KINDS = frozenset({ResourceKind.ADMIN_USER})

TIE_BREAK = SortOrder("id", SortDirection.DESC)


# ─── Validation steps ────────────────────────────────────────────

def validate_page(page: int, size: int) -> None:
    if page < 0 or size <= 0:
        raise InvalidArgumentError("Invalid pagination parameters.")


def resolve_sort_field(kind: ResourceKind, sort_field: str) -> str:
    """Map a public sort name to its logical field, rejecting anything off-whitelist."""
    allowed = SORTABLE_FIELDS[kind]
    if sort_field not in allowed:
        raise InvalidArgumentError(
            f"Invalid sort field. Allowed: {', '.join(allowed)}.",
            field="sortBy",
        )
    return allowed[sort_field]


def parse_direction(direction: str | None) -> SortDirection:
    normalized = (direction or "").strip().upper()
    if normalized in ("ASC", "ASCENDING"):
        return SortDirection.ASC
    if normalized in ("DESC", "DESCENDING"):
        return SortDirection.DESC
    raise InvalidArgumentError(
        "Invalid sort direction. Use ASC or DESC.", field="direction",
    )


def utc_day_window(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def compile_filters(
    kind: ResourceKind, filters: Mapping[str, Any],
) -> tuple[Clause, ...]:
    """Turn caller filters into clauses; None and blank strings are dropped."""
    rules = FILTER_RULES[kind]
    clauses: list[Clause] = []
    for name, value in filters.items():
        if name not in rules:
            raise InvalidArgumentError(f"Unsupported filter: {name}.", field=name)
        field, mode = rules[name]
        if value is None:
            continue
        if mode == CONTAINS:
            needle = str(value).strip().lower()
            if needle:
                clauses.append(Contains(field, needle))
        elif mode == UTC_DAY:
            lower, upper = utc_day_window(value)
            clauses.append(Between(field, lower, upper))
        else:
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, Enum):
                value = value.value
            clauses.append(Equals(field, value))
    return tuple(clauses)


# ─── Scopes ──────────────────────────────────────────────────────

def owner_scope(principal: AuthenticatedPrincipal) -> tuple[Clause, ...]:
    return (Equals("owner_id", principal.id),)


def project_scope(project_id: int) -> tuple[Clause, ...]:
    return (Equals("project_id", project_id),)


def task_scope(task_id: int) -> tuple[Clause, ...]:
    return (Equals("task_id", task_id),)


def exclude_principal_scope(principal: AuthenticatedPrincipal) -> tuple[Clause, ...]:
    return (NotEquals("id", principal.id),)


# ─── Builders ────────────────────────────────────────────────────

def build_query_spec(
    kind: ResourceKind,
    page: int,
    size: int,
    sort_field: str,
    direction: str | None,
    filters: Mapping[str, Any] | None = None,
    scope: tuple[Clause, ...] = (),
) -> QuerySpec:
    """Validate list parameters for `kind` and compile them into a QuerySpec."""
    if kind not in _UNSCOPED_KINDS and not scope:
        raise ValueError(f"{kind.value} listings require an ownership scope")
    validate_page(page, size)
    field = resolve_sort_field(kind, sort_field)
    sort_direction = parse_direction(direction)
    return QuerySpec(
        scope=tuple(scope),
        filters=compile_filters(kind, filters or {}),
        ordering=(SortOrder(field, sort_direction), TIE_BREAK),
        page=page,
        size=size,
    )


def build_user_search_spec(
    principal: AuthenticatedPrincipal,
    page: int,
    size: int,
    username: str | None = None,
    email: str | None = None,
) -> QuerySpec:
    """User directory search: fixed username ordering, principal excluded."""
    validate_page(page, size)
    return QuerySpec(
        scope=exclude_principal_scope(principal),
        filters=compile_filters(
            ResourceKind.USER_SEARCH, {"username": username, "email": email},
        ),
        ordering=(SortOrder("username", SortDirection.ASC), TIE_BREAK),
        page=page,
        size=size,
    )
