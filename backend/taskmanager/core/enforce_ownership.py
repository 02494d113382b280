"""Ownership Enforcement — pure accept/reject decisions over an already-loaded chain.

Invariants:
    - Owner comparison is by primary-key equality, never object identity
    - check_owner is called with the ROOT owner id of the chain (project.owner_id)
    - check_parent guards id-confusion: the child's real parent must equal the path parent
    - Pure: no IO, the caller loads the chain fresh for every call

Design Decisions:
    - Loading lives in services/ownership_resolver.py; this module only decides
    - Messages name the resource kind so the transport can surface them verbatim
"""

from taskmanager.core.domain_types import AuthenticatedPrincipal, ResourceKind
from taskmanager.core.errors import (
    AccessDeniedError, ErrorContext, InvalidArgumentError,
)


_DENIED_MESSAGES: dict[ResourceKind, str] = {
    ResourceKind.PROJECT: "Access denied: project does not belong to current user.",
    ResourceKind.TASK: (
        "Access denied: task does not belong to a project of current user."
    ),
    ResourceKind.FILE: (
        "Access denied: file does not belong to a task of current user."
    ),
    ResourceKind.COLLABORATOR: (
        "Access denied: task does not belong to a project of current user."
    ),
}

_LABELS: dict[ResourceKind, str] = {
    ResourceKind.PROJECT: "project",
    ResourceKind.TASK: "task",
    ResourceKind.FILE: "file",
    ResourceKind.COLLABORATOR: "collaborator",
}


def check_owner(
    principal: AuthenticatedPrincipal, owner_id: int, kind: ResourceKind,
) -> None:
    """Raise AccessDeniedError unless principal.id equals the chain's root owner id."""
    if owner_id != principal.id:
        raise AccessDeniedError(
            _DENIED_MESSAGES[kind],
            ErrorContext(user_id=principal.id, resource=kind.value),
        )


def check_parent(
    actual_parent_id: int, expected_parent_id: int,
    child: ResourceKind, parent: ResourceKind,
) -> None:
    """Raise InvalidArgumentError when a child is addressed under the wrong parent."""
    if actual_parent_id != expected_parent_id:
        raise InvalidArgumentError(
            f"{_LABELS[child].capitalize()} does not belong to the specified "
            f"{_LABELS[parent]}.",
        )
