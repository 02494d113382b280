"""Responsibility Enforcement — the per-task collaborator responsibility state machine.

States (derived from a task's collaborator rows):
    NO_COLLABORATORS -> NONE_RESPONSIBLE -> ONE_RESPONSIBLE
    Two responsible rows is not a state; derive_state rejects it.

Invariants:
    - At most one responsible row per task between operations
    - Promoting an already-responsible row is a Conflict (stale client view)
    - Promotion demotes the previous responsible row (different user) first
    - Explicit demotion (responsible=False) is always accepted
    - The responsible row is never removed; the caller promotes a replacement first
    - Pure: plan_* functions return decisions, the service applies them

Design Decisions:
    - Snapshots (user_id, responsible) instead of ORM rows: the core never sees the session
    - No auto-selection of a replacement on removal
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from taskmanager.core.errors import ConflictError, ResourceNotFoundError


ALREADY_RESPONSIBLE = "User is already responsible for this task."
REMOVE_RESPONSIBLE = (
    "Cannot remove the responsible collaborator without assigning another "
    "responsible first."
)
NO_RESPONSIBLE = "No responsible collaborator defined for this task."


class ResponsibilityState(str, Enum):
    NO_COLLABORATORS = "no_collaborators"
    NONE_RESPONSIBLE = "none_responsible"
    ONE_RESPONSIBLE = "one_responsible"


@dataclass(frozen=True)
class CollaboratorSnapshot:
    user_id: int
    responsible: bool


@dataclass(frozen=True)
class AssignmentPlan:
    """What the service must write, in order: demote, then create/update target."""
    create_row: bool
    demote_user_id: int | None
    responsible: bool


def derive_state(rows: Iterable[CollaboratorSnapshot]) -> ResponsibilityState:
    rows = list(rows)
    if not rows:
        return ResponsibilityState.NO_COLLABORATORS
    responsible = sum(1 for r in rows if r.responsible)
    if responsible > 1:
        raise ValueError(f"task has {responsible} responsible collaborators")
    if responsible == 1:
        return ResponsibilityState.ONE_RESPONSIBLE
    return ResponsibilityState.NONE_RESPONSIBLE


def plan_assignment(
    target_user_id: int,
    existing: CollaboratorSnapshot | None,
    current_responsible: CollaboratorSnapshot | None,
    requested_responsible: bool,
) -> AssignmentPlan:
    """Decide the writes for addOrUpdateCollaborator. Pure, no state mutation."""
    if requested_responsible and existing is not None and existing.responsible:
        raise ConflictError(ALREADY_RESPONSIBLE)

    demote = None
    if (
        requested_responsible
        and current_responsible is not None
        and current_responsible.user_id != target_user_id
    ):
        demote = current_responsible.user_id

    return AssignmentPlan(
        create_row=existing is None,
        demote_user_id=demote,
        responsible=requested_responsible,
    )


def check_removal(
    target: CollaboratorSnapshot,
    current_responsible: CollaboratorSnapshot | None,
) -> None:
    """Reject removal of the responsible row unless another responsible row exists."""
    if not target.responsible:
        return
    has_replacement = (
        current_responsible is not None
        and current_responsible.user_id != target.user_id
    )
    if not has_replacement:
        raise ConflictError(REMOVE_RESPONSIBLE)


def require_responsible(
    current_responsible: CollaboratorSnapshot | None,
) -> CollaboratorSnapshot:
    if current_responsible is None:
        raise ResourceNotFoundError("Collaborator", message=NO_RESPONSIBLE)
    return current_responsible
