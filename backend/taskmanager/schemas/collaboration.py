"""Collaboration Schemas — assignment body and collaborator view."""

from pydantic import BaseModel


class AddCollaboratorRequest(BaseModel):
    """Assign a user to a task; responsible=True promotes them."""
    user_id: int
    responsible: bool


class CollaboratorResponse(BaseModel):
    user_id: int
    username: str
    email: str
    responsible: bool
