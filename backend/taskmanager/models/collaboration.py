"""Collaboration ORM — assignment of a participant user to a task.

Invariants:
    - Exactly one row per (task_id, user_id) (unique constraint)
    - At most one responsible row per task: a partial unique index on task_id
      WHERE responsible, so a double-responsible state cannot be committed
    - task_id and user_id are fixed at creation; only `responsible` mutates
"""

from sqlalchemy import Boolean, Integer, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskmanager.db.base import Base
from taskmanager.models.user import User


class Collaboration(Base):
    """Collaborator row; the referenced user is a participant, not an owner."""
    __tablename__ = "collaborations"
    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="uq_collaborations_task_user"),
        Index(
            "uq_collaborations_one_responsible", "task_id",
            unique=True,
            postgresql_where=text("responsible"),
            sqlite_where=text("responsible"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tasks.id"), nullable=False,
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False,
    )
    responsible: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    user: Mapped[User] = relationship(
        User, lazy="joined", innerjoin=True,
    )
