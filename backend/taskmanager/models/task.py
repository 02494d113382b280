"""Task ORM — transitively owned through project.owner_id.

Invariants:
    - project_id is fixed at creation
    - project is always loaded with the task (joined) so the ownership chain is one query
"""

from datetime import date

from sqlalchemy import String, Date, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskmanager.core.domain_types import TaskStatus
from taskmanager.db.base import Base
from taskmanager.models.project import Project


class Task(Base):
    """Unit of work inside a project."""
    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_project_id", "project_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("projects.id"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskStatus.TODO.value,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    project: Mapped[Project] = relationship(
        Project, lazy="joined", innerjoin=True,
    )
