"""Project ORM — owned by exactly one User.

Invariants:
    - owner_id is fixed at creation
    - end_date, when set, is >= start_date (enforced in core/enforce_dates.py)

Design Decisions:
    - No ORM cascade: deletion of tasks is explicit in ProjectService
"""

from datetime import date

from sqlalchemy import String, Date, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from taskmanager.core.domain_types import ProjectStatus
from taskmanager.db.base import Base


class Project(Base):
    """Top-level container of tasks."""
    __tablename__ = "projects"
    __table_args__ = (Index("ix_projects_owner_id", "owner_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.ACTIVE.value,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
