"""TaskFile ORM — metadata of an uploaded file; the bytes live elsewhere.

Invariants:
    - task_id is fixed at creation
    - file_url is an opaque location reference produced by a BlobLocator
"""

from sqlalchemy import String, Integer, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskmanager.db.base import Base
from taskmanager.models.task import Task


class TaskFile(Base):
    """File attached to a task."""
    __tablename__ = "files"
    __table_args__ = (Index("ix_files_task_id", "task_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tasks.id"), nullable=False,
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(255), nullable=True)

    task: Mapped[Task] = relationship(
        Task, lazy="joined", innerjoin=True,
    )
