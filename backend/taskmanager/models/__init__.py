"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the root of every ownership chain

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves relationships and
      Base.metadata is complete before create_all / alembic autogenerate
"""

from taskmanager.models.user import User  # noqa: F401
from taskmanager.models.project import Project  # noqa: F401
from taskmanager.models.task import Task  # noqa: F401
from taskmanager.models.task_file import TaskFile  # noqa: F401
from taskmanager.models.collaboration import Collaboration  # noqa: F401
