"""Database Session Manager — one async engine, per-request sessions, schema readiness.

Invariants:
    - One AsyncSession per request; the service commits once at the end
    - A session that raises is rolled back before the error leaves the manager
    - Driver-level SQLAlchemy exceptions become DatabaseError (core/errors.py);
      domain errors (TaskManagerError) pass through untouched
    - Readiness means reachable AND migrated: every table in SCHEMA_TABLES exists

Design Decisions:
    - Singleton db_manager initialized from the FastAPI lifespan
    - expire_on_commit=False: services build views after commit without reloading
    - Pool sizing only applies to server databases (SQLite runs on its default pool)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import inspect
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from taskmanager.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Tables created by alembic revision 001, in dependency order.
SCHEMA_TABLES = ("users", "projects", "tasks", "files", "collaborations")

# Most specific first; the first isinstance match wins.
_DRIVER_ERRORS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


class DatabaseSessionManager:
    """Owns the engine and hands out request-scoped sessions."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            for error_type, message, operation in _DRIVER_ERRORS:
                if isinstance(e, error_type):
                    logger.error(f"{message}: {e}")
                    raise DatabaseError(message, operation) from e
            raise
        finally:
            await session.close()

    async def missing_tables(self) -> list[str] | None:
        """Schema tables absent from the database, or None when it is unreachable."""
        try:
            async with self.engine.connect() as conn:
                present = await conn.run_sync(
                    lambda sync_conn: set(inspect(sync_conn).get_table_names())
                )
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Schema inspection failed: {e}")
            return None
        return [name for name in SCHEMA_TABLES if name not in present]

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
