"""Task Manager API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TaskManagerError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Logging and the database are initialized on startup via the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py to keep this module's imports small
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskmanager.api.error_handlers import register_error_handlers
from taskmanager.api.routes import (
    admin_users, auth, collaborators, files, health, projects, tasks, users,
)
from taskmanager.config import get_settings
from taskmanager.infrastructure import database
from taskmanager.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Task Manager API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Task Manager API shutting down")


app = FastAPI(title="Task Manager API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin_users.router)
app.include_router(projects.router)
app.include_router(tasks.router)
app.include_router(files.router)
app.include_router(collaborators.router)

register_error_handlers(app)
