"""API Dependencies — principal resolution, role gates, service factories, request guards.

Invariants:
    - The AuthenticatedPrincipal is built once per request, here, from a verified token
    - Missing or invalid bearer credentials -> AuthenticationError (401)
    - Admin routes additionally require Role.ADMIN -> AccessDeniedError (403)
    - Enum query filters are case-normalized here, before any service runs
    - Requests whose Content-Length exceeds settings.max_request_bytes -> 413

Design Decisions:
    - Adapters (token service, credential store, blob locator) are built from
      settings so tests can override them with app.dependency_overrides
"""

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.config import Settings, get_settings
from taskmanager.core.domain_types import (
    AuthenticatedPrincipal, ProjectStatus, Role, TaskStatus, parse_enum,
)
from taskmanager.core.errors import (
    AccessDeniedError, AuthenticationError, PayloadTooLargeError,
)
from taskmanager.infrastructure.blob_storage import MockBlobLocator
from taskmanager.infrastructure.database import get_db
from taskmanager.infrastructure.security import (
    BcryptCredentialStore, JwtTokenService,
)
from taskmanager.services.auth_service import AuthService
from taskmanager.services.collaboration_service import CollaborationService
from taskmanager.services.file_service import FileService
from taskmanager.services.project_service import ProjectService
from taskmanager.services.task_service import TaskService
from taskmanager.services.user_service import UserService

bearer_scheme = HTTPBearer(auto_error=False)


# ─── Adapters ────────────────────────────────────────────────────

def get_token_service(settings: Settings = Depends(get_settings)) -> JwtTokenService:
    return JwtTokenService(
        settings.jwt_secret_key,
        settings.jwt_algorithm,
        settings.access_token_expire_minutes,
    )


def get_credential_store() -> BcryptCredentialStore:
    return BcryptCredentialStore()


def get_blob_locator(settings: Settings = Depends(get_settings)) -> MockBlobLocator:
    return MockBlobLocator(settings.storage_base_path)


# ─── Services ────────────────────────────────────────────────────

def get_auth_service(
    db: AsyncSession = Depends(get_db),
    tokens: JwtTokenService = Depends(get_token_service),
    credentials: BcryptCredentialStore = Depends(get_credential_store),
) -> AuthService:
    return AuthService(db, tokens, credentials)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_project_service(db: AsyncSession = Depends(get_db)) -> ProjectService:
    return ProjectService(db)


def get_task_service(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


def get_file_service(
    db: AsyncSession = Depends(get_db),
    locator: MockBlobLocator = Depends(get_blob_locator),
) -> FileService:
    return FileService(db, locator)


def get_collaboration_service(
    db: AsyncSession = Depends(get_db),
) -> CollaborationService:
    return CollaborationService(db)


# ─── Principal ───────────────────────────────────────────────────

async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> AuthenticatedPrincipal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()
    return await auth.principal_from_token(credentials.credentials)


async def require_admin(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
) -> AuthenticatedPrincipal:
    if not principal.is_admin:
        raise AccessDeniedError("Access denied: admin role required.")
    return principal


# ─── Query parsing ───────────────────────────────────────────────

def project_status_filter(
    status: str | None = Query(None),
) -> ProjectStatus | None:
    return parse_enum(ProjectStatus, status, "status")


def task_status_filter(status: str | None = Query(None)) -> TaskStatus | None:
    return parse_enum(TaskStatus, status, "status")


def role_filter(role: str | None = Query(None)) -> Role | None:
    return parse_enum(Role, role, "role")


# ─── Request guards ──────────────────────────────────────────────

async def enforce_request_ceiling(
    request: Request, settings: Settings = Depends(get_settings),
) -> None:
    """Reject requests whose declared body size exceeds the transport ceiling."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit():
        if int(declared) > settings.max_request_bytes:
            raise PayloadTooLargeError(settings.max_request_bytes)
