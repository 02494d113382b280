"""User Routes — self-service profile and directory search."""

from fastapi import APIRouter, Depends, Query

from taskmanager.api.dependencies import get_current_principal, get_user_service
from taskmanager.core.domain_types import AuthenticatedPrincipal
from taskmanager.schemas.common import PageResponse
from taskmanager.schemas.user import (
    UpdateUserRequest, UserResponse, UserSearchResponse,
)
from taskmanager.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    users: UserService = Depends(get_user_service),
):
    return await users.get_self(principal)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    body: UpdateUserRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    users: UserService = Depends(get_user_service),
):
    return await users.update_self(principal, body)


@router.get("/search", response_model=PageResponse[UserSearchResponse])
async def search_users(
    page: int = Query(0),
    size: int = Query(20),
    username: str | None = Query(None),
    email: str | None = Query(None),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    users: UserService = Depends(get_user_service),
):
    """Directory search ordered by username; the caller is never listed."""
    result = await users.search(principal, page, size, username, email)
    return PageResponse[UserSearchResponse].from_page(result)
