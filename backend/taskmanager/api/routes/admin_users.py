"""Admin User Routes — unscoped user listing and deletion, ADMIN role only."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from taskmanager.api.dependencies import get_user_service, require_admin, role_filter
from taskmanager.core.domain_types import AuthenticatedPrincipal, Role
from taskmanager.schemas.common import PageResponse
from taskmanager.schemas.user import UserResponse
from taskmanager.services.user_service import UserService

router = APIRouter(prefix="/admin/users", tags=["admin"])


@router.get("", response_model=PageResponse[UserResponse])
async def list_users(
    page: int = Query(0),
    size: int = Query(20),
    sort_by: str = Query("username", alias="sortBy"),
    direction: str = Query("ASC"),
    username: str | None = Query(None),
    email: str | None = Query(None),
    creation_date: date | None = Query(None, alias="creationDate"),
    _: AuthenticatedPrincipal = Depends(require_admin),
    role: Role | None = Depends(role_filter),
    users: UserService = Depends(get_user_service),
):
    result = await users.admin_list(
        page, size, sort_by, direction, username, email, role, creation_date,
    )
    return PageResponse[UserResponse].from_page(result)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    principal: AuthenticatedPrincipal = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    await users.admin_delete(principal, user_id)
