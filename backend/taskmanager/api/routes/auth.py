"""Auth Routes — registration and login (the only unauthenticated endpoints)."""

from fastapi import APIRouter, Depends, status

from taskmanager.api.dependencies import get_auth_service
from taskmanager.schemas.user import (
    AuthResponse, LoginRequest, RegisterRequest, UserResponse,
)
from taskmanager.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest, auth: AuthService = Depends(get_auth_service),
):
    return await auth.register(body)


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Exchange username-or-email plus password for a bearer token."""
    return await auth.login(body)
