"""Auth Service — registration, login and bearer-token principal resolution.

Invariants:
    - Registration checks username uniqueness before email uniqueness
    - New accounts always get role USER; passwords are stored hashed
    - Unknown identifier and wrong password fail with the same message
    - A verified token whose subject no longer exists is unauthenticated
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.core.domain_types import AuthenticatedPrincipal, Role
from taskmanager.core.errors import (
    AuthenticationError, ConflictError, InvalidArgumentError,
)
from taskmanager.core.repository_protocols import CredentialStore, TokenService
from taskmanager.infrastructure.repositories import UserRepository
from taskmanager.models import User
from taskmanager.schemas.user import (
    AuthResponse, LoginRequest, RegisterRequest, UserResponse,
)

logger = logging.getLogger(__name__)

USERNAME_TAKEN = "Username is already taken."
EMAIL_TAKEN = "Email is already in use."
BAD_CREDENTIALS = "Invalid username/email or password."


class AuthService:
    """Account creation and credential exchange."""

    def __init__(
        self, db: AsyncSession, tokens: TokenService, credentials: CredentialStore,
    ):
        self.db = db
        self.users = UserRepository(db)
        self.tokens = tokens
        self.credentials = credentials

    async def register(self, body: RegisterRequest) -> UserResponse:
        if await self.users.exists_by_username(body.username):
            raise ConflictError(USERNAME_TAKEN)
        if await self.users.exists_by_email(body.email):
            raise ConflictError(EMAIL_TAKEN)

        user = await self.users.save(User(
            username=body.username,
            email=body.email,
            password_hash=self.credentials.hash(body.password),
            role=Role.USER.value,
        ))
        await self.db.commit()
        logger.info(f"User registered: {user.username}", extra={"user_id": user.id})
        return UserResponse(
            id=user.id, username=user.username, email=user.email,
            role=user.role, created_at=user.created_at,
        )

    async def login(self, body: LoginRequest) -> AuthResponse:
        """Authenticate by username, falling back to email."""
        identifier = body.identifier.strip()
        user = await self.users.find_by_username(identifier)
        if user is None:
            user = await self.users.find_by_email(identifier)
        if user is None or not self.credentials.verify(body.password, user.password_hash):
            raise InvalidArgumentError(BAD_CREDENTIALS)

        return AuthResponse(
            access_token=self.tokens.issue(user.username),
            user_id=user.id,
            username=user.username,
            email=user.email,
            role=user.role,
        )

    async def principal_from_token(self, token: str) -> AuthenticatedPrincipal:
        username = self.tokens.verify(token)
        user = await self.users.find_by_username(username)
        if user is None:
            raise AuthenticationError()
        return AuthenticatedPrincipal(
            id=user.id, username=user.username, role=Role(user.role),
        )
