"""User Schemas — registration, login, self-service and admin views.

Invariants:
    - username: 3-50 chars, stripped, non-blank
    - email: valid address, at most 254 chars
    - password: 8-100 chars with lower, upper, digit and special character

Design Decisions:
    - Password policy checked in a field_validator: the policy needs lookaheads,
      which pydantic's pattern engine does not support
"""

import re
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from taskmanager.core.domain_types import Role


PASSWORD_POLICY = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&#.^()\-_=+]).{8,100}$"
)
PASSWORD_POLICY_MESSAGE = (
    "Password must contain upper and lower case letters, a digit and a "
    "special character."
)


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr = Field(max_length=254)
    password: str = Field(min_length=8, max_length=100)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("username must be at least 3 non-blank characters")
        return v

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, v: str) -> str:
        if not PASSWORD_POLICY.match(v):
            raise ValueError(PASSWORD_POLICY_MESSAGE)
        return v


class LoginRequest(BaseModel):
    """Login by username or email."""
    identifier: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UpdateUserRequest(BaseModel):
    email: EmailStr | None = Field(None, max_length=254)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: Role
    created_at: datetime


class UserSearchResponse(BaseModel):
    """Directory entry; exposes no ids or roles."""
    username: str
    email: str


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    email: str
    role: Role
