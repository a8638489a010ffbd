"""Request/response schemas for auth endpoints and token claims."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from userapi.schemas.user import APIModel, UserPublic

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 30
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"

Role = Literal["admin", "user"]


def check_password_strength(password: str) -> str:
    """Require at least one lowercase letter, one uppercase letter and one digit."""
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one number")
    return password


class RegisterRequest(BaseModel):
    """New account details."""

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
        description="Letters, digits and underscores",
    )
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class UserUpdateRequest(BaseModel):
    """Partial update; omitted (or null) fields are left as they are."""

    username: str | None = Field(
        default=None,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
    )
    email: EmailStr | None = None
    password: str | None = Field(
        default=None, min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN
    )

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        return v if v is None else check_password_strength(v)


class AuthResponse(APIModel):
    """Token plus public user view, returned by register and login."""

    message: str
    token: str = Field(..., description="JWT access token; send as 'Authorization: Bearer <token>'")
    user: UserPublic


class AuthResult(BaseModel):
    token: str
    user: UserPublic


class TokenClaims(BaseModel):
    """Claims carried by a verified access token."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    role: Role
    issued_at: datetime
    expires_at: datetime


class CurrentUser(BaseModel):
    """Authenticated requester (id, username, role) bound to a single request."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "CurrentUser":
        return cls(id=claims.user_id, username=claims.username, role=claims.role)
