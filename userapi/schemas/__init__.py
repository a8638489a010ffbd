"""Pydantic request/response schemas."""

from userapi.schemas.auth import (
    AuthResponse,
    AuthResult,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenClaims,
    UserUpdateRequest,
)
from userapi.schemas.health import HealthResponse, RootResponse
from userapi.schemas.user import (
    MessageResponse,
    Pagination,
    UserPage,
    UserPublic,
    UsersListResponse,
    UserStats,
    UserUpdateResponse,
)

__all__ = [
    "AuthResponse",
    "AuthResult",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "Pagination",
    "RegisterRequest",
    "RootResponse",
    "TokenClaims",
    "UserPage",
    "UserPublic",
    "UserStats",
    "UserUpdateRequest",
    "UserUpdateResponse",
    "UsersListResponse",
]
