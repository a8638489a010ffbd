"""User-facing schemas: the public view of a user record and admin listings."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserPublic(APIModel):
    """
    User record safe for external exposure.

    Built from the ORM row with from_attributes; password_hash is not a field
    here, so it can never be serialized.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: str
    created_at: datetime
    updated_at: datetime | None = None

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """SQLite drops tzinfo on read; stored values are always UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    total_pages: int


class UsersListResponse(APIModel):
    """Response for GET /users (admin only)."""

    users: list[UserPublic]
    pagination: Pagination


class UserPage(BaseModel):
    """One page of users plus the total count, as returned by the auth core."""

    users: list[UserPublic]
    total: int


class UserStats(APIModel):
    """Response for GET /users/stats (admin only)."""

    total_users: int = Field(..., description="All users")
    admin_users: int = Field(..., description="Users with role 'admin'")
    regular_users: int = Field(..., description="Users with role 'user'")


class UserUpdateResponse(APIModel):
    message: str = "User updated successfully"
    user: UserPublic


class MessageResponse(APIModel):
    message: str
