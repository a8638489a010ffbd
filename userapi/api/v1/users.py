"""User administration routes: list, stats, fetch, update, delete."""

import math
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from userapi.api.v1.auth import get_auth_service, get_current_user
from userapi.schemas.auth import CurrentUser, UserUpdateRequest
from userapi.schemas.user import (
    MessageResponse,
    Pagination,
    UserPublic,
    UsersListResponse,
    UserStats,
    UserUpdateResponse,
)
from userapi.services.auth import AuthService

router = APIRouter()

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
MAX_USER_ID = 2**63 - 1

UserId = Annotated[int, Path(ge=1, le=MAX_USER_ID)]


@router.get("", response_model=UsersListResponse)
def list_users(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = DEFAULT_PAGE_SIZE,
) -> UsersListResponse:
    """List users (admin only). A page past the end returns an empty list."""
    result = service.list_users(current_user, page, limit)
    return UsersListResponse(
        users=result.users,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=result.total,
            total_pages=math.ceil(result.total / limit),
        ),
    )


@router.get("/stats", response_model=UserStats)
def get_stats(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserStats:
    """User counts in total and by role (admin only)."""
    return service.get_stats(current_user)


@router.get("/{user_id}", response_model=UserPublic)
def get_user(
    user_id: UserId,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserPublic:
    """Fetch a user. Non-admins may only fetch themselves."""
    return service.get_user_by_id(current_user, user_id)


@router.put("/{user_id}", response_model=UserUpdateResponse)
def update_user(
    user_id: UserId,
    body: UserUpdateRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserUpdateResponse:
    """Partially update username, email and/or password (owner or admin)."""
    user = service.update_user(current_user, user_id, body)
    return UserUpdateResponse(user=user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: UserId,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> MessageResponse:
    """Delete a user (admin only; admins cannot delete themselves)."""
    service.delete_user(current_user, user_id)
    return MessageResponse(message="User deleted successfully")
