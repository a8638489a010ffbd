"""Register/login/me routes and auth dependencies (get_current_user)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from userapi.core.config import settings
from userapi.core.database import get_db
from userapi.core.errors import TokenError, TokenExpiredError, UnauthorizedError
from userapi.core.security import decode_access_token
from userapi.schemas.auth import AuthResponse, CurrentUser, LoginRequest, RegisterRequest
from userapi.schemas.user import UserPublic
from userapi.services.auth import AuthService
from userapi.services.user_store import UserStore

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_auth_service(db: Annotated[Session, Depends(get_db)]) -> AuthService:
    """Dependency: auth core bound to the request's DB session."""
    return AuthService(UserStore(db), bcrypt_rounds=settings.BCRYPT_ROUNDS)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer JWT and return the requester from its claims.

    No role check here; each operation applies its own. Raises 401 when the
    header is missing, the token is invalid or it has expired.
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")
    try:
        claims = decode_access_token(credentials.credentials)
    except TokenExpiredError:
        raise UnauthorizedError("Token expired")
    except TokenError:
        raise UnauthorizedError("Invalid token")
    current_user = CurrentUser.from_claims(claims)
    request.state.user = current_user
    return current_user


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """Create an account (role 'user') and return a JWT for it."""
    result = service.register(body.username, body.email, body.password)
    return AuthResponse(
        message="User registered successfully", token=result.token, user=result.user
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    result = service.login(body.email, body.password)
    return AuthResponse(message="Login successful", token=result.token, user=result.user)


@router.get("/me", response_model=UserPublic)
def me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserPublic:
    """Profile of the token holder."""
    return service.get_profile(current_user.id)
