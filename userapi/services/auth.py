"""Auth core: registration, login, profile and user administration.

Every operation either returns a value or raises one AppError subclass
(ConflictError, UnauthorizedError, ForbiddenError, NotFoundError,
ValidationFailedError). Role and ownership checks live in the small
predicates below so they can be tested without HTTP.
"""

import logging
from datetime import timedelta
from functools import lru_cache

from userapi.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
)
from userapi.core.security import create_access_token, hash_password, verify_password
from userapi.models import ROLE_USER, User
from userapi.schemas.auth import AuthResult, CurrentUser, UserUpdateRequest
from userapi.schemas.user import UserPage, UserPublic, UserStats
from userapi.services.user_store import DuplicateUserError, UserStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def can_access_user(requester: CurrentUser, target_id: int) -> bool:
    """Admins may act on anyone; everyone else only on themselves."""
    return requester.is_admin or requester.id == target_id


def ensure_can_access_user(requester: CurrentUser, target_id: int, message: str) -> None:
    if not can_access_user(requester, target_id):
        raise ForbiddenError(message)


def ensure_admin(requester: CurrentUser, message: str = "Admin access required") -> None:
    if not requester.is_admin:
        raise ForbiddenError(message)


def _conflict(field: str) -> ConflictError:
    return ConflictError(
        f"A user with this {field} already exists",
        error=f"{field.capitalize()} already exists",
    )


@lru_cache
def _dummy_hash(rounds: int | None) -> str:
    """Hash compared against when the email is unknown, so both login failures cost the same."""
    return hash_password("not-a-real-password", rounds=rounds)


class AuthService:
    """Orchestrates the user store, password hasher and token service."""

    def __init__(
        self,
        store: UserStore,
        *,
        secret: str | None = None,
        ttl: timedelta | None = None,
        bcrypt_rounds: int | None = None,
    ) -> None:
        self.store = store
        self.secret = secret
        self.ttl = ttl
        self.bcrypt_rounds = bcrypt_rounds

    def issue_token(self, user: UserPublic | User) -> str:
        return create_access_token(
            user.id, user.username, user.role, secret=self.secret, ttl=self.ttl
        )

    def register(self, username: str, email: str, password: str) -> AuthResult:
        """Create a 'user' account and return a token for it."""
        if self.store.find_by_email(email) is not None:
            raise ConflictError("A user with this email already exists")
        if self.store.find_by_username(username) is not None:
            raise ConflictError("A user with this username already exists")

        password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        try:
            user = self.store.create(
                username=username,
                email=email,
                password_hash=password_hash,
                role=ROLE_USER,
            )
        except DuplicateUserError as e:
            # Lost a race with a concurrent registration.
            raise ConflictError(f"A user with this {e.field} already exists") from e

        logger.info("User registered: id=%s username=%s", user.id, user.username)
        return AuthResult(token=self.issue_token(user), user=user)

    def login(self, email: str, password: str) -> AuthResult:
        """Check credentials. Unknown email and wrong password fail identically."""
        record = self.store.find_by_email(email)
        if record is None:
            verify_password(password, _dummy_hash(self.bcrypt_rounds))
            logger.warning("Login failed")
            raise UnauthorizedError(INVALID_CREDENTIALS, error="Invalid credentials")
        if not verify_password(password, record.password_hash):
            logger.warning("Login failed")
            raise UnauthorizedError(INVALID_CREDENTIALS, error="Invalid credentials")

        user = UserPublic.model_validate(record)
        logger.info("User logged in: id=%s", user.id)
        return AuthResult(token=self.issue_token(user), user=user)

    def get_profile(self, user_id: int) -> UserPublic:
        """Profile of the token holder; user_id must come from verified claims."""
        user = self.store.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User profile not found")
        return user

    def get_user_by_id(self, requester: CurrentUser, target_id: int) -> UserPublic:
        ensure_can_access_user(requester, target_id, "You can only access your own profile")
        user = self.store.find_by_id(target_id)
        if user is None:
            raise NotFoundError()
        return user

    def update_user(
        self,
        requester: CurrentUser,
        target_id: int,
        patch: UserUpdateRequest,
    ) -> UserPublic:
        """Partial update of username, email and/or password."""
        ensure_can_access_user(requester, target_id, "You can only update your own profile")

        changes: dict[str, str] = {}
        if patch.username is not None:
            existing = self.store.find_by_username(patch.username)
            if existing is not None and existing.id != target_id:
                raise _conflict("username")
            changes["username"] = patch.username
        if patch.email is not None:
            existing = self.store.find_by_email(patch.email)
            if existing is not None and existing.id != target_id:
                raise _conflict("email")
            changes["email"] = patch.email
        if patch.password is not None:
            changes["password_hash"] = hash_password(patch.password, rounds=self.bcrypt_rounds)

        try:
            user = self.store.update_by_id(target_id, changes)
        except DuplicateUserError as e:
            raise _conflict(e.field) from e
        if user is None:
            raise NotFoundError()
        logger.info(
            "User updated: id=%s by=%s fields=%s", target_id, requester.id, sorted(changes)
        )
        return user

    def delete_user(self, requester: CurrentUser, target_id: int) -> None:
        ensure_admin(requester, "Admin access required to delete users")
        if requester.id == target_id:
            raise ValidationFailedError(
                "You cannot delete your own account", error="Invalid operation"
            )
        if not self.store.delete_by_id(target_id):
            raise NotFoundError()
        logger.info("User deleted: id=%s by=%s", target_id, requester.id)

    def list_users(self, requester: CurrentUser, page: int, page_size: int) -> UserPage:
        """Offset pagination: skip = (page - 1) * page_size. Pages past the end are empty."""
        ensure_admin(requester)
        if page < 1 or page_size < 1:
            raise ValidationFailedError("page and limit must be positive integers")
        skip = (page - 1) * page_size
        return UserPage(users=self.store.find_page(skip, page_size), total=self.store.count())

    def get_stats(self, requester: CurrentUser) -> UserStats:
        ensure_admin(requester)
        return self.store.get_stats()
