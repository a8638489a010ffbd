"""Credential store: user records behind a small lookup/insert/update/delete contract.

Outward-facing methods return UserPublic projections. find_by_email and
find_by_username return the ORM row, since login needs the password hash
and uniqueness checks need the id.

Inserts and updates rely on the unique indexes on username and email, so two
concurrent writes with the same value cannot both commit; the loser gets
DuplicateUserError.
"""

import logging
import threading
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from userapi.models import ROLE_ADMIN, ROLE_USER, User
from userapi.schemas.user import UserPublic, UserStats

logger = logging.getLogger(__name__)

# Serializes commits from this process; the unique indexes cover other processes.
_write_lock = threading.Lock()

UPDATABLE_FIELDS = frozenset({"username", "email", "password_hash", "role"})


class DuplicateUserError(Exception):
    """Insert or update would break username/email uniqueness."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"A user with this {field} already exists")


class UserStore:
    """SQLAlchemy-backed user repository bound to one session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_all(self) -> list[UserPublic]:
        rows = self.session.scalars(select(User).order_by(User.id)).all()
        return [UserPublic.model_validate(u) for u in rows]

    def find_page(self, skip: int, limit: int) -> list[UserPublic]:
        """Users ordered by id, rows [skip, skip + limit). Past the end yields []."""
        rows = self.session.scalars(
            select(User).order_by(User.id).offset(skip).limit(limit)
        ).all()
        return [UserPublic.model_validate(u) for u in rows]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(User)) or 0

    def get(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def find_by_id(self, user_id: int) -> UserPublic | None:
        user = self.get(user_id)
        return UserPublic.model_validate(user) if user is not None else None

    def find_by_email(self, email: str) -> User | None:
        return self.session.scalars(select(User).where(User.email == email)).first()

    def find_by_username(self, username: str) -> User | None:
        return self.session.scalars(select(User).where(User.username == username)).first()

    def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: str = ROLE_USER,
    ) -> UserPublic:
        """Insert a user; raises DuplicateUserError if username or email is taken."""
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            role=role,
            created_at=datetime.now(UTC),
        )
        try:
            with _write_lock:
                self.session.add(user)
                self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateUserError(self._duplicate_field(username=username, email=email)) from e
        self.session.refresh(user)
        return UserPublic.model_validate(user)

    def update_by_id(self, user_id: int, patch: dict[str, Any]) -> UserPublic | None:
        """Apply the given fields; returns None if the user does not exist.

        An empty patch writes nothing and leaves updated_at untouched.
        """
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        user = self.get(user_id)
        if user is None:
            return None
        if not patch:
            return UserPublic.model_validate(user)
        try:
            with _write_lock:
                for field, value in patch.items():
                    setattr(user, field, value)
                user.updated_at = datetime.now(UTC)
                self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateUserError(
                self._duplicate_field(
                    username=patch.get("username"),
                    email=patch.get("email"),
                    exclude_id=user_id,
                )
            ) from e
        self.session.refresh(user)
        return UserPublic.model_validate(user)

    def delete_by_id(self, user_id: int) -> bool:
        user = self.get(user_id)
        if user is None:
            return False
        with _write_lock:
            self.session.delete(user)
            self.session.commit()
        return True

    def get_stats(self) -> UserStats:
        counts = dict(
            self.session.execute(select(User.role, func.count()).group_by(User.role)).all()
        )
        return UserStats(
            total_users=sum(counts.values()),
            admin_users=counts.get(ROLE_ADMIN, 0),
            regular_users=counts.get(ROLE_USER, 0),
        )

    def _duplicate_field(
        self,
        *,
        username: str | None,
        email: str | None,
        exclude_id: int | None = None,
    ) -> str:
        """Work out which unique value collided after an IntegrityError."""
        if email is not None:
            other = self.find_by_email(email)
            if other is not None and other.id != exclude_id:
                return "email"
        if username is not None:
            other = self.find_by_username(username)
            if other is not None and other.id != exclude_id:
                return "username"
        logger.warning("IntegrityError on users without a matching duplicate row")
        return "email" if email is not None else "username"
