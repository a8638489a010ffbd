"""ORM model for application users (auth and RBAC)."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String

from userapi.models.base import Base

ROLE_ADMIN = "admin"
ROLE_USER = "user"
ROLES = (ROLE_ADMIN, ROLE_USER)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'admin' or 'user'. username and email are each unique; the unique
    indexes are what serialize concurrent registrations.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(30), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role!r}>"
