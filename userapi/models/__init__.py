"""SQLAlchemy ORM models."""

from userapi.models.base import Base
from userapi.models.user import ROLE_ADMIN, ROLE_USER, ROLES, User

__all__ = ["Base", "ROLE_ADMIN", "ROLE_USER", "ROLES", "User"]
