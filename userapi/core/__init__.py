"""Core app configuration, database, errors and security primitives."""

from userapi.core.config import get_settings, settings
from userapi.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
