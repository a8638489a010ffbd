"""Create the initial admin account on startup."""

import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from userapi.core.security import hash_password
from userapi.models import ROLE_ADMIN
from userapi.services.user_store import DuplicateUserError, UserStore

if TYPE_CHECKING:
    from userapi.core.config import Settings

logger = logging.getLogger(__name__)


def ensure_seed_admin(session: Session, settings: "Settings") -> bool:
    """
    Insert the seed admin unless a user with SEED_ADMIN_EMAIL already exists.

    Returns True if a user was created. Idempotent: safe to run on every start.
    """
    if not settings.SEED_ADMIN_ENABLED:
        logger.info("Admin seeding is disabled (SEED_ADMIN_ENABLED=false); skipping.")
        return False

    store = UserStore(session)
    if store.find_by_email(settings.SEED_ADMIN_EMAIL) is not None:
        return False

    password_hash = hash_password(
        settings.SEED_ADMIN_PASSWORD.get_secret_value(), rounds=settings.BCRYPT_ROUNDS
    )
    try:
        user = store.create(
            username=settings.SEED_ADMIN_USERNAME,
            email=settings.SEED_ADMIN_EMAIL,
            password_hash=password_hash,
            role=ROLE_ADMIN,
        )
    except DuplicateUserError as e:
        logger.warning("Seed admin not created: %s", e)
        return False
    logger.info("Seed admin created: id=%s username=%s", user.id, user.username)
    return True
