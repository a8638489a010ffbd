"""
Create a user (e.g. an extra admin). Run from project root:
  python -m userapi.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m userapi.scripts.create_user ops ops@example.com Str0ngPass admin
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from userapi.core.config import get_settings
from userapi.core.database import SessionLocal, init_db
from userapi.core.security import hash_password
from userapi.models import ROLES
from userapi.schemas.auth import RegisterRequest
from userapi.services.user_store import DuplicateUserError, UserStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user account from the command line.")
    parser.add_argument("username", help="Username (3-30 letters, digits, underscores)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6-128 chars, mixed case and a digit)")
    parser.add_argument("role", nargs="?", default="user", choices=list(ROLES))
    args = parser.parse_args(argv)

    try:
        data = RegisterRequest(
            username=args.username.strip(), email=args.email.strip(), password=args.password
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    settings = get_settings()
    init_db()
    db = SessionLocal()
    try:
        user = UserStore(db).create(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password, rounds=settings.BCRYPT_ROUNDS),
            role=args.role,
        )
        logger.info("Created user '%s' (id=%s) with role '%s'.", user.username, user.id, user.role)
        return 0
    except DuplicateUserError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
