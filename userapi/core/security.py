"""Password hashing and JWT creation/verification for authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt
from pydantic import ValidationError

from userapi.core.config import settings
from userapi.core.errors import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from userapi.schemas.auth import TokenClaims

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_PASSWORD_BYTES = 72

REQUIRED_CLAIMS = ["sub", "username", "role", "iat", "exp"]


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords.

    Every call uses a fresh salt, so hashing the same password twice gives two
    different strings. The cost factor is embedded in the hash.
    """
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (any cost factor)."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(
    user_id: int,
    username: str,
    role: str,
    *,
    secret: str | None = None,
    ttl: timedelta | None = None,
) -> str:
    """Create a signed JWT carrying user id (sub), username, role, iat and exp = iat + ttl."""
    now = datetime.now(UTC)
    expire = now + (ttl if ttl is not None else settings.token_ttl)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(
        payload,
        secret or settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str, *, secret: str | None = None) -> TokenClaims:
    """
    Verify a JWT and return its claims.

    The signature is checked before any claim is read, so a forged ``exp``
    cannot turn an invalid token into an "expired" one.
    Raises MalformedTokenError, InvalidSignatureError or TokenExpiredError.
    """
    if not token or not isinstance(token, str):
        raise MalformedTokenError("Token is empty")
    try:
        payload = jwt.decode(
            token,
            secret or settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token expired") from e
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
        raise InvalidSignatureError("Token signature is invalid") from e
    except jwt.PyJWTError as e:
        raise MalformedTokenError("Token could not be decoded") from e

    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            username=payload["username"],
            role=payload["role"],
            issued_at=datetime.fromtimestamp(payload["iat"], UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], UTC),
        )
    except (TypeError, ValueError, ValidationError) as e:
        raise MalformedTokenError("Invalid token payload") from e
