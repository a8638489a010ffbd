"""Unit tests for userapi.core.security: bcrypt password hashing and JWT issue/verify."""

import base64
import json
import unittest
from datetime import timedelta

import jwt

from userapi.core.errors import (
    InvalidSignatureError,
    MalformedTokenError,
    TokenExpiredError,
)
from userapi.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

SECRET = "unit-test-secret"


def _b64url_decode(part: str) -> bytes:
    return base64.urlsafe_b64decode(part + "=" * (-len(part) % 4))


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _token(ttl: timedelta = timedelta(minutes=5), secret: str = SECRET) -> str:
    return create_access_token(7, "alice", "user", secret=secret, ttl=ttl)


class TestHashPassword(unittest.TestCase):
    """hash_password salts every call and verify_password checks against the embedded salt."""

    def test_same_password_hashes_differently(self) -> None:
        first = hash_password("Secret123", rounds=4)
        second = hash_password("Secret123", rounds=4)
        self.assertNotEqual(first, second)
        self.assertTrue(verify_password("Secret123", first))
        self.assertTrue(verify_password("Secret123", second))

    def test_hash_is_not_plaintext(self) -> None:
        hashed = hash_password("Secret123", rounds=4)
        self.assertNotIn("Secret123", hashed)

    def test_wrong_password_returns_false(self) -> None:
        hashed = hash_password("Secret123", rounds=4)
        self.assertFalse(verify_password("secret123", hashed))

    def test_cost_factor_is_recorded_in_hash(self) -> None:
        self.assertTrue(hash_password("Secret123", rounds=4).startswith("$2b$04$"))
        self.assertTrue(hash_password("Secret123", rounds=5).startswith("$2b$05$"))

    def test_hashes_from_different_cost_factors_still_verify(self) -> None:
        old = hash_password("Secret123", rounds=5)
        new = hash_password("Secret123", rounds=4)
        self.assertTrue(verify_password("Secret123", old))
        self.assertTrue(verify_password("Secret123", new))

    def test_garbage_hash_returns_false(self) -> None:
        self.assertFalse(verify_password("Secret123", "not-a-bcrypt-hash"))
        self.assertFalse(verify_password("Secret123", ""))


class TestTokenRoundTrip(unittest.TestCase):
    """A freshly issued token decodes to the claims it was issued with."""

    def test_claims(self) -> None:
        claims = decode_access_token(_token(ttl=timedelta(hours=1)), secret=SECRET)
        self.assertEqual(claims.user_id, 7)
        self.assertEqual(claims.username, "alice")
        self.assertEqual(claims.role, "user")
        self.assertEqual(claims.expires_at - claims.issued_at, timedelta(hours=1))

    def test_ttl_is_a_duration(self) -> None:
        claims = decode_access_token(_token(ttl=timedelta(days=7)), secret=SECRET)
        self.assertEqual(claims.expires_at - claims.issued_at, timedelta(days=7))


class TestTokenExpiry(unittest.TestCase):
    """Tokens at or past exp are rejected with TokenExpiredError."""

    def test_zero_ttl_is_expired(self) -> None:
        with self.assertRaises(TokenExpiredError):
            decode_access_token(_token(ttl=timedelta(0)), secret=SECRET)

    def test_past_expiry_is_expired(self) -> None:
        with self.assertRaises(TokenExpiredError):
            decode_access_token(_token(ttl=timedelta(minutes=-5)), secret=SECRET)


class TestTokenTampering(unittest.TestCase):
    """Tampered or foreign tokens never yield trusted claims."""

    def test_flipped_signature_character(self) -> None:
        header, payload, signature = _token().split(".")
        i = len(signature) // 2
        flipped = "A" if signature[i] != "A" else "B"
        tampered = ".".join([header, payload, signature[:i] + flipped + signature[i + 1 :]])
        with self.assertRaises(InvalidSignatureError):
            decode_access_token(tampered, secret=SECRET)

    def test_wrong_secret(self) -> None:
        with self.assertRaises(InvalidSignatureError):
            decode_access_token(_token(secret="other-secret"), secret=SECRET)

    def test_forged_expiry_is_invalid_not_accepted(self) -> None:
        header, payload, signature = _token(ttl=timedelta(minutes=-5)).split(".")
        claims = json.loads(_b64url_decode(payload))
        claims["exp"] = claims["exp"] + 10 * 365 * 24 * 3600
        forged = ".".join([header, _b64url_encode(json.dumps(claims).encode()), signature])
        with self.assertRaises(InvalidSignatureError):
            decode_access_token(forged, secret=SECRET)

    def test_forged_role_is_invalid(self) -> None:
        header, payload, signature = _token().split(".")
        claims = json.loads(_b64url_decode(payload))
        claims["role"] = "admin"
        forged = ".".join([header, _b64url_encode(json.dumps(claims).encode()), signature])
        with self.assertRaises(InvalidSignatureError):
            decode_access_token(forged, secret=SECRET)

    def test_signature_checked_before_expiry(self) -> None:
        """An expired token signed with another secret reports a bad signature, not expiry."""
        token = _token(ttl=timedelta(minutes=-5), secret="other-secret")
        with self.assertRaises(InvalidSignatureError):
            decode_access_token(token, secret=SECRET)

    def test_unsigned_token_is_rejected(self) -> None:
        token = jwt.encode({"sub": "1", "username": "x", "role": "admin"}, None, algorithm="none")
        with self.assertRaises((InvalidSignatureError, MalformedTokenError)):
            decode_access_token(token, secret=SECRET)


class TestMalformedToken(unittest.TestCase):
    """Input that is not a signed JWT at all raises MalformedTokenError."""

    def test_garbage(self) -> None:
        for value in ("", "not-a-token", "a.b", "a.b.c"):
            with self.subTest(value=value):
                with self.assertRaises(MalformedTokenError):
                    decode_access_token(value, secret=SECRET)

    def test_missing_claims(self) -> None:
        token = jwt.encode({"sub": "1"}, SECRET, algorithm="HS256")
        with self.assertRaises(MalformedTokenError):
            decode_access_token(token, secret=SECRET)

    def test_non_numeric_subject(self) -> None:
        token = jwt.encode(
            {"sub": "alice", "username": "alice", "role": "user", "iat": 0, "exp": 4102444800},
            SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(MalformedTokenError):
            decode_access_token(token, secret=SECRET)


if __name__ == "__main__":
    unittest.main()
