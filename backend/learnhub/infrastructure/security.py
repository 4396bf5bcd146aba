"""Credential Primitives — bcrypt password hashing and HS256 access tokens.

Invariants:
    - Passwords are hashed with bcrypt at settings.bcrypt_rounds; plaintext never persisted
    - Access tokens carry sub (str user id), email, role, type="access", iat, exp
    - decode() rejects expired, tampered and non-access tokens with AuthenticationError

Design Decisions:
    - bcrypt called directly (no passlib wrapper): passlib is unmaintained on Python 3.13
    - Codec is a plain class built from Settings: tests build one with a short TTL
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from learnhub.config import Settings, get_settings
from learnhub.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"

# bcrypt only reads the first 72 bytes of the secret
_BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """bcrypt wrapper with a configurable cost factor."""

    def __init__(self, rounds: int = 10):
        self._rounds = rounds

    def hash(self, password: str) -> str:
        secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
        except ValueError:
            # Malformed hash in the DB: treat as a failed login, not a 500
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False


class AccessTokenCodec:
    """Issues and verifies short-lived JWT access tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 1800):
        self._secret = secret
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def issue(self, user_id: int, email: str, role: str | None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "type": ACCESS_TOKEN_TYPE,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=self.ttl_seconds)).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Access token has expired", "TOKEN_EXPIRED")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid access token", "INVALID_TOKEN")
        if claims.get("type") != ACCESS_TOKEN_TYPE:
            raise AuthenticationError("Invalid access token", "INVALID_TOKEN")
        try:
            claims["sub"] = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Invalid access token", "INVALID_TOKEN")
        return claims


def get_password_hasher(settings: Settings | None = None) -> PasswordHasher:
    settings = settings or get_settings()
    return PasswordHasher(settings.bcrypt_rounds)


def get_token_codec(settings: Settings | None = None) -> AccessTokenCodec:
    settings = settings or get_settings()
    return AccessTokenCodec(
        settings.jwt_secret, settings.jwt_algorithm, settings.access_token_ttl_seconds,
    )
