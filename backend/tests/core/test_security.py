"""Credential Primitives — bcrypt hashing and JWT access-token round trips.

Tests:
    - Hashes verify only the original password; malformed hashes fail closed
    - Issued tokens carry sub/email/role/type/iat/exp
    - Expired, tampered and non-access tokens raise AuthenticationError
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from learnhub.core.errors import AuthenticationError
from learnhub.infrastructure.security import AccessTokenCodec, PasswordHasher

SECRET = "unit-test-secret"


def test_password_hash_verifies():
    hasher = PasswordHasher(rounds=4)
    hashed = hasher.hash("correct horse")
    assert hashed != "correct horse"
    assert hasher.verify("correct horse", hashed)
    assert not hasher.verify("wrong horse", hashed)


def test_malformed_hash_fails_closed():
    assert not PasswordHasher(rounds=4).verify("anything", "not-a-bcrypt-hash")


def test_issue_and_decode_claims():
    codec = AccessTokenCodec(SECRET, ttl_seconds=600)
    claims = codec.decode(codec.issue(7, "ada@example.com", "teacher"))
    assert claims["sub"] == 7
    assert claims["email"] == "ada@example.com"
    assert claims["role"] == "teacher"
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == 600


def test_sub_is_string_on_the_wire():
    codec = AccessTokenCodec(SECRET)
    raw = jwt.decode(codec.issue(7, "a@b.co", "student"), SECRET, algorithms=["HS256"])
    assert raw["sub"] == "7"


def test_expired_token_rejected():
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = jwt.encode(
        {"sub": "1", "type": "access", "iat": int(past.timestamp()),
         "exp": int((past + timedelta(minutes=1)).timestamp())},
        SECRET, algorithm="HS256",
    )
    with pytest.raises(AuthenticationError) as exc:
        AccessTokenCodec(SECRET).decode(token)
    assert exc.value.code == "TOKEN_EXPIRED"


def test_wrong_secret_rejected():
    token = AccessTokenCodec("other-secret").issue(1, "a@b.co", "student")
    with pytest.raises(AuthenticationError):
        AccessTokenCodec(SECRET).decode(token)


def test_non_access_token_rejected():
    token = jwt.encode(
        {"sub": "1", "type": "refresh",
         "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())},
        SECRET, algorithm="HS256",
    )
    with pytest.raises(AuthenticationError):
        AccessTokenCodec(SECRET).decode(token)
