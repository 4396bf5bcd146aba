"""Refresh-Token Rules — generation, hashing, expiry checks and device labels.

Tests:
    - Raw tokens are 128 hex chars and unique per call
    - hash_refresh_token is deterministic sha256 hex
    - check_refresh_token_usable: revoked beats expired; naive expiry treated as UTC
    - describe_device keyword order: Mobile before Linux (Android UAs carry both)
"""

import hashlib
from datetime import datetime, timedelta, timezone

from learnhub.core.token_rules import (
    UNKNOWN_DEVICE,
    check_refresh_token_usable,
    describe_device,
    generate_refresh_token,
    hash_refresh_token,
    refresh_token_expiry,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_generated_token_is_128_hex_chars():
    token = generate_refresh_token()
    assert len(token) == 128
    int(token, 16)


def test_generated_tokens_are_unique():
    assert len({generate_refresh_token() for _ in range(50)}) == 50


def test_hash_is_sha256_hex():
    assert hash_refresh_token("abc") == hashlib.sha256(b"abc").hexdigest()
    assert len(hash_refresh_token("abc")) == 64


def test_expiry_adds_ttl_days():
    assert refresh_token_expiry(NOW, 30) == NOW + timedelta(days=30)


def test_usable_token_returns_none():
    assert check_refresh_token_usable(False, NOW + timedelta(days=1), NOW) is None


def test_revoked_token_rejected():
    err = check_refresh_token_usable(True, NOW + timedelta(days=1), NOW)
    assert err["error_code"] == "REFRESH_TOKEN_REVOKED"
    assert err["message"] == "Refresh token has been revoked"


def test_expired_token_rejected():
    err = check_refresh_token_usable(False, NOW - timedelta(seconds=1), NOW)
    assert err["error_code"] == "REFRESH_TOKEN_EXPIRED"
    assert err["message"] == "Refresh token has expired"


def test_revoked_checked_before_expiry():
    err = check_refresh_token_usable(True, NOW - timedelta(days=1), NOW)
    assert err["error_code"] == "REFRESH_TOKEN_REVOKED"


def test_naive_expiry_is_treated_as_utc():
    naive_future = (NOW + timedelta(hours=1)).replace(tzinfo=None)
    assert check_refresh_token_usable(False, naive_future, NOW) is None


def test_describe_device_labels():
    assert describe_device("Mozilla/5.0 (Windows NT 10.0; Win64; x64)") == "Windows PC"
    assert describe_device("Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0)") == "Mac"
    assert describe_device("Mozilla/5.0 (X11; Linux x86_64)") == "Linux PC"
    assert describe_device("Mozilla/5.0 (Tablet; rv:109.0)") == "Tablet"


def test_describe_device_mobile_wins_over_linux():
    ua = "Mozilla/5.0 (Linux; Android 14) AppleWebKit/537.36 Mobile Safari/537.36"
    assert describe_device(ua) == "Mobile Device"


def test_describe_device_unknown():
    assert describe_device(None) == UNKNOWN_DEVICE
    assert describe_device("") == UNKNOWN_DEVICE
    assert describe_device("curl/8.4.0") == UNKNOWN_DEVICE
