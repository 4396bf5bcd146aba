"""Refresh-Token Rules — pure decisions for the session lifecycle.

Invariants:
    - Raw refresh tokens are 64 random bytes, hex-encoded (128 chars)
    - Only sha256(token) is persisted; the raw string leaves the process once
    - check_refresh_token_usable is PURE: returns an error descriptor, never raises
    - Device labels come from a fixed, ordered User-Agent keyword table

Design Decisions:
    - Opaque random tokens over JWT refresh tokens: revocation is a row update,
      no signature or clock-skew concerns (ADR: single relational store)
    - Hashing at rest: a leaked DB dump cannot be replayed against /auth/refresh
"""

import hashlib
import secrets
from datetime import datetime, timedelta

from learnhub.core.clock import ensure_utc

REFRESH_TOKEN_BYTES: int = 64
UNKNOWN_DEVICE: str = "Unknown Device"
UNKNOWN_IP: str = "Unknown IP"

# First match wins: phones and tablets also report a desktop-OS token
_DEVICE_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("Mobile", "Mobile Device"),
    ("Tablet", "Tablet"),
    ("Windows", "Windows PC"),
    ("Mac", "Mac"),
    ("Linux", "Linux PC"),
)


def generate_refresh_token() -> str:
    return secrets.token_hex(REFRESH_TOKEN_BYTES)


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_token_expiry(now: datetime, ttl_days: int) -> datetime:
    return now + timedelta(days=ttl_days)


def describe_device(user_agent: str | None) -> str:
    """Map a User-Agent header to a coarse device label."""
    if not user_agent:
        return UNKNOWN_DEVICE
    for keyword, label in _DEVICE_KEYWORDS:
        if keyword in user_agent:
            return label
    return UNKNOWN_DEVICE


def check_refresh_token_usable(
    is_revoked: bool, expires_at: datetime, now: datetime,
) -> dict | None:
    """Return an error descriptor if the token cannot be exchanged, else None."""
    if is_revoked:
        return {
            "error_code": "REFRESH_TOKEN_REVOKED",
            "message": "Refresh token has been revoked",
        }
    if ensure_utc(expires_at) < now:
        return {
            "error_code": "REFRESH_TOKEN_EXPIRED",
            "message": "Refresh token has expired",
        }
    return None
