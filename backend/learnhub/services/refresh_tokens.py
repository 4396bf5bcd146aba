"""Refresh Token Service — session lifecycle: issue, validate, rotate, revoke, expire.

Invariants:
    - At most one live refresh token per (user, device_info): issuing revokes the others
    - validate() rejects unknown, revoked and expired tokens with distinct 401 messages
    - rotate() issues the new pair and revokes the presented token in ONE commit
    - list_active() returns only non-revoked, non-expired rows, newest first
    - Public methods commit; underscore helpers only flush

Design Decisions:
    - Lookup by sha256(token) on a unique index: constant-cost, no raw token at rest
    - Revocation via bulk UPDATE: logout-all touches every row without loading them
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.clock import utc_now
from learnhub.core.errors import AuthenticationError, ResourceNotFoundError
from learnhub.core.token_rules import (
    UNKNOWN_DEVICE, UNKNOWN_IP,
    check_refresh_token_usable, generate_refresh_token, hash_refresh_token,
    refresh_token_expiry,
)
from learnhub.infrastructure.security import AccessTokenCodec
from learnhub.models.refresh_token import RefreshToken

logger = logging.getLogger(__name__)


class RefreshTokenService:
    """Refresh-token persistence and rotation for one request's session."""

    def __init__(self, db: AsyncSession, ttl_days: int = 30):
        self.db = db
        self.ttl_days = ttl_days

    # ─── Issue ──────────────────────────────────────────────────

    async def create(
        self, user_id: int, device_info: str | None = None, ip_address: str | None = None,
    ) -> str:
        """Issue a refresh token and return the raw string (shown to the client once)."""
        raw = await self._issue(user_id, device_info, ip_address)
        await self.db.commit()
        return raw

    async def _issue(
        self, user_id: int, device_info: str | None, ip_address: str | None,
    ) -> str:
        if device_info:
            revoked = await self._revoke_where(
                RefreshToken.user_id == user_id,
                RefreshToken.device_info == device_info,
            )
            if revoked:
                logger.info(
                    f"Revoked {revoked} previous session(s) on the same device",
                    extra={"user_id": user_id, "device_info": device_info},
                )
        raw = generate_refresh_token()
        self.db.add(RefreshToken(
            token_hash=hash_refresh_token(raw),
            user_id=user_id,
            expires_at=refresh_token_expiry(utc_now(), self.ttl_days),
            device_info=device_info or UNKNOWN_DEVICE,
            ip_address=ip_address or UNKNOWN_IP,
        ))
        await self.db.flush()
        return raw

    # ─── Validate / Rotate ──────────────────────────────────────

    async def validate(self, token: str) -> RefreshToken:
        row = await self._validate(token)
        await self.db.commit()
        return row

    async def _validate(self, token: str) -> RefreshToken:
        row = await self._find_by_string(token)
        if row is None:
            raise AuthenticationError("Invalid refresh token", "INVALID_REFRESH_TOKEN")
        problem = check_refresh_token_usable(row.is_revoked, row.expires_at, utc_now())
        if problem:
            logger.warning(
                problem["message"],
                extra={"user_id": row.user_id, "error_code": problem["error_code"]},
            )
            raise AuthenticationError(problem["message"], problem["error_code"])
        row.last_used_at = utc_now()
        return row

    async def rotate(self, token: str, codec: AccessTokenCodec) -> dict:
        """Exchange a refresh token for a new access/refresh pair."""
        old = await self._validate(token)
        user = old.user
        new_raw = await self._issue(user.id, old.device_info, old.ip_address)
        old.is_revoked = True
        await self.db.commit()
        logger.info("Refresh token rotated", extra={"user_id": user.id})
        return {
            "access_token": codec.issue(user.id, user.email, user.role_name),
            "refresh_token": new_raw,
            "token_type": "Bearer",
            "expires_in": codec.ttl_seconds,
        }

    # ─── Revoke ─────────────────────────────────────────────────

    async def revoke(self, token_id: int) -> bool:
        count = await self._revoke_where(RefreshToken.id == token_id)
        await self.db.commit()
        return count > 0

    async def revoke_by_string(self, token: str) -> None:
        """Revoke by raw token. Unknown tokens are ignored so logout is idempotent."""
        row = await self._find_by_string(token)
        if row is None or row.is_revoked:
            return
        row.is_revoked = True
        await self.db.commit()
        logger.info("Refresh token revoked", extra={"user_id": row.user_id})

    async def revoke_all(self, user_id: int) -> int:
        count = await self._revoke_where(RefreshToken.user_id == user_id)
        await self.db.commit()
        logger.info(f"Revoked {count} session(s)", extra={"user_id": user_id})
        return count

    async def revoke_by_device(self, user_id: int, device_info: str) -> int:
        count = await self._revoke_where(
            RefreshToken.user_id == user_id,
            RefreshToken.device_info == device_info,
        )
        await self.db.commit()
        return count

    async def revoke_session(self, user_id: int, session_id: int) -> None:
        """Revoke one of the caller's own sessions; other users' sessions are 404."""
        result = await self.db.execute(
            select(RefreshToken).where(
                RefreshToken.id == session_id,
                RefreshToken.user_id == user_id,
            ),
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise ResourceNotFoundError("Session", session_id)
        row.is_revoked = True
        await self.db.commit()

    async def _revoke_where(self, *conditions) -> int:
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.is_revoked.is_(False), *conditions)
            .values(is_revoked=True, updated_at=utc_now()),
        )
        return result.rowcount or 0

    # ─── Query / Maintenance ────────────────────────────────────

    async def list_active(self, user_id: int) -> list[RefreshToken]:
        result = await self.db.execute(
            select(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > utc_now(),
            )
            .order_by(RefreshToken.created_at.desc(), RefreshToken.id.desc()),
        )
        return list(result.scalars().all())

    async def cleanup_expired(self) -> dict:
        result = await self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.expires_at < utc_now())
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        deleted = result.rowcount or 0
        logger.info(
            f"Deleted {deleted} expired refresh token(s)",
            extra={"deleted_count": deleted},
        )
        return {"deleted_count": deleted}

    async def _find_by_string(self, token: str) -> RefreshToken | None:
        result = await self.db.execute(
            select(RefreshToken).where(
                RefreshToken.token_hash == hash_refresh_token(token),
            ),
        )
        return result.scalar_one_or_none()
