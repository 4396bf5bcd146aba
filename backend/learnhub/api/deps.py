"""API Dependencies — authentication, role gates and adapter injection.

Invariants:
    - get_current_user: missing/invalid/expired bearer token or unknown user → 401
    - require_role(...): authenticated but lacking the role → 403
    - get_push_sender returns None when push is disabled (dispatcher skips delivery)
    - get_file_storage returns None when no bucket is configured (uploads → 502)

Design Decisions:
    - Adapters are process-wide singletons (lru_cache): boto3 clients and the
      Firebase app are expensive to build and safe to share
    - Every adapter is a FastAPI dependency so tests swap in fakes via dependency_overrides
"""

from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.config import get_settings
from learnhub.core.errors import AuthenticationError, PermissionDeniedError
from learnhub.core.service_protocols import FileStorage, PushSender
from learnhub.infrastructure.database import get_db
from learnhub.infrastructure.file_storage import S3FileStorage
from learnhub.infrastructure.push_client import FirebasePushSender
from learnhub.infrastructure.security import (
    AccessTokenCodec, PasswordHasher, get_password_hasher, get_token_codec,
)
from learnhub.models.user import User
from learnhub.services.notification_dispatcher import NotificationDispatcher

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def _firebase_sender() -> FirebasePushSender:
    return FirebasePushSender(get_settings())


@lru_cache
def _s3_storage() -> S3FileStorage:
    return S3FileStorage(get_settings())


def get_codec() -> AccessTokenCodec:
    return get_token_codec()


def get_hasher() -> PasswordHasher:
    return get_password_hasher()


def get_push_sender() -> PushSender | None:
    if not get_settings().push_enabled:
        return None
    return _firebase_sender()


def get_file_storage() -> FileStorage | None:
    if not get_settings().s3_bucket:
        return None
    return _s3_storage()


def get_dispatcher(
    db: AsyncSession = Depends(get_db),
    push_sender: PushSender | None = Depends(get_push_sender),
) -> NotificationDispatcher:
    return NotificationDispatcher(db, push_sender, get_settings().notification_ttl_days)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    codec: AccessTokenCodec = Depends(get_codec),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Missing bearer token", "MISSING_TOKEN")
    claims = codec.decode(credentials.credentials)
    user = await db.get(User, claims["sub"])
    if user is None:
        raise AuthenticationError("User no longer exists", "UNKNOWN_USER")
    return user


def require_role(*roles: str):
    """Dependency factory: the current user must hold one of `roles`."""

    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role_name not in roles:
            raise PermissionDeniedError(
                f"This action requires role: {', '.join(roles)}",
            )
        return user

    return _check


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
