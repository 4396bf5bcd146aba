"""Auth Service — registration, credential login and token-pair issuance.

Invariants:
    - Self-registration always assigns the "student" role
    - Unknown email and wrong password fail with the SAME 401 message
    - Login issues an access token AND a refresh token bound to the caller's device/IP

Design Decisions:
    - Device label derived from User-Agent here, not in the route: the session list
      and same-device revocation both key on it
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.domain_types import RoleName
from learnhub.core.errors import AuthenticationError, ConflictError, ResourceNotFoundError
from learnhub.core.token_rules import describe_device
from learnhub.infrastructure.security import AccessTokenCodec, PasswordHasher
from learnhub.models.role import Role
from learnhub.models.user import User
from learnhub.services.refresh_tokens import RefreshTokenService

logger = logging.getLogger(__name__)

_INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:

    def __init__(
        self,
        db: AsyncSession,
        hasher: PasswordHasher,
        codec: AccessTokenCodec,
        refresh_ttl_days: int = 30,
    ):
        self.db = db
        self.hasher = hasher
        self.codec = codec
        self.refresh_tokens = RefreshTokenService(db, refresh_ttl_days)

    async def register(self, name: str, email: str, password: str) -> User:
        email = email.lower()
        if await self._find_by_email(email) is not None:
            raise ConflictError("Email already registered", "EMAIL_TAKEN")

        result = await self.db.execute(
            select(Role).where(Role.name == RoleName.STUDENT.value),
        )
        role = result.scalar_one_or_none()
        if role is None:
            raise ResourceNotFoundError("Role", RoleName.STUDENT.value)

        user = User(
            name=name, email=email,
            password_hash=self.hasher.hash(password), role=role,
        )
        self.db.add(user)
        await self.db.commit()
        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def login(
        self, email: str, password: str,
        user_agent: str | None = None, ip_address: str | None = None,
    ) -> dict:
        user = await self._find_by_email(email.lower())
        if user is None or not self.hasher.verify(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthenticationError(_INVALID_CREDENTIALS, "INVALID_CREDENTIALS")

        refresh_token = await self.refresh_tokens.create(
            user.id, describe_device(user_agent), ip_address,
        )
        logger.info("User logged in", extra={"user_id": user.id})
        return {
            "access_token": self.codec.issue(user.id, user.email, user.role_name),
            "refresh_token": refresh_token,
            "token_type": "Bearer",
            "expires_in": self.codec.ttl_seconds,
            "user": user,
        }

    async def refresh(self, refresh_token: str) -> dict:
        return await self.refresh_tokens.rotate(refresh_token, self.codec)

    async def logout(self, refresh_token: str) -> None:
        await self.refresh_tokens.revoke_by_string(refresh_token)

    async def logout_all(self, user_id: int) -> int:
        return await self.refresh_tokens.revoke_all(user_id)

    async def _find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()
