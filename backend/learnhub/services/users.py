"""User Service — account CRUD for teachers managing the roster.

Invariants:
    - Emails stored lower-cased and unique (409 on collision)
    - Passwords hashed before persistence, on create and on update
    - Role referenced by name; unknown names are 404
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.errors import ConflictError, ResourceNotFoundError
from learnhub.infrastructure.security import PasswordHasher
from learnhub.models.user import User
from learnhub.services.roles import RoleService

logger = logging.getLogger(__name__)


class UserService:

    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher
        self.roles = RoleService(db)

    async def list(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def get(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user

    async def create(self, name: str, email: str, password: str, role: str) -> User:
        email = email.lower()
        await self._ensure_email_free(email)
        role_row = await self.roles.get_by_name(role)
        user = User(
            name=name, email=email,
            password_hash=self.hasher.hash(password), role=role_row,
        )
        self.db.add(user)
        await self.db.commit()
        logger.info("User created", extra={"user_id": user.id})
        return user

    async def update(
        self,
        user_id: int,
        name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        role: str | None = None,
    ) -> User:
        user = await self.get(user_id)
        if email is not None and email.lower() != user.email:
            await self._ensure_email_free(email.lower())
            user.email = email.lower()
        if name is not None:
            user.name = name.strip()
        if password is not None:
            user.password_hash = self.hasher.hash(password)
        if role is not None:
            user.role = await self.roles.get_by_name(role)
        await self.db.commit()
        return user

    async def delete(self, user_id: int) -> None:
        user = await self.get(user_id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info("User deleted", extra={"user_id": user_id})

    async def _ensure_email_free(self, email: str) -> None:
        result = await self.db.execute(select(User.id).where(User.email == email))
        if result.scalar_one_or_none() is not None:
            raise ConflictError("Email already registered", "EMAIL_TAKEN")
