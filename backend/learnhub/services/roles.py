"""Role Service — CRUD over roles plus startup seeding of the built-in ones.

Invariants:
    - Role names are unique (409 on create or rename collision)
    - Built-in roles (teacher, student) can never be deleted
    - A role still assigned to a user cannot be deleted
    - seed_default_roles() only inserts when the roles table is empty
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.domain_types import DEFAULT_ROLES
from learnhub.core.errors import BusinessRuleError, ConflictError, ResourceNotFoundError
from learnhub.models.role import Role
from learnhub.models.user import User

logger = logging.getLogger(__name__)


class RoleService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list(self) -> list[Role]:
        result = await self.db.execute(select(Role).order_by(Role.id))
        return list(result.scalars().all())

    async def get(self, role_id: int) -> Role:
        role = await self.db.get(Role, role_id)
        if role is None:
            raise ResourceNotFoundError("Role", role_id)
        return role

    async def get_by_name(self, name: str) -> Role:
        result = await self.db.execute(select(Role).where(Role.name == name))
        role = result.scalar_one_or_none()
        if role is None:
            raise ResourceNotFoundError("Role", name)
        return role

    async def create(self, name: str) -> Role:
        await self._ensure_name_free(name)
        role = Role(name=name)
        self.db.add(role)
        await self.db.commit()
        logger.info(f"Role created: {name}")
        return role

    async def update(self, role_id: int, name: str) -> Role:
        role = await self.get(role_id)
        if role.name != name:
            await self._ensure_name_free(name)
            role.name = name
            await self.db.commit()
        return role

    async def delete(self, role_id: int) -> None:
        role = await self.get(role_id)
        if role.name in DEFAULT_ROLES:
            raise BusinessRuleError(
                f"Built-in role '{role.name}' cannot be deleted", "PROTECTED_ROLE",
            )
        in_use = await self.db.execute(select(User.id).where(User.role_id == role.id).limit(1))
        if in_use.scalar_one_or_none() is not None:
            raise BusinessRuleError(
                f"Role '{role.name}' is still assigned to users", "ROLE_IN_USE",
            )
        await self.db.delete(role)
        await self.db.commit()
        logger.info(f"Role deleted: {role.name}")

    async def _ensure_name_free(self, name: str) -> None:
        result = await self.db.execute(select(Role.id).where(Role.name == name))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(f"Role '{name}' already exists", "ROLE_EXISTS")


async def seed_default_roles(db: AsyncSession) -> int:
    """Insert the built-in roles into an empty roles table. Returns rows inserted."""
    count = (await db.execute(select(func.count(Role.id)))).scalar_one()
    if count:
        return 0
    db.add_all([Role(name=name) for name in DEFAULT_ROLES])
    await db.commit()
    logger.info(f"Seeded default roles: {', '.join(DEFAULT_ROLES)}")
    return len(DEFAULT_ROLES)
