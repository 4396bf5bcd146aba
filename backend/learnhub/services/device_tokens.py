"""Device Token Service — one push channel (FCM token) per user.

Invariants:
    - register() on an unknown user raises ResourceNotFoundError
    - Re-registering the same token is a no-op returning the existing row
    - A new token replaces every other token the user had
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.errors import ResourceNotFoundError
from learnhub.models.device_token import DeviceToken
from learnhub.models.user import User

logger = logging.getLogger(__name__)


class DeviceTokenService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, user_id: int, token: str) -> DeviceToken:
        user = await self.db.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)

        result = await self.db.execute(
            select(DeviceToken).where(
                DeviceToken.user_id == user_id, DeviceToken.token == token,
            ),
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            return existing

        await self.db.execute(
            delete(DeviceToken)
            .where(DeviceToken.user_id == user_id)
            .execution_options(synchronize_session=False),
        )
        device_token = DeviceToken(user_id=user_id, token=token)
        self.db.add(device_token)
        await self.db.commit()
        logger.info("Device token registered", extra={"user_id": user_id})
        return device_token

    async def tokens_for_users(self, user_ids: list[int]) -> list[str]:
        if not user_ids:
            return []
        result = await self.db.execute(
            select(DeviceToken.token).where(DeviceToken.user_id.in_(user_ids)),
        )
        return list(result.scalars().all())

    async def remove_tokens(self, tokens: list[str]) -> int:
        """Delete tokens the push transport reported as unregistered. Flushes only."""
        if not tokens:
            return 0
        result = await self.db.execute(
            delete(DeviceToken)
            .where(DeviceToken.token.in_(tokens))
            .execution_options(synchronize_session=False),
        )
        return result.rowcount or 0
