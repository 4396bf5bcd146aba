"""Maintenance — expiry cleanup for refresh tokens and notifications.

Invariants:
    - Each cleanup runs in its own session and commits independently
    - run_all_cleanups() returns {refresh_tokens: {deleted_count}, notifications: {deleted_count}}

Design Decisions:
    - Takes a session factory, not a session: shared by the scheduler, the admin
      endpoint and `python -m learnhub.services.maintenance`
"""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.services.notification_dispatcher import NotificationDispatcher
from learnhub.services.refresh_tokens import RefreshTokenService

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


async def cleanup_expired_tokens(session_factory: SessionFactory) -> dict:
    async with session_factory() as db:
        return await RefreshTokenService(db).cleanup_expired()


async def cleanup_expired_notifications(session_factory: SessionFactory) -> dict:
    async with session_factory() as db:
        return await NotificationDispatcher(db).cleanup_expired()


async def run_all_cleanups(session_factory: SessionFactory) -> dict:
    return {
        "refresh_tokens": await cleanup_expired_tokens(session_factory),
        "notifications": await cleanup_expired_notifications(session_factory),
    }


async def _main() -> None:
    from learnhub.config import get_settings
    from learnhub.db.session import create_session_factory
    from learnhub.infrastructure.observability import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    factory = create_session_factory(settings.database_url)
    try:
        result = await run_all_cleanups(factory)
        logger.info(f"Cleanup finished: {result}")
    finally:
        await factory.kw["bind"].dispose()


if __name__ == "__main__":
    asyncio.run(_main())
