"""Cleanup Scheduler — daily expiry jobs on APScheduler's asyncio scheduler.

Invariants:
    - Refresh-token cleanup at 02:00 UTC, notification cleanup at 03:00 UTC
    - coalesce=True, max_instances=1: a missed or slow run never stacks up
    - Jobs open sessions through db_manager, so they see the same pool as requests
    - A failing job logs and returns; the scheduler keeps running

Design Decisions:
    - AsyncIOScheduler over BackgroundScheduler: jobs are coroutines on the app's loop
    - Built and started from the FastAPI lifespan only when scheduler_enabled
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from learnhub.core.errors import LearnHubError
from learnhub.infrastructure.database import get_db_manager
from learnhub.services.maintenance import (
    cleanup_expired_notifications, cleanup_expired_tokens,
)

logger = logging.getLogger(__name__)


async def _run_token_cleanup() -> None:
    try:
        await cleanup_expired_tokens(get_db_manager().session)
    except LearnHubError as e:
        logger.error(f"Scheduled refresh-token cleanup failed: {e.message}")


async def _run_notification_cleanup() -> None:
    try:
        await cleanup_expired_notifications(get_db_manager().session)
    except LearnHubError as e:
        logger.error(f"Scheduled notification cleanup failed: {e.message}")


def build_scheduler() -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(
        timezone="UTC",
        job_defaults={"coalesce": True, "max_instances": 1},
    )
    scheduler.add_job(
        _run_token_cleanup,
        CronTrigger(hour=2, minute=0, timezone="UTC"),
        id="cleanup_expired_tokens",
        replace_existing=True,
    )
    scheduler.add_job(
        _run_notification_cleanup,
        CronTrigger(hour=3, minute=0, timezone="UTC"),
        id="cleanup_expired_notifications",
        replace_existing=True,
    )
    return scheduler
