"""LearnHub API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LearnHubError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized, default roles seeded and scheduler started in lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Scheduler opt-in (scheduler_enabled): with several uvicorn workers only one
      process should run the cleanup jobs
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnhub.api.error_handlers import register_error_handlers
from learnhub.api.routes import (
    admin, auth, device_tokens, groups, health, homework, lessons, notifications,
    roles, users,
)
from learnhub.config import get_settings
from learnhub.infrastructure.database import init_db
from learnhub.infrastructure.observability import setup_logging
from learnhub.infrastructure.scheduler import build_scheduler
from learnhub.services.roles import seed_default_roles

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    async with manager.session() as db:
        await seed_default_roles(db)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = build_scheduler()
        scheduler.start()
        logger.info("Cleanup scheduler started")

    logger.info("LearnHub API started")
    yield
    logger.info("LearnHub API shutting down")
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    await manager.dispose()


app = FastAPI(
    title="LearnHub API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(roles.router)
app.include_router(groups.router)
app.include_router(lessons.router)
app.include_router(homework.router)
app.include_router(notifications.router)
app.include_router(device_tokens.router)
app.include_router(admin.router)
