"""Database Session Manager — async engine, per-request sessions, error translation.

Invariants:
    - A session that raises is rolled back before the error propagates
    - SQLAlchemy exceptions never escape: unique-key races become ConflictError (409),
      everything else DatabaseError (503)
    - get_db() fails loudly if called before init_db() (lifespan not run)

Design Decisions:
    - Module-level db_manager created in lifespan, not at import
      (ADR: no global import side effects)
    - expire_on_commit=False: services return ORM objects after commit and
      response models read them outside the session
    - Pool arguments skipped for SQLite: aiosqlite uses a static pool
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from learnhub.core.errors import (
    ConflictError, DatabaseError, LearnHubError,
)

logger = logging.getLogger(__name__)


def _translate(exc: SQLAlchemyError) -> LearnHubError:
    if isinstance(exc, IntegrityError):
        return ConflictError(
            "Request conflicts with existing data", "INTEGRITY_CONFLICT",
        )
    if isinstance(exc, OperationalError):
        return DatabaseError("Connection or operational error", "execute")
    return DatabaseError("Database operation failed", "query")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back on failure."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"{type(e).__name__}: {e}")
            raise _translate(e)
        except LearnHubError:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session; False on any failure."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    if db_manager is None:
        raise RuntimeError("Database not initialized; call init_db() first")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_db_manager().session() as session:
        yield session
