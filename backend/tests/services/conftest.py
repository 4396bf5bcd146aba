"""Service test fixtures — async DB, FastAPI test client, fake push and storage.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the default roles seeded
    - get_db dependency overridden to use the test DB
    - db_manager patched for code paths that open their own sessions (admin cleanup)
    - Push and storage adapters replaced by in-memory fakes that record every call

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Fakes over mocks: FakePushSender/FakeStorage satisfy the Protocols structurally
    - Assertions read through a NEW session (fresh_db) so they see committed state,
      not objects cached in the request session
"""

from collections.abc import Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import learnhub.infrastructure.database as db_module
from learnhub.api.deps import get_file_storage, get_push_sender
from learnhub.db.base import Base
from learnhub.infrastructure.database import DatabaseSessionManager, get_db
from learnhub.infrastructure.security import (
    AccessTokenCodec, PasswordHasher, get_token_codec,
)
from learnhub.main import app
import learnhub.models  # noqa: F401
from learnhub.models.role import Role
from learnhub.models.user import User
from learnhub.services.roles import seed_default_roles
from tests.services.fakes import TEST_PASSWORD, FakePushSender, FakeStorage


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with factory() as session:
        await seed_default_roles(session)
    return factory


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fresh_db(test_session_factory) -> Callable[[], AsyncSession]:
    """Open a new session for assertions on committed state."""
    return test_session_factory


@pytest.fixture
def fake_push() -> FakePushSender:
    return FakePushSender()


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_push, fake_storage):
    """FastAPI test client with DB, push and storage dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_push_sender] = lambda: fake_push
    app.dependency_overrides[get_file_storage] = lambda: fake_storage

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Users & auth ────────────────────────────────────────────────

@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def codec() -> AccessTokenCodec:
    return get_token_codec()


@pytest.fixture
def make_user(test_session_factory, hasher):
    """Factory: insert a user with the given role name and return it."""
    counter = {"n": 0}

    async def _make(role: str = "student", name: str | None = None, email: str | None = None) -> User:
        counter["n"] += 1
        async with test_session_factory() as db:
            role_row = (
                await db.execute(select(Role).where(Role.name == role))
            ).scalar_one()
            user = User(
                name=name or f"{role.title()} {counter['n']}",
                email=email or f"{role}{counter['n']}@example.com",
                password_hash=hasher.hash(TEST_PASSWORD),
                role_id=role_row.id,
            )
            db.add(user)
            await db.commit()
            return await db.get(User, user.id, populate_existing=True)

    return _make


@pytest.fixture
async def teacher(make_user) -> User:
    return await make_user("teacher", name="Ada Teacher", email="teacher@example.com")


@pytest.fixture
async def student(make_user) -> User:
    return await make_user("student", name="Sam Student", email="student@example.com")


@pytest.fixture
def auth_headers(codec) -> Callable[[User], dict]:
    def _headers(user: User) -> dict:
        token = codec.issue(user.id, user.email, user.role_name)
        return {"Authorization": f"Bearer {token}"}
    return _headers
