"""Fixtures for integration tests against PostgreSQL.

A dedicated ``<database>_test`` database is created once per session and
migrated with Alembic. Each test then runs inside a connection-level
transaction that is rolled back afterwards, so tests never see each other's
rows. The whole suite is skipped when PostgreSQL can't be reached.
"""

import asyncio
import os
from collections.abc import AsyncGenerator, Callable, Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import asyncpg
import jwt
import pytest
from alembic import command as alembic_command
from alembic.config import Config
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from src.api.main import create_app
from src.core.config import SavingsConfig, Settings, get_settings
from src.core.context import RequestContext
from src.infrastructure.database.dependencies import get_db
from src.infrastructure.database.models import User
from src.infrastructure.repositories import SavingsGoalRepository, UserRepository

PROJECT_ROOT = Path(__file__).parent.parent.parent
TOKEN_SECRET = "integration-signing-secret-0123456789abcdef"


def _asyncpg_dsn(url: str) -> str:
    return url.replace("postgresql+asyncpg://", "postgresql://")


async def _recreate_database(admin_url: str, name: str) -> None:
    conn = await asyncpg.connect(_asyncpg_dsn(admin_url))
    try:
        await conn.execute(f'DROP DATABASE IF EXISTS "{name}" WITH (FORCE)')
        await conn.execute(f'CREATE DATABASE "{name}"')
    finally:
        await conn.close()


async def _drop_database(admin_url: str, name: str) -> None:
    conn = await asyncpg.connect(_asyncpg_dsn(admin_url))
    try:
        await conn.execute(f'DROP DATABASE IF EXISTS "{name}" WITH (FORCE)')
    finally:
        await conn.close()


def _run_migrations(database_url: str) -> None:
    """Upgrade the database to head; env.py reads the URL from settings."""
    original = os.environ.get("DATABASE_CONFIG__DATABASE_URL")
    os.environ["DATABASE_CONFIG__DATABASE_URL"] = database_url
    get_settings.cache_clear()
    try:
        alembic_command.upgrade(Config(str(PROJECT_ROOT / "alembic.ini")), "head")
    finally:
        if original is None:
            os.environ.pop("DATABASE_CONFIG__DATABASE_URL", None)
        else:
            os.environ["DATABASE_CONFIG__DATABASE_URL"] = original
        get_settings.cache_clear()


@pytest.fixture(scope="session")
def database_url() -> Generator[str]:
    """URL of a freshly migrated test database."""
    admin_url = get_settings().database_config.database_url
    test_url = get_settings().database_config.get_test_database_url()
    name = make_url(test_url).database or "payvault_db_test"

    try:
        asyncio.run(_recreate_database(admin_url, name))
    except (OSError, asyncpg.PostgresError) as e:
        pytest.skip(f"PostgreSQL is not available: {e}")

    _run_migrations(test_url)
    yield test_url
    asyncio.run(_drop_database(admin_url, name))


@pytest.fixture
async def db_engine(database_url: str) -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(database_url, pool_size=5, max_overflow=0)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session inside a transaction that is rolled back after the test.

    Commits and savepoints issued by the code under test stay inside the
    outer transaction.
    """
    async with db_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(
            bind=connection,
            expire_on_commit=False,
            join_transaction_mode="create_savepoint",
        )
        try:
            async with session:
                yield session
        finally:
            await transaction.rollback()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def goals(db_session: AsyncSession) -> SavingsGoalRepository:
    return SavingsGoalRepository(db_session)


@pytest.fixture
def users(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def savings_config() -> SavingsConfig:
    return SavingsConfig()


@pytest.fixture
async def user(users: UserRepository) -> User:
    return await users.create(User(external_id="did:privy:integration", email="f@example.com"))


@pytest.fixture
def integration_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[Settings]:
    monkeypatch.setenv("AUTH_CONFIG__TOKEN_SECRET", TOKEN_SECRET)
    monkeypatch.setenv("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest.fixture
def app(integration_settings: Settings, db_session: AsyncSession) -> FastAPI:
    """The real application with its sessions bound to the test transaction."""
    application = create_app(integration_settings)

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_settings] = lambda: integration_settings
    return application


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Authorization header carrying a token for the given user."""

    def _headers(for_user: User) -> dict[str, str]:
        token = jwt.encode(
            {
                "sub": for_user.external_id,
                "exp": datetime.now(UTC) + timedelta(minutes=5),
            },
            TOKEN_SECRET,
            algorithm="HS256",
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
