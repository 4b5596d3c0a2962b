"""Conftest for API unit tests.

The application is built with the real middleware and exception handlers;
the database-backed dependencies are overridden with in-memory stores.
"""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pytest_mock import MockerFixture

from src.api.dependencies import (
    get_allocation_engine,
    get_current_user,
    get_goal_repository,
    get_tax_vault_manager,
)
from src.api.main import create_app
from src.core.config import Settings, get_settings
from src.domain.savings.allocation import AllocationEngine
from src.domain.savings.tax_vault import TaxVaultManager
from src.infrastructure.database.dependencies import get_db
from src.infrastructure.database.models import User
from tests.unit.stores import InMemoryGoalStore, InMemoryUserStore

TOKEN_SECRET = "unit-test-signing-secret-0123456789abcdef"

TokenFactory = Callable[..., str]


@pytest.fixture
def api_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("OBSERVABILITY_CONFIG__ENABLE_TRACING", "false")
    monkeypatch.setenv("AUTH_CONFIG__TOKEN_SECRET", TOKEN_SECRET)
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def goal_store() -> InMemoryGoalStore:
    return InMemoryGoalStore()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def current_user(user_store: InMemoryUserStore) -> User:
    return user_store.add(1)


@pytest.fixture
def bare_app(api_settings: Settings, mocker: MockerFixture) -> FastAPI:
    """Application with only the database session replaced."""
    app = create_app(api_settings)

    async def _no_db() -> AsyncGenerator[object]:
        yield mocker.AsyncMock()

    app.dependency_overrides[get_db] = _no_db
    return app


@pytest.fixture
def app(
    bare_app: FastAPI,
    api_settings: Settings,
    goal_store: InMemoryGoalStore,
    user_store: InMemoryUserStore,
    current_user: User,
) -> FastAPI:
    """Application authenticated as ``current_user`` over in-memory stores."""
    config = api_settings.savings_config
    bare_app.dependency_overrides.update(
        {
            get_current_user: lambda: current_user,
            get_goal_repository: lambda: goal_store,
            get_allocation_engine: lambda: AllocationEngine(goal_store, config),
            get_tax_vault_manager: lambda: TaxVaultManager(goal_store, user_store, config),
        }
    )
    return bare_app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def bare_client(bare_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=bare_app), base_url="http://test"
    ) as c:
        yield c


@pytest.fixture
def make_token() -> TokenFactory:
    """Sign tokens the way the identity provider does."""

    def _make(
        subject: str | None = "did:privy:user-1",
        *,
        secret: str = TOKEN_SECRET,
        expires_in: timedelta = timedelta(minutes=5),
    ) -> str:
        claims: dict[str, object] = {"exp": datetime.now(UTC) + expires_in}
        if subject is not None:
            claims["sub"] = subject
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make
