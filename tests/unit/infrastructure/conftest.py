"""Fixtures for infrastructure unit tests."""

from collections.abc import Callable

import pytest
from pytest_mock import MockerFixture, MockType
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ClauseElement


@pytest.fixture
def mock_session(mocker: MockerFixture) -> MockType:
    """Async session whose ``execute`` returns a configurable result mock."""
    session = mocker.AsyncMock(spec=AsyncSession)
    session.execute.return_value = mocker.Mock()
    return session


@pytest.fixture
def compiled_sql() -> Callable[[ClauseElement], str]:
    """Render a statement the way PostgreSQL receives it."""

    def _compile(stmt: ClauseElement) -> str:
        return " ".join(str(stmt.compile(dialect=postgresql.dialect())).split())

    return _compile
