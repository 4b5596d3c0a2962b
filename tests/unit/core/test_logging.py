"""Unit tests for src/core/logging.py."""

import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import orjson
import pytest
from pytest_mock import MockerFixture

from src.core import logging as payvault_logging
from src.core.config import Settings
from src.core.logging import (
    DEFAULT_LOG_FORMAT,
    InterceptHandler,
    format_console_with_context,
    serialize_for_json,
    setup_logging,
)


@pytest.fixture
def record(mocker: MockerFixture) -> dict[str, Any]:
    level = mocker.Mock()
    level.name = "INFO"
    return {
        "time": datetime(2026, 1, 15, 9, 30, tzinfo=UTC),
        "level": level,
        "name": "src.domain.savings.allocation",
        "function": "allocate",
        "line": 10,
        "message": "Allocated payment",
        "extra": {},
        "exception": None,
    }


@pytest.fixture
def fresh_logging_state() -> Generator[None]:
    original = payvault_logging._state.configured
    payvault_logging._state.configured = False
    yield
    payvault_logging._state.configured = original


@pytest.mark.unit
class TestConsoleFormatter:
    def test_priority_fields_first(self, record: dict[str, Any]) -> None:
        record["extra"] = {
            "goal_count": 3,
            "user_id": 7,
            "correlation_id": "0123456789abcdef",
            "duration_ms": 12.5,
        }

        line = format_console_with_context(record)

        assert "<yellow>01234567</yellow>" in line
        assert "<yellow>12.5ms</yellow>" in line
        assert line.index("<yellow>7</yellow>") < line.index("goal_count=3")
        assert line.endswith("Allocated payment\n")

    def test_braces_are_escaped(self, record: dict[str, Any]) -> None:
        record["message"] = "payload {amount}"
        record["extra"] = {"detail": {"a": 1}}

        line = format_console_with_context(record)

        assert "payload {{amount}}" in line
        assert "detail={{'a': 1}}" in line

    def test_sensitive_extra_fields_redacted(self, record: dict[str, Any]) -> None:
        record["extra"] = {"token": "abc"}

        assert "token=[REDACTED]" in format_console_with_context(record)

    def test_long_values_truncated(self, record: dict[str, Any]) -> None:
        record["extra"] = {"blob": "x" * 500}

        line = format_console_with_context(record)

        assert "x" * 97 + "..." in line
        assert "x" * 98 not in line

    def test_exception_placeholder(self, record: dict[str, Any]) -> None:
        record["exception"] = object()

        assert format_console_with_context(record).endswith("\n{exception}\n")

    def test_falls_back_on_broken_records(self) -> None:
        assert format_console_with_context({}) == DEFAULT_LOG_FORMAT + "\n"


@pytest.mark.unit
class TestJsonSerializer:
    def test_serializes_extra_and_exception(
        self, record: dict[str, Any], mocker: MockerFixture
    ) -> None:
        record["extra"] = {"user_id": 7, "_internal": True, "when": datetime(2026, 1, 1)}
        record["exception"] = mocker.Mock(type=ValueError, value=ValueError("bad"))

        entry = orjson.loads(serialize_for_json(record))

        assert entry["level"] == "INFO"
        assert entry["user_id"] == 7
        assert "_internal" not in entry
        assert entry["exception"] == {"type": "ValueError", "value": "bad"}


@pytest.mark.unit
class TestSetupLogging:
    @pytest.mark.usefixtures("fresh_logging_state")
    @pytest.mark.parametrize("formatter", ["console", "json"])
    def test_configures_once(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch, formatter: str
    ) -> None:
        monkeypatch.setenv("LOG_CONFIG__LOG_FORMATTER_TYPE", formatter)
        mock_logger = mocker.patch("src.core.logging.logger")
        mocker.patch("src.core.logging.logging.basicConfig")
        settings = Settings()

        setup_logging(settings)
        setup_logging(settings)

        mock_logger.remove.assert_called_once()
        mock_logger.add.assert_called_once()
        assert payvault_logging._state.configured
        for name in ("uvicorn", "uvicorn.access"):
            handlers = logging.getLogger(name).handlers
            assert len(handlers) == 1
            assert isinstance(handlers[0], InterceptHandler)

    def test_intercept_handler_forwards(self, mocker: MockerFixture) -> None:
        mock_logger = mocker.patch("src.core.logging.logger")
        mock_logger.level.return_value.name = "WARNING"
        record = logging.LogRecord(
            "sqlalchemy", logging.WARNING, __file__, 1, "pool %s", ("exhausted",), None
        )

        InterceptHandler().emit(record)

        mock_logger.opt.return_value.log.assert_called_once_with("WARNING", "pool exhausted")
