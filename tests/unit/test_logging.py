# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for logging configuration."""

import io
import json
import logging

import pytest
import structlog

from src.core.config.settings import RealtimeSettings, Settings
from src.utils.logging import bind_context, clear_context, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    clear_context()
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def production_settings() -> Settings:
    return Settings(
        environment="production",
        debug=False,
        log_level="INFO",
        realtime=RealtimeSettings(url="wss://events.example.com/ws"),
    )


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_stdlib_records_render_as_json_with_context(self) -> None:
        stream = io.StringIO()
        setup_logging(production_settings(), stream=stream)

        bind_context(user_id="2", channel_id="chan-1")
        logging.getLogger("src.infrastructure.realtime.connection").info("WebSocket connected: %s", "chan-1")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "WebSocket connected: chan-1"
        assert record["level"] == "info"
        assert record["logger"] == "src.infrastructure.realtime.connection"
        assert record["user_id"] == "2"
        assert record["channel_id"] == "chan-1"

    def test_level_filters_debug(self) -> None:
        stream = io.StringIO()
        setup_logging(production_settings(), stream=stream)

        logging.getLogger("src.test").debug("hidden")

        assert stream.getvalue() == ""

    def test_third_party_loggers_quieted(self) -> None:
        setup_logging(production_settings(), stream=io.StringIO())

        assert logging.getLogger("websockets").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_development_console_output(self) -> None:
        stream = io.StringIO()
        setup_logging(Settings(environment="development", log_level="DEBUG"), stream=stream)

        logging.getLogger("src.test").debug("Connection status %s -> %s", "connecting", "connected")

        assert "Connection status connecting -> connected" in stream.getvalue()

    def test_structured_logger_key_values(self) -> None:
        stream = io.StringIO()
        setup_logging(production_settings(), stream=stream)

        get_logger("src.domains.academic").info("article_assigned", article_id="art1", student_id="2")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "article_assigned"
        assert record["article_id"] == "art1"
        assert record["logger"] == "src.domains.academic"

    def test_cleared_context_not_rendered(self) -> None:
        stream = io.StringIO()
        setup_logging(production_settings(), stream=stream)

        bind_context(user_id="1")
        clear_context()
        logging.getLogger("src.test").warning("after clear")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert "user_id" not in record
