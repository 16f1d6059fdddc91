"""Tests for logging setup and context helpers."""

import structlog

from shuttlehub import bind_context, clear_context, session_context
from shuttlehub.config import Environment, LogFormat, Settings
from shuttlehub.logging import _renderer, _static_fields


class TestContext:
    """Tests for bound log context."""

    def test_session_context_is_scoped(self):
        clear_context()
        bind_context(role="admin")

        with session_context("3f2a", operation="join"):
            assert structlog.contextvars.get_contextvars() == {
                "role": "admin",
                "session_id": "3f2a",
                "operation": "join",
            }

        assert structlog.contextvars.get_contextvars() == {"role": "admin"}
        clear_context()

    def test_static_fields_do_not_override(self):
        processor = _static_fields(app="shuttlehub", environment="local")

        event = processor(None, "info", {"event": "store_opened", "environment": "test"})

        assert event == {"event": "store_opened", "app": "shuttlehub", "environment": "test"}


class TestRenderer:
    """Tests for choosing the output format."""

    def test_production_defaults_to_json(self):
        settings = Settings(environment=Environment.PRODUCTION, log_format=None)
        assert isinstance(_renderer(settings)[-1], structlog.processors.JSONRenderer)

    def test_explicit_console_in_production(self):
        settings = Settings(environment=Environment.PRODUCTION, log_format=LogFormat.CONSOLE)
        assert isinstance(_renderer(settings)[-1], structlog.dev.ConsoleRenderer)
