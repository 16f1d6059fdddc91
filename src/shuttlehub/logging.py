"""structlog setup for shuttlehub.

Level, renderer and environment come from Settings (LOG_LEVEL, LOG_FORMAT,
ENVIRONMENT). Without an explicit LOG_FORMAT, production logs JSON lines
and every other environment logs to a coloured console.

Every entry carries ``app`` and ``environment``. Context bound with
``bind_context`` (the CLI binds the caller's role) or ``session_context``
(the session service binds ``session_id`` around a roster change) is merged
into each entry logged while it is active:

    with session_context(session.id, operation="join"):
        logger.info("roster_join", name="Alice")
        # {"event": "roster_join", "session_id": "3f2a...", "operation": "join", ...}
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

from shuttlehub.config import LogFormat, Settings, get_settings

# Libraries that log every HTTP request at INFO
_CHATTY_LOGGERS = ("httpx", "httpcore", "hpack", "postgrest", "supabase", "anthropic")


def _static_fields(**fields: Any) -> structlog.typing.Processor:
    def processor(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def _renderer(settings: Settings) -> list[structlog.typing.Processor]:
    log_format = settings.log_format
    if log_format is None:
        log_format = LogFormat.JSON if settings.is_production else LogFormat.CONSOLE

    if log_format == LogFormat.JSON:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(exception_formatter=structlog.dev.plain_traceback)]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Called by the API lifespan and the CLI callback. Safe to call again;
    the last call wins.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _static_fields(app="shuttlehub", environment=settings.environment.value),
            *_renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdout is reserved for CLI output
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every entry logged from now on in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def session_context(session_id: str, **kwargs: Any) -> Iterator[None]:
    """Attach ``session_id`` (and any extra fields) for the duration of a block."""
    with structlog.contextvars.bound_contextvars(session_id=session_id, **kwargs):
        yield
