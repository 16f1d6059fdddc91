"""Session scheduling and cost splitting for a badminton social club."""

__version__ = "0.1.0"

from shuttlehub.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    session_context,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "session_context",
]
