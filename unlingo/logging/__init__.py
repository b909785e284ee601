"""Structured logging for the Unlingo backend."""

from unlingo.logging.structured import (
    configure_structlog,
    get_logger,
    bind_context,
    clear_context,
)

__all__ = [
    "configure_structlog",
    "get_logger",
    "bind_context",
    "clear_context",
]
