"""Structured logging with structlog.

Provides:
- JSON-formatted log output for production
- Request-scoped context (request_id, workspace_id, org_id) via contextvars
- Factory function for creating loggers
"""

import logging
import sys
from typing import Optional
from uuid import UUID

import structlog
from structlog.types import EventDict, WrappedLogger


SERVICE_NAME = "unlingo"


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service information to log entries."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


def configure_structlog(
    json_format: bool = True,
    log_level: str = "INFO",
) -> None:
    """Configure structlog for the application.

    Args:
        json_format: If True, output JSON logs (for production).
                     If False, output human-readable logs (for development).
        log_level: The minimum log level to output (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_service_info,
        structlog.processors.format_exc_info,
    ]

    if json_format:
        renderers = [
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger with the given name.

    Example:
        logger = get_logger(__name__)
        logger.info("project_created", project_id=str(project.id))
    """
    return structlog.get_logger(name)


def bind_context(
    request_id: Optional[str] = None,
    workspace_id: Optional[UUID] = None,
    org_id: Optional[str] = None,
) -> None:
    """Bind request-scoped values included in every subsequent log entry.

    Values live in contextvars, so concurrent requests do not see each
    other's context.
    """
    values = {}
    if request_id:
        values["request_id"] = request_id
    if workspace_id:
        values["workspace_id"] = str(workspace_id)
    if org_id:
        values["org_id"] = org_id
    if values:
        structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    """Clear all bound context variables at the end of a request."""
    structlog.contextvars.clear_contextvars()


# Can be reconfigured by calling configure_structlog() in api/main.py
configure_structlog(json_format=False, log_level="INFO")
