"""Structured logging with invocation IDs.

This module configures structlog for structured logging and tags every
entry emitted while a chain runs with the invocation it belongs to.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from hookline.core.config import get_settings
from hookline.core.context import get_current_invocation


def add_invocation_info(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add invocation ID and operation name to log entry if a chain is running.

    The running chain's invocation ID always wins over one bound in the
    logging context; an explicit operation value is kept.

    Args:
        logger: Logger instance (unused).
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary.
    """
    invocation = get_current_invocation()
    if invocation is not None:
        event_dict["invocation_id"] = invocation.invocation_id
        event_dict.setdefault("operation", invocation.operation)
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log entry.

    Args:
        logger: Logger instance.
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with logger name.
    """
    event_dict["logger"] = logger.name if hasattr(logger, "name") else "hookline"
    return event_dict


def configure_logging(settings: Any | None = None) -> None:
    """Configure structured logging.

    Sets up structlog with console output for development and JSON output
    otherwise. Libraries embedding hookline usually call this once at
    startup; without it structlog's defaults apply.

    Args:
        settings: Optional settings instance. If not provided, will load from environment.
    """
    if settings is None:
        settings = get_settings()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_invocation_info,
    ]

    level = getattr(logging, settings.log_level)

    # Development mode: console output with colors
    if settings.is_development or settings.log_format == "console":
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]
        cache_logger = False

    # Production mode: JSON output
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
        cache_logger = True

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=cache_logger,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If not provided, uses 'hookline'.

    Returns:
        BoundLogger: Configured structured logger instance.
    """
    return structlog.get_logger(name or "hookline")


class LoggingContext:
    """Context manager for adding logging context.

    Example:
        with LoggingContext(tenant="acme"):
            await service.save(record)  # every chain entry carries tenant
    """

    def __init__(self, **kwargs: str) -> None:
        """Initialize logging context with key-value pairs.

        Args:
            **kwargs: Key-value pairs to add to logging context.
        """
        self.context = kwargs

    def __enter__(self) -> "LoggingContext":
        """Enter the context and add context variables."""
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context and clear context variables."""
        structlog.contextvars.unbind_contextvars(*self.context.keys())


def clear_context() -> None:
    """Clear all context variables from the current logging context."""
    structlog.contextvars.clear_contextvars()
