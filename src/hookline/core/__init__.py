"""Core hookline utilities.

This module exports core utilities for use throughout the package.
"""

from hookline.core.config import Settings, get_settings
from hookline.core.context import (
    get_current_invocation,
    reset_current_invocation,
    set_current_invocation,
)
from hookline.core.logging import (
    LoggingContext,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggingContext",
    "clear_context",
    "get_current_invocation",
    "set_current_invocation",
    "reset_current_invocation",
]
