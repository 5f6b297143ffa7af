"""
handlerguard logging - structured, request-aware logging.

This module provides:
- Structured logging with structlog
- Request context propagation via contextvars
- Settings-based configuration

Usage:
    from handlerguard.framework.logging import configure_logging, get_logger, set_context

    # Configure once at startup
    configure_logging()

    # Get a logger
    log = get_logger(__name__)

    # Set request context (automatically attached to all logs)
    set_context(request_id="abc-123", method="GET", path="/users/1")
"""

from handlerguard.framework.logging.config import configure_logging, is_configured, is_debug_enabled
from handlerguard.framework.logging.context import (
    LogContext,
    bind_context,
    clear_context,
    get_context,
    get_logger,
    set_context,
)

__all__ = [
    # Configuration
    "configure_logging",
    "is_configured",
    "is_debug_enabled",
    # Context
    "get_logger",
    "set_context",
    "clear_context",
    "get_context",
    "bind_context",
    "LogContext",
]
