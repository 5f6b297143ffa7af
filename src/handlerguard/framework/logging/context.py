"""
Logging context management using contextvars.

Request-level context (request id, method, path, route) set by the host
framework is attached to every log entry emitted while that request is being
handled, without passing it through every wrapper.

Design choice: contextvars
- Thread-safe and asyncio-compatible
- Each asyncio task sees the context of the request that spawned it
- Clean integration with structlog processors
"""

from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Any

import structlog


@dataclass
class LogContext:
    """
    Request context attached to all log entries.

    Request identifiers:
        request_id: Id assigned by the host (header or generated)
        method: HTTP method
        path: Request path

    Routing:
        route: Route pattern the handler is registered under
    """

    request_id: str | None = None
    method: str | None = None
    path: str | None = None
    route: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "LogContext":
        """Create new context with merged values."""
        current = asdict(self)
        current.update({k: v for k, v in kwargs.items() if v is not None})
        return LogContext(**current)


_log_context: ContextVar[LogContext] = ContextVar("handlerguard_log_context")  # noqa: B039


def get_context() -> LogContext:
    """Get the current log context."""
    return _log_context.get(LogContext())


def set_context(
    request_id: str | None = None,
    method: str | None = None,
    path: str | None = None,
    route: str | None = None,
) -> LogContext:
    """
    Set the current log context.

    This replaces the current context. Use bind_context() to add to existing.
    """
    ctx = LogContext(request_id=request_id, method=method, path=path, route=route)
    _log_context.set(ctx)
    return ctx


def bind_context(**kwargs) -> LogContext:
    """Merge values into the current context and return the result."""
    updated = get_context().merge(**kwargs)
    _log_context.set(updated)
    return updated


def clear_context() -> None:
    """Clear the current context (reset to empty)."""
    _log_context.set(LogContext())


def add_context_processor(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """
    Structlog processor that adds request context to every log entry.

    Keys already present on the event win over context values.
    """
    for key, value in get_context().to_dict().items():
        if key not in event_dict:
            event_dict[key] = value

    return event_dict


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)
