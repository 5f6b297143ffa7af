"""
Structured error types for handlerguard.

Provides the small typed hierarchy the wrapping layer raises and delivers:
configuration defects that are raised at wrap time, and normalized failures
that are handed to a handler's continuation at call time.

Manifesto:
    - **Typed Error Hierarchy:** Configuration defects and delivered failures
      are different things and get different types
    - **Rich Context:** Delivered errors carry the handler name and
      invocation id, which the error middleware logs alongside the category
    - **Error Chaining:** The original payload is kept, never replaced

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                   HandlerGuardError                      │
        │            (category, context, cause)                    │
        ├──────────────────────────────────────────────────────────┤
        │  ConfigurationError (CONFIG)      NonErrorRaisedError    │
        │        │                          (HANDLER)              │
        │  TargetTypeError (+TypeError)                            │
        │  ContinuationError                                       │
        └──────────────────────────────────────────────────────────┘

Examples:
    Normalizing a payload that is not an ``Exception``:

    >>> class Halt(BaseException): ...
    >>> err = normalize_error(Halt("stop"))
    >>> type(err).__name__, "stop" in err.message
    ('NonErrorRaisedError', True)

Guardrails:
    ❌ DON'T: Swallow ``CancelledError`` / ``KeyboardInterrupt`` / ``SystemExit``
    ✅ DO: Let ``normalize_error`` re-raise them

Tags:
    error-handling, exception-hierarchy, error-context, handlerguard
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Control-flow exceptions that must keep propagating through any wrapper.
PASSTHROUGH_EXCEPTIONS: tuple[type[BaseException], ...] = (
    asyncio.CancelledError,
    KeyboardInterrupt,
    SystemExit,
    GeneratorExit,
)


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing.

    Attributes:
        CONFIG: Misconfigured handler registration (bad target, no continuation)
        HANDLER: Failure raised or rejected by a wrapped handler
        HTTP: Failure already translated to an HTTP status
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"
    HANDLER = "HANDLER"
    HTTP = "HTTP"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        handler: Name of the original (unwrapped) handler
        invocation_id: Per-call id of the wrapper invocation
        metadata: Anything else worth logging
    """

    handler: str | None = None
    invocation_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return non-None fields, with metadata flattened in."""
        result: dict[str, Any] = {}
        for key in ("handler", "invocation_id"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result.update(self.metadata)
        return result


class HandlerGuardError(Exception):
    """Base class for every error handlerguard raises or delivers.

    Examples:
        >>> error = HandlerGuardError("boom").with_context(handler="get_user")
        >>> error.context.handler
        'get_user'
        >>> error.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> HandlerGuardError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = repr(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION DEFECTS (raised at wrap time, never retried)
# =============================================================================


class ConfigurationError(HandlerGuardError):
    """Caller wired a handler or controller incorrectly."""

    default_category = ErrorCategory.CONFIG


class TargetTypeError(ConfigurationError, TypeError):
    """Wrapping target is neither a function nor a class."""

    def __init__(self, target: Any, message: str = "Target must be a function or a class"):
        super().__init__(message)
        self.target = target
        self.with_context(target_type=type(target).__name__)


class ContinuationError(ConfigurationError):
    """Last positional argument of a wrapped handler is not callable."""

    def __init__(self, handler: str, received: Any):
        super().__init__(
            f"Last argument of handler {handler!r} is not callable "
            f"(expected next, got {type(received).__name__})"
        )
        self.received = received
        self.with_context(handler=handler)


# =============================================================================
# DELIVERED FAILURES
# =============================================================================


class NonErrorRaisedError(HandlerGuardError):
    """A handler raised or rejected with something that is not an ``Exception``.

    The original value is kept on ``payload``.
    """

    default_category = ErrorCategory.HANDLER

    def __init__(self, payload: Any, *, phase: str = "thrown"):
        super().__init__(f"Non-Error {phase}: {payload!s}")
        self.payload = payload
        self.phase = phase
        if isinstance(payload, BaseException):
            self.cause = payload
            self.__cause__ = payload


def normalize_error(value: Any, *, phase: str = "thrown") -> Exception:
    """Coerce a raised or rejected value into an ``Exception``.

    Args:
        value: Whatever the handler raised, or the failure payload of its awaitable
        phase: ``"thrown"`` for synchronous raises, ``"rejected"`` for awaitables;
            only used in the message of coerced payloads

    Returns:
        ``value`` itself when it already is an ``Exception``, otherwise a
        :class:`NonErrorRaisedError` wrapping it.

    Raises:
        BaseException: ``value`` when it is a control-flow exception
            (cancellation, interrupt, exit) that must not be swallowed.
    """
    if isinstance(value, PASSTHROUGH_EXCEPTIONS):
        raise value
    if isinstance(value, Exception):
        return value
    return NonErrorRaisedError(value, phase=phase)


def categorize_error(error: Any) -> ErrorCategory:
    """Get the category of any error, ``INTERNAL`` for foreign exceptions."""
    if isinstance(error, HandlerGuardError):
        return error.category
    return ErrorCategory.INTERNAL


__all__ = [
    "PASSTHROUGH_EXCEPTIONS",
    "ErrorCategory",
    "ErrorContext",
    "HandlerGuardError",
    "ConfigurationError",
    "TargetTypeError",
    "ContinuationError",
    "NonErrorRaisedError",
    "normalize_error",
    "categorize_error",
]
