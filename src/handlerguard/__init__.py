"""
handlerguard - deliver every handler failure to ``next``, exactly once.

Wraps continuation-style request handlers (``(req, res, next)`` and
``(err, req, res, next)``, sync or async) and controller classes so that
raised exceptions and failed awaitables reach the handler's continuation
instead of escaping into the host framework.

    from handlerguard import catch_async

    @catch_async
    async def get_user(req, res, next):
        ...
"""

__version__ = "0.1.0"

from handlerguard.api import HTTPError, STATUS_TEXT, error_middleware, handle_common_errors, translate_error
from handlerguard.core.errors import HandlerGuardError, NonErrorRaisedError, TargetTypeError
from handlerguard.framework.logging import configure_logging, get_logger
from handlerguard.wrapping import (
    WRAPPED_PREFIX,
    catch_async,
    collect_levels,
    declared_arity,
    inspect_target,
    is_callable,
    looks_constructible,
    wrap_bundle,
    wrap_handler,
)

__all__ = [
    "catch_async",
    "wrap_handler",
    "wrap_bundle",
    "collect_levels",
    "inspect_target",
    "is_callable",
    "looks_constructible",
    "declared_arity",
    "WRAPPED_PREFIX",
    "HandlerGuardError",
    "NonErrorRaisedError",
    "TargetTypeError",
    "HTTPError",
    "STATUS_TEXT",
    "handle_common_errors",
    "translate_error",
    "error_middleware",
    "configure_logging",
    "get_logger",
]
