"""
Error-handling middleware: the downstream end of the continuation channel.

Installed last in the chain, it receives every failure a wrapped handler
delivered through ``next`` and answers it with an :class:`ErrorBody`::

    app.use(error_middleware)
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from handlerguard.api.errors import DEFAULT_MESSAGE, translate_error
from handlerguard.api.schemas import ErrorBody
from handlerguard.core.errors import HandlerGuardError, categorize_error
from handlerguard.core.settings import get_settings
from handlerguard.framework.logging import get_logger

logger = get_logger(__name__)


class ResponseLike(Protocol):
    """The slice of a response object the middleware writes to."""

    def status(self, code: int) -> "ResponseLike": ...

    def json(self, body: Any) -> Any: ...


def build_error_body(err: Any) -> ErrorBody:
    """Translate ``err`` and build the body that answers it."""
    error = translate_error(err)
    message = error.message
    if error.status_code >= 500 and not get_settings().expose_error_details:
        message = DEFAULT_MESSAGE

    return ErrorBody(
        message=message,
        status_code=error.status_code,
        status_text=error.status_text,
    )


def error_middleware(err: Any, req: Any, res: ResponseLike, next: Callable[..., Any]) -> None:
    """Error-path handler answering any failure with a JSON error body."""
    body = build_error_body(err)

    log_fields = {
        "status_code": body.status_code,
        "error_type": type(err).__name__,
        "error": str(err),
        "category": categorize_error(err).value,
    }
    if isinstance(err, HandlerGuardError):
        log_fields["error_context"] = err.context.to_dict()
    if body.status_code >= 500:
        logger.error("middleware.error_translated", **log_fields)
    else:
        logger.warning("middleware.error_translated", **log_fields)

    res.status(body.status_code).json(body.model_dump(by_alias=True))
