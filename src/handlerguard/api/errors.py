"""
HTTP error type and error-to-status translation.

``HTTPError`` is the error handlers raise (or pass to ``next``) when they know
the status to answer with. ``translate_error`` turns any other failure that
reaches the error middleware into one, by error type name first and then by
error code.
"""

from __future__ import annotations

import errno
from http import HTTPStatus
from typing import Any

from handlerguard.core.errors import ErrorCategory, HandlerGuardError

DEFAULT_MESSAGE = "Something went wrong! Please try again"

# ── Status code → reason phrase (client and server errors only) ─────────

STATUS_TEXT: dict[int, str] = {status.value: status.phrase for status in HTTPStatus if status.value >= 400}


class HTTPError(HandlerGuardError):
    """Error carrying the HTTP status it should be answered with.

    Unknown status codes fall back to 500.

    Examples:
        >>> err = HTTPError("Post not found", 404)
        >>> err.status_code, err.status_text
        (404, 'Not Found')
        >>> HTTPError("teapot?", 299).status_code
        500
    """

    default_category = ErrorCategory.HTTP

    def __init__(self, message: str = DEFAULT_MESSAGE, status_code: int = 500, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.status_code = status_code if status_code in STATUS_TEXT else 500
        self.status_text = STATUS_TEXT.get(self.status_code)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        result["status_text"] = self.status_text
        return result


# ── Classification by error type name ───────────────────────────────────

TOKEN_ERRORS = frozenset({"JsonWebTokenError", "TokenExpiredError", "ExpiredSignatureError", "InvalidTokenError"})
UPSTREAM_ERRORS = frozenset({"AxiosError", "HTTPStatusError", "RequestError", "ConnectError"})


def _validation_messages(err: Any) -> str:
    errors = getattr(err, "errors", None)
    if callable(errors):
        # pydantic.ValidationError
        return ", ".join(item.get("msg", "") for item in errors())
    if isinstance(errors, dict):
        return ", ".join(getattr(value, "message", str(value)) for value in errors.values())
    return str(err)


def handle_common_errors(err: Any) -> HTTPError:
    """Map well-known error types to an :class:`HTTPError`.

    Anything unrecognised keeps its message and its ``status_code``
    attribute, if it has one.
    """
    if isinstance(err, HTTPError):
        return err
    if not isinstance(err, BaseException):
        return HTTPError("Unexpected error occurred", 500)

    name = type(err).__name__

    if name == "CastError":
        return HTTPError(f"Resource not found. Invalid {getattr(err, 'path', None)}", 400)
    if name == "ValidationError":
        return HTTPError(_validation_messages(err), 400)
    if name in TOKEN_ERRORS:
        return HTTPError("JSON Web Token is invalid or expired. Please try again", 400)
    if name in UPSTREAM_ERRORS:
        return HTTPError("Error communicating with an external service", 502)

    status_code = getattr(err, "status_code", None)
    return HTTPError(
        str(err) or "Unhandled server error",
        status_code if isinstance(status_code, int) else 500,
    )


# ── Overrides by error code ─────────────────────────────────────────────

CODE_OVERRIDES: dict[str | int, tuple[str, int]] = {
    "ENOENT": ("Resource not found", 404),
    "EBADCSRFTOKEN": ("Invalid CSRF token", 403),
    "ECONNREFUSED": ("Connection refused", 502),
    "ECONNRESET": ("Connection reset by peer", 502),
    "ETIMEDOUT": ("Connection timed out", 502),
}

DUPLICATE_KEY_CODE = 11000


def error_code(err: Any) -> str | int | None:
    """The error's ``code`` attribute, or its symbolic errno for OS errors."""
    code = getattr(err, "code", None)
    if code is None and isinstance(err, OSError) and err.errno is not None:
        code = errno.errorcode.get(err.errno)
    return code


def _duplicate_fields(err: Any) -> str:
    key_value = getattr(err, "key_value", None)
    if key_value is None:
        details = getattr(err, "details", None) or {}
        key_value = details.get("keyValue") if isinstance(details, dict) else None
    return ", ".join(key_value or {})


def translate_error(err: Any) -> HTTPError:
    """Full translation: type-name classification, then code overrides."""
    error = handle_common_errors(err)
    code = error_code(err)

    if code == DUPLICATE_KEY_CODE:
        return HTTPError(f"Duplicate entry for field(s): {_duplicate_fields(err)}", 400)
    if isinstance(code, str | int) and code in CODE_OVERRIDES:
        message, status_code = CODE_OVERRIDES[code]
        return HTTPError(message, status_code)

    return error
