"""
Optional HTTP error translation for hosts that install a downstream
continuation-based error handler.
"""

from handlerguard.api.errors import (
    CODE_OVERRIDES,
    DEFAULT_MESSAGE,
    STATUS_TEXT,
    HTTPError,
    handle_common_errors,
    translate_error,
)
from handlerguard.api.middleware import ResponseLike, build_error_body, error_middleware
from handlerguard.api.schemas import ErrorBody

__all__ = [
    "HTTPError",
    "STATUS_TEXT",
    "CODE_OVERRIDES",
    "DEFAULT_MESSAGE",
    "handle_common_errors",
    "translate_error",
    "ErrorBody",
    "ResponseLike",
    "build_error_body",
    "error_middleware",
]
