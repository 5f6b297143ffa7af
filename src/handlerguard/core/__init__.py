"""
handlerguard core: error hierarchy and settings.
"""

from handlerguard.core.errors import (
    ConfigurationError,
    ContinuationError,
    ErrorCategory,
    ErrorContext,
    HandlerGuardError,
    NonErrorRaisedError,
    TargetTypeError,
    categorize_error,
    normalize_error,
)
from handlerguard.core.settings import HandlerGuardSettings, get_settings

__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "HandlerGuardError",
    "ConfigurationError",
    "TargetTypeError",
    "ContinuationError",
    "NonErrorRaisedError",
    "normalize_error",
    "categorize_error",
    "HandlerGuardSettings",
    "get_settings",
]
