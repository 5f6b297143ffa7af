"""Environment-driven settings for handlerguard.

Configuration should be explicit, validated, and environment-driven.
``HandlerGuardSettings`` reads ``HANDLERGUARD_*`` variables (and a local
``.env`` file) once; ``get_settings()`` caches the result.

Fields
──────
log_level            : Structlog log level
log_format           : ``console`` or ``json`` renderer
warn_on_short_call   : Log a warning when a handler gets fewer args than it declares
expose_error_details : Keep 5xx messages in translated error bodies

Examples:
    >>> import os
    >>> os.environ["HANDLERGUARD_LOG_FORMAT"] = "json"
    >>> get_settings.cache_clear()
    >>> get_settings().log_format
    'json'
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HandlerGuardSettings(BaseSettings):
    """Settings shared by the wrapping layer and the error middleware."""

    model_config = SettingsConfigDict(
        env_prefix="HANDLERGUARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"

    # ── Wrapping ─────────────────────────────────────────────────
    warn_on_short_call: bool = Field(
        default=True,
        description="Warn when a wrapped handler receives fewer positional args than it declares",
    )

    # ── Error translation ────────────────────────────────────────
    expose_error_details: bool = Field(
        default=True,
        description="Send the original message of 5xx errors to clients",
    )


@lru_cache(maxsize=1)
def get_settings() -> HandlerGuardSettings:
    """Return the process-wide settings, read from the environment once."""
    return HandlerGuardSettings()
