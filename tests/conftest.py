"""
Shared pytest fixtures and configuration for handlerguard tests.

This module provides:
- Settings cache and logging state reset between tests
- ``next_fn``: a continuation spy
- ``response``: a minimal chainable response stub
"""

import sys
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
import structlog

# Ensure handlerguard package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import handlerguard.framework.logging.config as log_config
from handlerguard.core.settings import get_settings
from handlerguard.framework.logging import clear_context


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# State Cleanup Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_state():
    """Clear cached settings, log context and structlog config around each test."""
    get_settings.cache_clear()
    clear_context()
    yield
    get_settings.cache_clear()
    clear_context()
    structlog.reset_defaults()
    log_config._configured = False


# =============================================================================
# Handler Fixtures
# =============================================================================


@pytest.fixture
def next_fn() -> Mock:
    """Continuation spy."""
    return Mock(name="next")


class StubResponse:
    """Chainable response recording what the middleware wrote."""

    def __init__(self) -> None:
        self.status_code: int | None = None
        self.body: Any = None

    def status(self, code: int) -> "StubResponse":
        self.status_code = code
        return self

    def json(self, body: Any) -> None:
        self.body = body


@pytest.fixture
def response() -> StubResponse:
    return StubResponse()


@pytest.fixture
def request_stub() -> dict[str, Any]:
    return {"method": "GET", "path": "/users/1", "params": {"id": "1"}}
