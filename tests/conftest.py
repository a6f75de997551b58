"""
Pytest fixtures for the scene serializer test suite.

Provides:
- Structured logging configured once per session
- LogContext isolation between tests
- A captured_logs fixture returning parsed JSON log records
- A fresh ComponentSerializer (own cache, own registry) per test
"""

import json
import logging
from io import StringIO

import pytest

from scene_config import get_active_config
from scene_engines.serializer import ComponentSerializer
from scene_kernel.host import AssetDatabase
from scene_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture scene_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, serializer):
            serializer.get_component_data(component)
            logs = captured_logs()
            assert any(r["message"] == "SCENE_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("scene_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Serializer fixtures
# =============================================================================


@pytest.fixture
def asset_database():
    return AssetDatabase()


@pytest.fixture
def serializer(asset_database):
    """A serializer over the default configuration with its own cache."""
    return ComponentSerializer(get_active_config(), asset_database=asset_database)
