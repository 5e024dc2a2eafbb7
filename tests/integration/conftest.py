"""
tests/integration/conftest.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Integration test configuration - skip unless INTEGRATION_TESTS=1.

Usage:
    # Run only unit tests (default, CI-safe)
    pytest -q

    # Run integration tests locally
    INTEGRATION_TESTS=1 pytest tests/integration/ -v

    # Run everything
    INTEGRATION_TESTS=1 pytest -v
"""

from __future__ import annotations

import os
import time
from typing import Generator

import pytest

from helitrack.geo import BoundingBox


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip all integration tests unless INTEGRATION_TESTS=1."""
    if os.getenv("INTEGRATION_TESTS"):
        return

    skip_marker = pytest.mark.skip(
        reason="Integration tests disabled (set INTEGRATION_TESTS=1 to enable)"
    )
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(skip_marker)


@pytest.fixture
def rate_limiter() -> Generator[None, None, None]:
    """Sleep one second after the test; adsb.fi allows 1 req/sec."""
    yield
    time.sleep(1.0)


@pytest.fixture
def busy_region() -> BoundingBox:
    """Greater Los Angeles: reliably has helicopters in the air by day."""
    return BoundingBox(33.6, 34.4, -118.7, -117.9)


@pytest.fixture
def integration_timeout() -> float:
    """Default timeout for integration test HTTP calls (seconds)."""
    return 30.0
