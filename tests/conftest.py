"""Shared pytest configuration for perch tests."""

import pytest

from perch.testing import ViewportCall


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def call_log() -> list[ViewportCall]:
    """Shared call log for RecordingViewport instances in one test."""
    return []
