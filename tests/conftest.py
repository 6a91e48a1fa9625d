"""Shared pytest configuration."""

import pytest


# The client's cancellation wiring is built on asyncio
@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"
