"""Pytest configuration for the MCP server tests."""

import pytest


# The server handlers are coroutines; run them on asyncio
@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"
