"""Pytest configuration for the financial-engine test suite."""

# Async MCP server tests need pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )
