"""Pytest configuration for the calculator suite test suite."""

# Async tests (market clients, pollers, MCP tools) run through pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )
