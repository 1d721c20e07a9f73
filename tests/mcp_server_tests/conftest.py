"""Pytest configuration for MCP server tests."""

import pytest


@pytest.fixture(autouse=True)
def no_api_keys(monkeypatch):
    """Keep real API keys and settings overrides out of tool instances built in tests."""
    for name in ('EXCHANGE_API_KEY', 'FINNHUB_API_KEY', 'CALC_SUITE_SETTINGS', 'CALC_SUITE_DATA_DIR'):
        monkeypatch.delenv(name, raising=False)
