"""Pytest configuration for hyperliquid-mcp tests."""

import httpx
import pytest
import pytest_asyncio

from hyperliquid_mcp.config import HyperliquidConfig
from hyperliquid_mcp.http_client import HyperliquidInfoClient

ENV_KEYS = [
    "HYPERLIQUID_API_URL",
    "HYPERLIQUID_REQUEST_TIMEOUT",
    "MCP_TRANSPORT",
    "LOG_LEVEL",
    "LOG_FORMAT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Run every test without configuration leaking in from the environment."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def test_config():
    """Create test configuration."""
    return HyperliquidConfig(api_base_url="https://api.test.invalid")


@pytest_asyncio.fixture
async def info_client_factory(test_config):
    """
    Build info clients whose HTTP traffic is routed to a handler function
    through httpx.MockTransport. Clients are closed after the test.
    """
    clients = []

    def factory(handler):
        client = HyperliquidInfoClient(test_config)
        client._client = httpx.AsyncClient(
            base_url=test_config.api_base_url,
            headers=client.headers,
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()
