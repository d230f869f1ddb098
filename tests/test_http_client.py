"""
Tests for the Hyperliquid info client (request gateway).

Uses httpx.MockTransport so requests go through a real AsyncClient
without touching the network.
"""

import json

import httpx
import pytest

from hyperliquid_mcp.config import HyperliquidConfig
from hyperliquid_mcp.errors import (
    UpstreamConnectionError,
    UpstreamHttpError,
    UpstreamParseError,
)
from hyperliquid_mcp.http_client import HyperliquidInfoClient

# =============================================================================
# Test send
# =============================================================================


class TestSend:
    """Tests for HyperliquidInfoClient.send."""

    @pytest.mark.asyncio
    async def test_posts_json_body_to_endpoint(self, info_client_factory):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"BTC": "65000.5"})

        client = info_client_factory(handler)
        result = await client.send("info", {"type": "allMids"})

        assert result == {"BTC": "65000.5"}
        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.test.invalid/info"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"type": "allMids"}

    @pytest.mark.asyncio
    async def test_returns_non_object_json_unmodified(self, info_client_factory):
        client = info_client_factory(lambda request: httpx.Response(200, json=[["BTC", 1], None]))

        result = await client.send("info", {"type": "perpDexs"})

        assert result == [["BTC", 1], None]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 404, 429, 500, 503])
    async def test_non_success_status_raises_http_error(self, info_client_factory, status):
        # Body is deliberately not JSON: it must not be parsed on error
        client = info_client_factory(lambda request: httpx.Response(status, text="<html>"))

        with pytest.raises(UpstreamHttpError) as exc_info:
            await client.send("info", {"type": "meta"})

        assert exc_info.value.status_code == status
        assert str(status) in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_parse_error(self, info_client_factory):
        client = info_client_factory(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(UpstreamParseError) as exc_info:
            await client.send("info", {"type": "meta"})

        assert exc_info.value.code == "PARSE_ERROR"

    @pytest.mark.asyncio
    async def test_invalid_utf8_raises_parse_error(self, info_client_factory):
        client = info_client_factory(lambda request: httpx.Response(200, content=b"\xff\xfe"))

        with pytest.raises(UpstreamParseError):
            await client.send("info", {"type": "meta"})

    @pytest.mark.asyncio
    async def test_transport_failure_raises_connection_error(self, info_client_factory):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = info_client_factory(handler)

        with pytest.raises(UpstreamConnectionError) as exc_info:
            await client.send("info", {"type": "meta"})

        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, info_client_factory):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502)

        client = info_client_factory(handler)

        with pytest.raises(UpstreamHttpError):
            await client.send("info", {"type": "meta"})

        assert len(calls) == 1


# =============================================================================
# Test client lifecycle
# =============================================================================


class TestClientLifecycle:
    """Tests for lazy creation and cleanup of the HTTP client."""

    @pytest.mark.asyncio
    async def test_lazy_creation_and_reuse(self, test_config):
        client = HyperliquidInfoClient(test_config)
        assert client._client is None

        first = await client.get_client()
        second = await client.get_client()

        assert first is second
        assert str(first.base_url).rstrip("/") == "https://api.test.invalid"
        await client.close()
        assert client._client is None

    @pytest.mark.asyncio
    async def test_default_timeout_is_left_to_httpx(self, test_config):
        client = HyperliquidInfoClient(test_config)
        http = await client.get_client()

        assert http.timeout == httpx.Timeout(5.0)
        await client.close()

    @pytest.mark.asyncio
    async def test_configured_timeout(self):
        client = HyperliquidInfoClient(
            HyperliquidConfig(api_base_url="https://api.test.invalid", request_timeout=30.0)
        )
        http = await client.get_client()

        assert http.timeout == httpx.Timeout(30.0)
        await client.close()

    def test_headers_not_shared_between_clients(self, test_config):
        first = HyperliquidInfoClient(test_config)
        second = HyperliquidInfoClient(test_config)

        first.headers["X-Extra"] = "1"

        assert second.headers == {"Content-Type": "application/json"}
        assert first.headers is not second.headers

    @pytest.mark.asyncio
    async def test_close_without_client_is_noop(self, test_config):
        client = HyperliquidInfoClient(test_config)

        await client.close()

        assert client._client is None
