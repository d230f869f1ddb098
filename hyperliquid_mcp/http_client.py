"""
HTTP Client for the Hyperliquid info API.

Every call is a single POST of a JSON body to ``{base}/{endpoint}``.
No retries are made; failures surface to the caller as UpstreamError.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from hyperliquid_mcp.config import HyperliquidConfig
from hyperliquid_mcp.errors import (
    UpstreamConnectionError,
    UpstreamHttpError,
    UpstreamParseError,
)

logger = logging.getLogger(__name__)


class HyperliquidInfoClient:
    """
    Async HTTP client for the Hyperliquid API.

    Handles:
    - JSON request bodies with Content-Type: application/json
    - Status checking and JSON decoding of responses
    - Lazy client initialization
    - Proper cleanup on close
    """

    def __init__(self, config: HyperliquidConfig):
        """
        Initialize the API client.

        Args:
            config: MCP configuration with API URL and optional timeout
        """
        self.config = config
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def headers(self) -> Dict[str, str]:
        """Build request headers."""
        return {"Content-Type": "application/json"}

    async def get_client(self) -> httpx.AsyncClient:
        """
        Get or create the async HTTP client.

        Creates a new client on first call or if previous client was closed.

        Returns:
            Configured httpx.AsyncClient instance
        """
        if self._client is None or self._client.is_closed:
            kwargs: Dict[str, Any] = {
                "base_url": self.config.api_base_url,
                "headers": self.headers,
            }
            if self.config.request_timeout is not None:
                kwargs["timeout"] = httpx.Timeout(self.config.request_timeout)
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def send(self, endpoint: str, body: Dict[str, Any]) -> Any:
        """
        POST a JSON body to an API endpoint and return the decoded response.

        Args:
            endpoint: Path under the base URL (e.g. "info")
            body: JSON-serializable request body

        Returns:
            The parsed JSON value, unmodified

        Raises:
            UpstreamHttpError: If the status is not 2xx
            UpstreamParseError: If the body is not valid JSON
            UpstreamConnectionError: If no response was received
        """
        client = await self.get_client()
        path = "/" + endpoint.lstrip("/")

        logger.debug("POST %s type=%s", path, body.get("type"))
        try:
            response = await client.post(path, json=body)
        except httpx.HTTPError as e:
            raise UpstreamConnectionError(f"{e.__class__.__name__}: {e}") from e

        if not response.is_success:
            raise UpstreamHttpError(response.status_code)

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamParseError(str(e)) from e

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
