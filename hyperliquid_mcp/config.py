"""
MCP Server Configuration.

Loads configuration for the Hyperliquid MCP server from environment
variables (and an optional .env file at the project root).
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from hyperliquid_mcp.errors import InvalidConfigError

# Load .env file
env_file = Path(__file__).parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file)


DEFAULT_API_URL = "https://api.hyperliquid.xyz"

VALID_TRANSPORTS = ("stdio", "sse", "streamable-http")


@dataclass
class HyperliquidConfig:
    """MCP Server configuration."""

    api_base_url: str = DEFAULT_API_URL
    # None keeps the httpx default timeout
    request_timeout: Optional[float] = None
    transport: str = "stdio"

    def validate(self) -> None:
        """Validate configuration."""
        if self.transport not in VALID_TRANSPORTS:
            raise InvalidConfigError(
                f"MCP_TRANSPORT must be one of {', '.join(VALID_TRANSPORTS)}, "
                f"got '{self.transport}'"
            )
        if not self.api_base_url.startswith(("http://", "https://")):
            raise InvalidConfigError(
                f"HYPERLIQUID_API_URL must be an http(s) URL, got '{self.api_base_url}'"
            )


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        timeout = float(value)
    except (ValueError, TypeError):
        return None
    return timeout if timeout > 0 else None


def get_config(transport: Optional[str] = None) -> HyperliquidConfig:
    """
    Load MCP configuration from environment variables.

    Args:
        transport: Transport chosen on the command line. When given it
            replaces MCP_TRANSPORT, which is then not validated.

    Environment Variables:
        HYPERLIQUID_API_URL: Base URL of the Hyperliquid API
            (default: https://api.hyperliquid.xyz)
        HYPERLIQUID_REQUEST_TIMEOUT: Request timeout in seconds
            (default: unset, httpx default applies)
        MCP_TRANSPORT: stdio, sse or streamable-http (default: stdio)

    Returns:
        HyperliquidConfig instance with loaded values

    Raises:
        InvalidConfigError: If a value is invalid
    """
    config = HyperliquidConfig(
        api_base_url=os.environ.get("HYPERLIQUID_API_URL", DEFAULT_API_URL).rstrip("/"),
        request_timeout=_parse_timeout(os.environ.get("HYPERLIQUID_REQUEST_TIMEOUT")),
        transport=(transport or os.environ.get("MCP_TRANSPORT", "stdio")).strip().lower(),
    )
    config.validate()
    return config
