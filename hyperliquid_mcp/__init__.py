"""
MCP Server for the Hyperliquid public info API.

Exposes each Hyperliquid info request type (``POST /info`` with a
``type`` discriminator) as a separately named, schema-described MCP tool.

Usage:
    python -m hyperliquid_mcp
"""

__version__ = "1.0.0"

from hyperliquid_mcp.main import mcp

__all__ = ["mcp", "__version__"]
