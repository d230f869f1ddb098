"""Allow running the MCP server via: python -m hyperliquid_mcp"""

import sys

from hyperliquid_mcp.main import main

if __name__ == "__main__":
    sys.exit(main())
