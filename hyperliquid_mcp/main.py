"""
Hyperliquid MCP Server.

Exposes the Hyperliquid public info API (``POST /info``) as MCP tools.
Every tool is a row of the endpoint table in ``hyperliquid_mcp.endpoints``;
the functions below only declare typed, described parameters and hand
them to ``run_tool``, which builds the request body, calls the API once
and returns pretty-printed JSON or an error message.

The table is the source of truth for parameter names, request keys and
which parameters are required. The signatures here must mirror it; the
tool schema tests compare every registered tool against the table.

Usage:
    python -m hyperliquid_mcp [--transport stdio|sse|streamable-http]
"""

import argparse
import json
import logging
import sys
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Optional, Sequence, Union

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from hyperliquid_mcp import endpoints as ep
from hyperliquid_mcp.config import VALID_TRANSPORTS, HyperliquidConfig, get_config
from hyperliquid_mcp.errors import format_tool_error
from hyperliquid_mcp.http_client import HyperliquidInfoClient
from hyperliquid_mcp.logging_config import configure_logging, correlation_context, log_with_context

logger = logging.getLogger(__name__)


# =============================================================================
# Application Context
# =============================================================================


@dataclass
class AppContext:
    """Application context with shared resources."""

    config: HyperliquidConfig
    api_client: HyperliquidInfoClient


# Global context - shared by all sessions, set while at least one is open
_app_context: Optional[AppContext] = None
_active_sessions = 0


@asynccontextmanager
async def app_lifespan(server: FastMCP):
    """
    Lifespan context manager for MCP server.

    The sse and streamable-http transports enter the lifespan once per
    client session. The first session creates the HTTP client, later
    sessions reuse it, and the last session to end closes it.
    """
    global _app_context, _active_sessions

    if _app_context is None:
        config = get_config()
        _app_context = AppContext(config=config, api_client=HyperliquidInfoClient(config))
        logger.info(f"Hyperliquid MCP server started, API URL: {config.api_base_url}")

    context = _app_context
    _active_sessions += 1

    try:
        yield context
    finally:
        _active_sessions -= 1
        if _active_sessions == 0:
            _app_context = None
            await context.api_client.close()
            logger.info("Hyperliquid MCP server shutting down")


def get_api_client() -> HyperliquidInfoClient:
    """Get the API client from the global context."""
    if _app_context is None:
        raise RuntimeError("MCP server not initialized")
    return _app_context.api_client


# =============================================================================
# MCP Server Instance
# =============================================================================


mcp = FastMCP(
    name="hyperliquid-mcp",
    instructions="""Read-only access to the Hyperliquid public info API.

Tools cover perpetuals (positions, perp-meta, funding-history, ...),
spot (spot-meta, spot-balances, token-details, ...), order and fill
history, vaults, account details and staking. Addresses are 42-character
hex strings; times are milliseconds since the epoch.

Every tool returns the upstream JSON as text (positions returns a
condensed summary). Failed calls return a text message starting with
"Error calling <tool>".
""",
    lifespan=app_lifespan,
)


async def run_tool(name: str, **arguments: Any) -> str:
    """
    Execute one tool call against the info endpoint.

    This is the failure boundary for every tool: any exception raised
    while building the body, calling the API or reshaping the response
    is logged and returned as error text instead of propagating.

    Args:
        name: Tool name (key of the endpoint table)
        **arguments: Tool arguments; None means "not supplied"

    Returns:
        Pretty-printed JSON, or an error message
    """
    with correlation_context():
        started = time.perf_counter()
        try:
            endpoint = ep.get_endpoint(name)
            body = ep.build_request_body(endpoint, arguments)
            data = await get_api_client().send(ep.INFO_ENDPOINT, body)
            text = json.dumps(endpoint.map_response(data), indent=2, ensure_ascii=False)
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return format_tool_error(name, e)

        log_with_context(
            logger,
            logging.INFO,
            "Tool call completed",
            tool=name,
            info_type=endpoint.info_type,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return text


def info_tool(name: str):
    """Register the decorated function as the MCP tool for an endpoint table row."""
    endpoint = ep.get_endpoint(name)
    return mcp.tool(
        name=endpoint.name,
        description=endpoint.description,
        annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True),
        structured_output=False,
    )


# =============================================================================
# Parameter Types
# =============================================================================


User = Annotated[str, Field(description=ep.USER.description)]
Dex = Annotated[Optional[str], Field(description=ep.DEX.description)]
Coin = Annotated[str, Field(description=ep.COIN.description)]
StartTime = Annotated[int, Field(description=ep.START_TIME.description)]
EndTime = Annotated[Optional[int], Field(description=ep.END_TIME.description)]
AggregateByTime = Annotated[Optional[bool], Field(description=ep.AGGREGATE_BY_TIME.description)]

CandleInterval = Literal[
    "1m", "3m", "5m", "15m", "30m",
    "1h", "2h", "4h", "8h", "12h",
    "1d", "3d", "1w", "1M",
]


# =============================================================================
# Perpetuals Tools
# =============================================================================


@info_tool("positions")
async def positions(user: User, dex: Dex = None) -> str:
    return await run_tool("positions", user=user, dex=dex)


@info_tool("perp-dexs")
async def perp_dexs() -> str:
    return await run_tool("perp-dexs")


@info_tool("perp-meta")
async def perp_meta(dex: Dex = None) -> str:
    return await run_tool("perp-meta", dex=dex)


@info_tool("perp-asset-contexts")
async def perp_asset_contexts() -> str:
    return await run_tool("perp-asset-contexts")


@info_tool("user-funding")
async def user_funding(user: User, start_time: StartTime, end_time: EndTime = None) -> str:
    return await run_tool("user-funding", user=user, start_time=start_time, end_time=end_time)


@info_tool("user-non-funding-ledger")
async def user_non_funding_ledger(
    user: User, start_time: StartTime, end_time: EndTime = None
) -> str:
    return await run_tool(
        "user-non-funding-ledger", user=user, start_time=start_time, end_time=end_time
    )


@info_tool("funding-history")
async def funding_history(coin: Coin, start_time: StartTime, end_time: EndTime = None) -> str:
    return await run_tool("funding-history", coin=coin, start_time=start_time, end_time=end_time)


@info_tool("predicted-fundings")
async def predicted_fundings() -> str:
    return await run_tool("predicted-fundings")


@info_tool("perps-at-oi-cap")
async def perps_at_oi_cap() -> str:
    return await run_tool("perps-at-oi-cap")


@info_tool("perp-deploy-auction")
async def perp_deploy_auction() -> str:
    return await run_tool("perp-deploy-auction")


# =============================================================================
# Spot Tools
# =============================================================================


@info_tool("spot-meta")
async def spot_meta() -> str:
    return await run_tool("spot-meta")


@info_tool("spot-asset-contexts")
async def spot_asset_contexts() -> str:
    return await run_tool("spot-asset-contexts")


@info_tool("spot-balances")
async def spot_balances(user: User) -> str:
    return await run_tool("spot-balances", user=user)


@info_tool("spot-deploy-auction")
async def spot_deploy_auction(user: User) -> str:
    return await run_tool("spot-deploy-auction", user=user)


@info_tool("token-details")
async def token_details(
    token_id: Annotated[str, Field(description=ep.TOKEN_ID.description)],
) -> str:
    return await run_tool("token-details", token_id=token_id)


# =============================================================================
# Market Data and Order Tools
# =============================================================================


@info_tool("all-mids")
async def all_mids(dex: Dex = None) -> str:
    return await run_tool("all-mids", dex=dex)


@info_tool("open-orders")
async def open_orders(user: User, dex: Dex = None) -> str:
    return await run_tool("open-orders", user=user, dex=dex)


@info_tool("frontend-open-orders")
async def frontend_open_orders(user: User, dex: Dex = None) -> str:
    return await run_tool("frontend-open-orders", user=user, dex=dex)


@info_tool("user-fills")
async def user_fills(user: User, aggregate_by_time: AggregateByTime = None) -> str:
    return await run_tool("user-fills", user=user, aggregate_by_time=aggregate_by_time)


@info_tool("user-fills-by-time")
async def user_fills_by_time(
    user: User,
    start_time: StartTime,
    end_time: EndTime = None,
    aggregate_by_time: AggregateByTime = None,
) -> str:
    return await run_tool(
        "user-fills-by-time",
        user=user,
        start_time=start_time,
        end_time=end_time,
        aggregate_by_time=aggregate_by_time,
    )


@info_tool("user-rate-limit")
async def user_rate_limit(user: User) -> str:
    return await run_tool("user-rate-limit", user=user)


@info_tool("order-status")
async def order_status(
    user: User,
    oid: Annotated[Union[int, str], Field(description=ep.OID.description)],
) -> str:
    return await run_tool("order-status", user=user, oid=oid)


@info_tool("l2-book")
async def l2_book(
    coin: Coin,
    n_sig_figs: Annotated[Optional[int], Field(description=ep.N_SIG_FIGS.description)] = None,
    mantissa: Annotated[Optional[int], Field(description=ep.MANTISSA.description)] = None,
) -> str:
    return await run_tool("l2-book", coin=coin, n_sig_figs=n_sig_figs, mantissa=mantissa)


@info_tool("candle-snapshot")
async def candle_snapshot(
    coin: Coin,
    interval: Annotated[CandleInterval, Field(description=ep.INTERVAL.description)],
    start_time: Annotated[int, Field(description=ep.CANDLE_START_TIME.description)],
    end_time: Annotated[int, Field(description=ep.CANDLE_END_TIME.description)],
) -> str:
    return await run_tool(
        "candle-snapshot", coin=coin, interval=interval, start_time=start_time, end_time=end_time
    )


@info_tool("max-builder-fee")
async def max_builder_fee(
    user: User,
    builder: Annotated[str, Field(description=ep.BUILDER.description)],
) -> str:
    return await run_tool("max-builder-fee", user=user, builder=builder)


@info_tool("historical-orders")
async def historical_orders(user: User) -> str:
    return await run_tool("historical-orders", user=user)


@info_tool("user-twap-slice-fills")
async def user_twap_slice_fills(user: User) -> str:
    return await run_tool("user-twap-slice-fills", user=user)


@info_tool("subaccounts")
async def subaccounts(user: User) -> str:
    return await run_tool("subaccounts", user=user)


# =============================================================================
# Vault Tools
# =============================================================================


@info_tool("vault-details")
async def vault_details(
    vault_address: Annotated[str, Field(description=ep.VAULT_ADDRESS.description)],
    user: Annotated[Optional[str], Field(description=ep.VAULT_USER.description)] = None,
) -> str:
    return await run_tool("vault-details", vault_address=vault_address, user=user)


@info_tool("user-vault-equities")
async def user_vault_equities(user: User) -> str:
    return await run_tool("user-vault-equities", user=user)


# =============================================================================
# Account and Staking Tools
# =============================================================================


@info_tool("user-role")
async def user_role(user: User) -> str:
    return await run_tool("user-role", user=user)


@info_tool("user-portfolio")
async def user_portfolio(user: User) -> str:
    return await run_tool("user-portfolio", user=user)


@info_tool("user-referral")
async def user_referral(user: User) -> str:
    return await run_tool("user-referral", user=user)


@info_tool("user-fees")
async def user_fees(user: User) -> str:
    return await run_tool("user-fees", user=user)


@info_tool("user-delegations")
async def user_delegations(user: User) -> str:
    return await run_tool("user-delegations", user=user)


@info_tool("user-staking-summary")
async def user_staking_summary(user: User) -> str:
    return await run_tool("user-staking-summary", user=user)


@info_tool("user-staking-history")
async def user_staking_history(user: User) -> str:
    return await run_tool("user-staking-history", user=user)


@info_tool("user-staking-rewards")
async def user_staking_rewards(user: User) -> str:
    return await run_tool("user-staking-rewards", user=user)


# =============================================================================
# Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hyperliquid-mcp",
        description="MCP server for the Hyperliquid public info API",
    )
    parser.add_argument(
        "--transport",
        choices=VALID_TRANSPORTS,
        default=None,
        help="MCP transport (default: MCP_TRANSPORT env var or stdio)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the MCP server. Returns a process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(force_reconfigure=True)

    try:
        transport = get_config(transport=args.transport).transport
        logger.info(f"Starting Hyperliquid MCP server ({transport} transport)")
        mcp.run(transport=transport)
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")
        return 0
    except Exception:
        logger.exception("Fatal error in main()")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
