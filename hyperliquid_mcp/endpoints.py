"""
Declarative table of Hyperliquid info endpoints exposed as MCP tools.

Each entry names the tool, the ``type`` discriminator sent to
``POST /info``, the parameters it accepts and how they map onto the
request body. Two entries deviate from the plain pattern and do so
through named strategies rather than special cases:

- candle-snapshot nests its fields under ``req`` (BodyLayout.NESTED_REQ)
- positions reshapes the clearinghouse state (reshape_positions)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from hyperliquid_mcp.errors import UpstreamShapeError

INFO_ENDPOINT = "info"

CANDLE_INTERVALS: Tuple[str, ...] = (
    "1m", "3m", "5m", "15m", "30m",
    "1h", "2h", "4h", "8h", "12h",
    "1d", "3d", "1w", "1M",
)


class BodyLayout(str, Enum):
    """Where parameter fields go in the upstream request body."""

    FLAT = "flat"
    NESTED_REQ = "nested_req"


@dataclass(frozen=True)
class Param:
    """A tool parameter and the request-body key it maps to."""

    name: str
    key: str
    description: str
    required: bool = True


@dataclass(frozen=True)
class Endpoint:
    """One row of the endpoint table."""

    name: str
    info_type: str
    description: str
    params: Tuple[Param, ...] = ()
    body_layout: BodyLayout = BodyLayout.FLAT
    response_mapper: Optional[Callable[[Any], Any]] = field(default=None, compare=False)

    @property
    def required_params(self) -> List[Param]:
        return [p for p in self.params if p.required]

    @property
    def optional_params(self) -> List[Param]:
        return [p for p in self.params if not p.required]

    def map_response(self, data: Any) -> Any:
        """Apply the response mapper, or return the data unchanged."""
        if self.response_mapper is None:
            return data
        return self.response_mapper(data)


# =============================================================================
# Request mapping
# =============================================================================


def build_request_body(endpoint: Endpoint, arguments: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the upstream request body for a tool call.

    The ``type`` discriminator always comes first. Required parameters are
    always copied; optional parameters are copied only when supplied. A
    value of None means "not supplied" - False, 0 and "" are real values
    and are sent.

    Args:
        endpoint: Endpoint table entry
        arguments: Tool arguments keyed by parameter name

    Returns:
        Request body ready to be JSON-encoded

    Raises:
        ValueError: If a required argument is missing or an argument is unknown
    """
    known = {p.name for p in endpoint.params}
    unknown = sorted(set(arguments) - known)
    if unknown:
        raise ValueError(f"Unknown argument(s) for {endpoint.name}: {', '.join(unknown)}")

    fields: Dict[str, Any] = {}
    for param in endpoint.params:
        value = arguments.get(param.name)
        if value is None:
            if param.required:
                raise ValueError(f"Missing required argument for {endpoint.name}: {param.name}")
            continue
        fields[param.key] = value

    body: Dict[str, Any] = {"type": endpoint.info_type}
    if endpoint.body_layout is BodyLayout.NESTED_REQ:
        body["req"] = fields
    else:
        body.update(fields)
    return body


# =============================================================================
# Response mapping
# =============================================================================


def reshape_positions(data: Any) -> Dict[str, Any]:
    """
    Reduce a clearinghouseState response to positions and margin totals.

    Raises:
        UpstreamShapeError: If an expected field is missing or mistyped
    """
    try:
        positions = []
        for entry in data["assetPositions"]:
            position = entry["position"]
            positions.append(
                {
                    "coin": position["coin"],
                    "size": position["szi"],
                    "entryPrice": position["entryPx"],
                    "unrealizedPnl": position["unrealizedPnl"],
                    "leverage": position["leverage"]["value"],
                    "liquidationPrice": position["liquidationPx"],
                    "returnOnEquity": position["returnOnEquity"],
                }
            )

        return {
            "positions": positions,
            "accountValue": data["marginSummary"]["accountValue"],
            "totalMarginUsed": data["marginSummary"]["totalMarginUsed"],
            "withdrawable": data["withdrawable"],
        }
    except KeyError as e:
        raise UpstreamShapeError(
            f"clearinghouseState response is missing field {e.args[0]!r}"
        ) from e
    except TypeError as e:
        raise UpstreamShapeError(f"clearinghouseState response has unexpected shape: {e}") from e


# =============================================================================
# Parameter definitions
# =============================================================================


USER = Param("user", "user", "Onchain address in 42-character hexadecimal format")
DEX = Param(
    "dex",
    "dex",
    "Perp dex name. Omit for the first perp dex; an empty string also selects it",
    required=False,
)
COIN = Param("coin", "coin", "Coin name, e.g. BTC")
START_TIME = Param("start_time", "startTime", "Start time in milliseconds, inclusive")
END_TIME = Param(
    "end_time",
    "endTime",
    "End time in milliseconds, inclusive. Defaults to current time upstream",
    required=False,
)
AGGREGATE_BY_TIME = Param(
    "aggregate_by_time",
    "aggregateByTime",
    "When true, partial fills are combined when a crossing order is filled",
    required=False,
)
TOKEN_ID = Param("token_id", "tokenId", "Token id as a 34-character hexadecimal string")
OID = Param("oid", "oid", "Order id (number) or client order id (16-byte hex string)")
N_SIG_FIGS = Param(
    "n_sig_figs",
    "nSigFigs",
    "Aggregate levels to this many significant figures (2-5). Omit for full precision",
    required=False,
)
MANTISSA = Param(
    "mantissa",
    "mantissa",
    "Mantissa for aggregation (1, 2 or 5); only allowed when nSigFigs is 5",
    required=False,
)
INTERVAL = Param("interval", "interval", "Candle interval: " + ", ".join(CANDLE_INTERVALS))
CANDLE_START_TIME = Param("start_time", "startTime", "Start time in milliseconds")
CANDLE_END_TIME = Param("end_time", "endTime", "End time in milliseconds")
BUILDER = Param("builder", "builder", "Builder address in 42-character hexadecimal format")
VAULT_ADDRESS = Param(
    "vault_address", "vaultAddress", "Vault address in 42-character hexadecimal format"
)
VAULT_USER = Param(
    "user",
    "user",
    "Onchain address in 42-character hexadecimal format. Adds the user's vault equity",
    required=False,
)


def _user_only(name: str, info_type: str, description: str) -> Endpoint:
    return Endpoint(name, info_type, description, (USER,))


# =============================================================================
# Endpoint table
# =============================================================================


_ENDPOINT_LIST: Tuple[Endpoint, ...] = (
    # Perpetuals
    Endpoint(
        "positions",
        "clearinghouseState",
        "Get a user's open perpetual positions and margin summary",
        (USER, DEX),
        response_mapper=reshape_positions,
    ),
    Endpoint("perp-dexs", "perpDexs", "List all perpetual dexs"),
    Endpoint(
        "perp-meta",
        "meta",
        "Get perpetuals metadata (universe and margin tables)",
        (DEX,),
    ),
    Endpoint(
        "perp-asset-contexts",
        "metaAndAssetCtxs",
        "Get perpetuals metadata with asset contexts (mark price, funding, open interest)",
    ),
    Endpoint(
        "user-funding",
        "userFunding",
        "Get a user's funding payment history",
        (USER, START_TIME, END_TIME),
    ),
    Endpoint(
        "user-non-funding-ledger",
        "userNonFundingLedgerUpdates",
        "Get a user's non-funding ledger updates (deposits, transfers, withdrawals)",
        (USER, START_TIME, END_TIME),
    ),
    Endpoint(
        "funding-history",
        "fundingHistory",
        "Get historical funding rates for a coin",
        (COIN, START_TIME, END_TIME),
    ),
    Endpoint(
        "predicted-fundings",
        "predictedFundings",
        "Get predicted funding rates for each asset across venues",
    ),
    Endpoint(
        "perps-at-oi-cap",
        "perpsAtOpenInterestCap",
        "List perpetuals currently at their open interest cap",
    ),
    Endpoint(
        "perp-deploy-auction",
        "perpDeployAuctionStatus",
        "Get the status of the perp deploy auction",
    ),
    # Spot
    Endpoint("spot-meta", "spotMeta", "Get spot metadata (tokens and universe)"),
    Endpoint(
        "spot-asset-contexts",
        "spotMetaAndAssetCtxs",
        "Get spot metadata with asset contexts",
    ),
    _user_only("spot-balances", "spotClearinghouseState", "Get a user's spot token balances"),
    _user_only(
        "spot-deploy-auction",
        "spotDeployState",
        "Get a user's spot deploy state and the spot deploy auction status",
    ),
    Endpoint(
        "token-details",
        "tokenDetails",
        "Get details for a spot token",
        (TOKEN_ID,),
    ),
    # Market data and orders
    Endpoint(
        "all-mids",
        "allMids",
        "Get mid prices for all coins",
        (DEX,),
    ),
    Endpoint(
        "open-orders",
        "openOrders",
        "Get a user's open orders",
        (USER, DEX),
    ),
    Endpoint(
        "frontend-open-orders",
        "frontendOpenOrders",
        "Get a user's open orders with additional frontend info",
        (USER, DEX),
    ),
    Endpoint(
        "user-fills",
        "userFills",
        "Get a user's most recent fills",
        (USER, AGGREGATE_BY_TIME),
    ),
    Endpoint(
        "user-fills-by-time",
        "userFillsByTime",
        "Get a user's fills within a time range",
        (USER, START_TIME, END_TIME, AGGREGATE_BY_TIME),
    ),
    _user_only("user-rate-limit", "userRateLimit", "Get a user's request rate limit status"),
    Endpoint(
        "order-status",
        "orderStatus",
        "Get the status of an order by order id or client order id",
        (USER, OID),
    ),
    Endpoint(
        "l2-book",
        "l2Book",
        "Get an L2 order book snapshot for a coin",
        (COIN, N_SIG_FIGS, MANTISSA),
    ),
    Endpoint(
        "candle-snapshot",
        "candleSnapshot",
        "Get a candle snapshot for a coin and interval",
        (COIN, INTERVAL, CANDLE_START_TIME, CANDLE_END_TIME),
        body_layout=BodyLayout.NESTED_REQ,
    ),
    Endpoint(
        "max-builder-fee",
        "maxBuilderFee",
        "Get the maximum builder fee a user has approved for a builder",
        (USER, BUILDER),
    ),
    _user_only("historical-orders", "historicalOrders", "Get a user's historical orders"),
    _user_only("user-twap-slice-fills", "userTwapSliceFills", "Get a user's TWAP slice fills"),
    _user_only("subaccounts", "subAccounts", "Get a user's subaccounts"),
    # Vaults
    Endpoint(
        "vault-details",
        "vaultDetails",
        "Get details for a vault",
        (VAULT_ADDRESS, VAULT_USER),
    ),
    _user_only("user-vault-equities", "userVaultEquities", "Get a user's vault deposits"),
    # Account
    _user_only("user-role", "userRole", "Get a user's role (user, agent, vault, subaccount)"),
    _user_only("user-portfolio", "portfolio", "Get a user's portfolio history"),
    _user_only("user-referral", "referral", "Get a user's referral information"),
    _user_only("user-fees", "userFees", "Get a user's fee schedule and volume"),
    # Staking
    _user_only("user-delegations", "delegations", "Get a user's staking delegations"),
    _user_only("user-staking-summary", "delegatorSummary", "Get a user's staking summary"),
    _user_only("user-staking-history", "delegatorHistory", "Get a user's staking history"),
    _user_only("user-staking-rewards", "delegatorRewards", "Get a user's staking rewards"),
)

ENDPOINTS: Dict[str, Endpoint] = {endpoint.name: endpoint for endpoint in _ENDPOINT_LIST}


def get_endpoint(name: str) -> Endpoint:
    """
    Look up an endpoint by tool name.

    Raises:
        KeyError: If no tool of that name exists
    """
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise KeyError(f"Unknown tool: {name}") from None
