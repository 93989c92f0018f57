# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes every catalog operation (core/operations.py) as an MCP tool.
#   Each tool is a thin wrapper: it logs the call, forwards the arguments to
#   OperationDispatcher.invoke(), and returns the JSON text it gets back.
#
# HOW IT WORKS (the flow):
#   1. An MCP client lists tools and calls one by name
#      (e.g., "soroswap_get_swap_quote")
#   2. FastMCP routes the call to the decorated function below
#   3. The function drops unset optional arguments and calls the dispatcher,
#      which validates, fills defaults, and runs the adapter with fallback
#   4. Success → the JSON text is returned as the tool result
#      Failure → the JSON error envelope is raised as a ToolError, so the
#                MCP response carries isError=true
#
# TOOL NAMING CONVENTIONS:
#   - soroswap_*  → swap-data backend (pairs, quotes, pools, prices)
#   - defindex_*  → vault-data backend (vaults, strategies, projections)
#   - combined_*  → spans both backends
#   All tools are read-only.  Nothing here submits a transaction.
#
#   Parameter names are camelCase ON PURPOSE: they are the wire names in the
#   tool schema and must match the catalog's parameter names exactly.
#
# RUNNING THIS SERVER:
#     a) Installed:  stellar-swap-mcp
#     b) From a checkout:  python main.py   (or python -m tools.mcp_server)
#   Both speak MCP over stdio.
# =============================================================================

from typing import Any, Literal, Optional
import json
import logging
import sys

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from core.config import AppConfig
from core.dispatcher import OperationDispatcher
from core.operations import build_dispatcher

SERVER_NAME = "stellar-swap-mcp-server"

RiskLevel = Literal["low", "medium", "high"]
RiskTolerance = Literal["conservative", "moderate", "aggressive"]

logger = logging.getLogger("stellar_swap_mcp")

# =============================================================================
# Logging Setup
# =============================================================================
# We log to STDERR because MCP uses STDOUT as its message stream.  A log line
# on stdout would corrupt the protocol.
#
# ANSI COLOR CODES:
#     - CYAN for incoming requests (tool name + parameters)
#     - GREEN for response JSON
#     - YELLOW for status messages (errors, fallbacks)
# =============================================================================

_CYAN = "\033[36m"     # Requests (tool calls with params)
_GREEN = "\033[32m"    # Responses (JSON output)
_YELLOW = "\033[33m"   # Status/progress messages
_RESET = "\033[0m"     # Reset to default terminal color


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [MCP] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logger.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, text: str) -> str:
    """Log the tool response as compact JSON in GREEN, then return it."""
    compact = json.dumps(json.loads(text), separators=(",", ":"))
    logger.info(f"{_GREEN}  ← {tool_name} response: {compact}{_RESET}")
    return text


# =============================================================================
# Server factory
# =============================================================================
def create_server(dispatcher: OperationDispatcher) -> FastMCP:
    """Build a FastMCP server with one tool per catalog operation.

    Args:
        dispatcher: The ready dispatcher every tool forwards to.

    Returns:
        A FastMCP instance; call `.run()` to serve over stdio.
    """
    mcp = FastMCP(SERVER_NAME)

    async def _call(tool_name: str, **arguments: Any) -> str:
        _log_request(tool_name, **arguments)
        supplied = {key: value for key, value in arguments.items() if value is not None}
        result = await dispatcher.invoke(tool_name, supplied)
        if result.is_error:
            _log_status(f"{tool_name} failed: {result.payload.get('details')}")
            raise ToolError(result.text)
        return _log_response(tool_name, result.text)

    def tool(name: str):
        return mcp.tool(name=name, description=dispatcher.get(name).description)

    # -------------------------------------------------------------------------
    # Swap-data tools
    # -------------------------------------------------------------------------
    @tool("soroswap_get_token_pairs")
    async def soroswap_get_token_pairs(token: Optional[str] = None) -> str:
        return await _call("soroswap_get_token_pairs", token=token)

    @tool("soroswap_get_swap_quote")
    async def soroswap_get_swap_quote(
        tokenIn: str, tokenOut: str, amountIn: str, slippage: Optional[str] = None
    ) -> str:
        return await _call(
            "soroswap_get_swap_quote",
            tokenIn=tokenIn, tokenOut=tokenOut, amountIn=amountIn, slippage=slippage,
        )

    @tool("soroswap_get_liquidity_pools")
    async def soroswap_get_liquidity_pools(pairAddress: Optional[str] = None) -> str:
        return await _call("soroswap_get_liquidity_pools", pairAddress=pairAddress)

    @tool("soroswap_calculate_liquidity_provision")
    async def soroswap_calculate_liquidity_provision(tokenA: str, tokenB: str, amountA: str) -> str:
        return await _call(
            "soroswap_calculate_liquidity_provision", tokenA=tokenA, tokenB=tokenB, amountA=amountA
        )

    @tool("soroswap_get_token_price")
    async def soroswap_get_token_price(tokenAddress: str, baseCurrency: Optional[str] = None) -> str:
        return await _call(
            "soroswap_get_token_price", tokenAddress=tokenAddress, baseCurrency=baseCurrency
        )

    @tool("soroswap_get_token_info")
    async def soroswap_get_token_info(tokenAddress: str) -> str:
        return await _call("soroswap_get_token_info", tokenAddress=tokenAddress)

    @tool("soroswap_get_user_positions")
    async def soroswap_get_user_positions(userAddress: str) -> str:
        return await _call("soroswap_get_user_positions", userAddress=userAddress)

    # -------------------------------------------------------------------------
    # Vault-data tools
    # -------------------------------------------------------------------------
    @tool("defindex_get_vaults")
    async def defindex_get_vaults(
        riskLevel: Optional[RiskLevel] = None, minApy: Optional[str] = None
    ) -> str:
        return await _call("defindex_get_vaults", riskLevel=riskLevel, minApy=minApy)

    @tool("defindex_get_vault_details")
    async def defindex_get_vault_details(vaultAddress: str) -> str:
        return await _call("defindex_get_vault_details", vaultAddress=vaultAddress)

    @tool("defindex_get_yield_strategies")
    async def defindex_get_yield_strategies(
        riskLevel: Optional[RiskLevel] = None, protocol: Optional[str] = None
    ) -> str:
        return await _call("defindex_get_yield_strategies", riskLevel=riskLevel, protocol=protocol)

    @tool("defindex_calculate_vault_deposit")
    async def defindex_calculate_vault_deposit(
        vaultAddress: str, depositAmount: str, timeframe: Optional[str] = None
    ) -> str:
        return await _call(
            "defindex_calculate_vault_deposit",
            vaultAddress=vaultAddress, depositAmount=depositAmount, timeframe=timeframe,
        )

    @tool("defindex_get_portfolio_performance")
    async def defindex_get_portfolio_performance(
        userAddress: str, timeframe: Optional[str] = None
    ) -> str:
        return await _call(
            "defindex_get_portfolio_performance", userAddress=userAddress, timeframe=timeframe
        )

    @tool("defindex_get_user_positions")
    async def defindex_get_user_positions(userAddress: str) -> str:
        return await _call("defindex_get_user_positions", userAddress=userAddress)

    @tool("defindex_optimize_allocation")
    async def defindex_optimize_allocation(
        totalAmount: str, riskTolerance: RiskTolerance, timeHorizon: Optional[str] = None
    ) -> str:
        return await _call(
            "defindex_optimize_allocation",
            totalAmount=totalAmount, riskTolerance=riskTolerance, timeHorizon=timeHorizon,
        )

    @tool("defindex_get_vault_analytics")
    async def defindex_get_vault_analytics(vaultAddress: str, period: Optional[str] = None) -> str:
        return await _call("defindex_get_vault_analytics", vaultAddress=vaultAddress, period=period)

    # -------------------------------------------------------------------------
    # Cross-adapter
    # -------------------------------------------------------------------------
    @tool("combined_portfolio_analysis")
    async def combined_portfolio_analysis(userAddress: str, includeRecommendations: bool = True) -> str:
        return await _call(
            "combined_portfolio_analysis",
            userAddress=userAddress, includeRecommendations=includeRecommendations,
        )

    return mcp


# =============================================================================
# Server entry point
# =============================================================================
def main(config: Optional[AppConfig] = None) -> None:
    """Build the server from the environment and serve over stdio until closed."""
    configure_logging()
    config = config or AppConfig.from_env()
    dispatcher = build_dispatcher(config)
    _log_status(
        f"{SERVER_NAME} starting on {config.network} "
        f"with {len(dispatcher.list_operations())} tools"
    )
    create_server(dispatcher).run()


if __name__ == "__main__":
    main()
