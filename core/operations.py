# =============================================================================
# core/operations.py  —  The Operation Catalog (all 16 tools, in order)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Binds every catalog entry to an adapter method and shapes the payload the
#   caller sees.  `build_dispatcher()` is the only way the rest of the
#   program gets at the adapters.
#
# ORDER:
#   Swap-data tools (soroswap_*), then vault-data tools (defindex_*), then
#   the cross-adapter analysis.  The order is the advertised tool order.
#
# PAYLOADS:
#   Handlers return plain dicts of records; the dispatcher serializes them
#   and adds `network` + `timestamp`.  Aggregates (totals, TVL sums) are
#   computed here, not in the adapters.
# =============================================================================

from decimal import Decimal
from typing import Any, Iterable, Optional

import httpx

from core.amounts import format_amount, to_decimal
from core.config import AppConfig
from core.dispatcher import Operation, OperationDispatcher, Parameter
from core.ledger import LedgerClient
from core.portfolio import PortfolioAnalyzer
from core.swap import SwapDataAdapter
from core.vaults import RISK_LEVELS, RISK_TOLERANCES, VaultDataAdapter


def _total(values: Iterable[Optional[str]]) -> str:
    return format_amount(sum((to_decimal(v) for v in values), Decimal(0)))


def _user(description: str = "Stellar account address") -> Parameter:
    return Parameter("userAddress", "string", description, required=True)


def build_operations(
    swap: SwapDataAdapter, vaults: VaultDataAdapter, portfolio: PortfolioAnalyzer
) -> list[Operation]:
    """The ordered catalog, bound to the given adapters."""

    # -------------------------------------------------------------------------
    # Swap-data handlers
    # -------------------------------------------------------------------------
    async def token_pairs(token: Optional[str]) -> dict[str, Any]:
        pairs = await swap.get_token_pairs(token)
        return {"pairs": pairs, "total": len(pairs), "totalTvl": _total(p.tvl for p in pairs)}

    async def swap_quote(token_in: str, token_out: str, amount_in: str, slippage: str) -> dict[str, Any]:
        return {"quote": await swap.get_swap_quote(token_in, token_out, amount_in, slippage)}

    async def liquidity_pools(pair_address: Optional[str]) -> dict[str, Any]:
        pools = await swap.get_liquidity_pools(pair_address)
        return {"pools": pools, "total": len(pools)}

    async def liquidity_provision(token_a: str, token_b: str, amount_a: str) -> dict[str, Any]:
        return {"calculation": swap.calculate_liquidity_provision(token_a, token_b, amount_a)}

    async def token_price(token_address: str, base_currency: str) -> dict[str, Any]:
        return {"priceData": await swap.get_token_price(token_address, base_currency)}

    async def token_info(token_address: str) -> dict[str, Any]:
        return {"token": await swap.get_token_info(token_address)}

    async def swap_positions(user_address: str) -> dict[str, Any]:
        positions = await swap.get_user_positions(user_address)
        return {
            "userAddress": user_address,
            "positions": positions,
            "total": len(positions),
            "totalValue": _total(p.value for p in positions),
        }

    # -------------------------------------------------------------------------
    # Vault-data handlers
    # -------------------------------------------------------------------------
    async def list_vaults(risk_level: Optional[str], min_apy: Optional[str]) -> dict[str, Any]:
        found = await vaults.get_available_vaults(risk_level, min_apy)
        return {
            "vaults": found,
            "total": len(found),
            "totalTvl": _total(v.total_assets for v in found),
        }

    async def vault_details(vault_address: str) -> dict[str, Any]:
        return {"vault": await vaults.get_vault_details(vault_address)}

    async def yield_strategies(risk_level: Optional[str], protocol: Optional[str]) -> dict[str, Any]:
        strategies = await vaults.get_yield_strategies(risk_level, protocol)
        return {"strategies": strategies, "total": len(strategies)}

    async def vault_deposit(vault_address: str, deposit_amount: str, timeframe: str) -> dict[str, Any]:
        return {
            "calculation": await vaults.calculate_vault_deposit(vault_address, deposit_amount, timeframe)
        }

    async def portfolio_performance(user_address: str, timeframe: str) -> dict[str, Any]:
        return {"performance": await vaults.get_portfolio_performance(user_address, timeframe)}

    async def vault_positions(user_address: str) -> dict[str, Any]:
        positions = await vaults.get_user_positions(user_address)
        return {
            "userAddress": user_address,
            "positions": positions,
            "totalPositions": len(positions),
            "totalValue": _total(p.underlying_value for p in positions),
        }

    async def optimize_allocation(
        total_amount: str, risk_tolerance: str, time_horizon: str
    ) -> dict[str, Any]:
        plan = await vaults.optimize_yield_allocation(total_amount, risk_tolerance, time_horizon)
        return {"optimization": plan}

    async def vault_analytics(vault_address: str, period: str) -> dict[str, Any]:
        return {"analytics": await vaults.get_vault_analytics(vault_address, period)}

    # -------------------------------------------------------------------------
    # Cross-adapter
    # -------------------------------------------------------------------------
    async def combined_analysis(user_address: str, include_recommendations: bool) -> dict[str, Any]:
        return {"analysis": await portfolio.analyze(user_address, include_recommendations)}

    return [
        Operation(
            "soroswap_get_token_pairs",
            "Get available trading pairs on Soroswap, optionally filtered by a token symbol or address",
            token_pairs,
            (Parameter("token", "string", "Token symbol or address to filter pairs by"),),
            "Failed to fetch Soroswap token pairs",
        ),
        Operation(
            "soroswap_get_swap_quote",
            "Get a swap quote for trading one token for another on Soroswap",
            swap_quote,
            (
                Parameter("tokenIn", "string", "Input token address", required=True),
                Parameter("tokenOut", "string", "Output token address", required=True),
                Parameter("amountIn", "string", "Amount of the input token, as a decimal string", required=True),
                Parameter("slippage", "string", "Slippage tolerance in percent", default="0.5"),
            ),
            "Failed to fetch Soroswap swap quote",
        ),
        Operation(
            "soroswap_get_liquidity_pools",
            "Get liquidity pool information from Soroswap",
            liquidity_pools,
            (Parameter("pairAddress", "string", "Pair address of a specific pool"),),
            "Failed to fetch Soroswap liquidity pools",
        ),
        Operation(
            "soroswap_calculate_liquidity_provision",
            "Estimate the counter-amount and LP tokens for adding liquidity to a pair",
            liquidity_provision,
            (
                Parameter("tokenA", "string", "First token address", required=True),
                Parameter("tokenB", "string", "Second token address", required=True),
                Parameter("amountA", "string", "Amount of the first token", required=True),
            ),
            "Failed to calculate Soroswap liquidity provision",
        ),
        Operation(
            "soroswap_get_token_price",
            "Get the current price of a token",
            token_price,
            (
                Parameter("tokenAddress", "string", "Token address or symbol", required=True),
                Parameter("baseCurrency", "string", "Currency to quote the price in", default="USD"),
            ),
            "Failed to fetch Soroswap token price",
        ),
        Operation(
            "soroswap_get_token_info",
            "Get symbol, name and decimals of a token",
            token_info,
            (Parameter("tokenAddress", "string", "Token address or symbol", required=True),),
            "Failed to fetch Soroswap token info",
        ),
        Operation(
            "soroswap_get_user_positions",
            "Get a user's liquidity positions on Soroswap",
            swap_positions,
            (_user(),),
            "Failed to fetch Soroswap user positions",
        ),
        Operation(
            "defindex_get_vaults",
            "Get available DeFindex vaults, optionally filtered by risk level and minimum APY",
            list_vaults,
            (
                Parameter("riskLevel", "string", "Vault risk level", enum=RISK_LEVELS),
                Parameter("minApy", "string", "Minimum APY in percent"),
            ),
            "Failed to fetch DeFindex vaults",
        ),
        Operation(
            "defindex_get_vault_details",
            "Get detailed information about a DeFindex vault",
            vault_details,
            (Parameter("vaultAddress", "string", "Vault contract address", required=True),),
            "Failed to fetch DeFindex vault details",
        ),
        Operation(
            "defindex_get_yield_strategies",
            "Get DeFindex yield strategies, optionally filtered by risk level and protocol",
            yield_strategies,
            (
                Parameter("riskLevel", "string", "Strategy risk level", enum=RISK_LEVELS),
                Parameter("protocol", "string", "Protocol name (case-insensitive substring)"),
            ),
            "Failed to fetch DeFindex yield strategies",
        ),
        Operation(
            "defindex_calculate_vault_deposit",
            "Project shares, yield and fees for a deposit into a DeFindex vault",
            vault_deposit,
            (
                Parameter("vaultAddress", "string", "Vault contract address", required=True),
                Parameter("depositAmount", "string", "Amount to deposit", required=True),
                Parameter("timeframe", "string", "Projection horizon: 1y, 6m, or shorter", default="1y"),
            ),
            "Failed to calculate DeFindex vault deposit",
        ),
        Operation(
            "defindex_get_portfolio_performance",
            "Get a user's DeFindex portfolio performance over a timeframe",
            portfolio_performance,
            (_user(), Parameter("timeframe", "string", "Reporting window", default="30d")),
            "Failed to fetch DeFindex portfolio performance",
        ),
        Operation(
            "defindex_get_user_positions",
            "Get a user's DeFindex vault positions",
            vault_positions,
            (_user(),),
            "Failed to fetch DeFindex user positions",
        ),
        Operation(
            "defindex_optimize_allocation",
            "Recommend a split of an amount across DeFindex vaults for a risk tolerance",
            optimize_allocation,
            (
                Parameter("totalAmount", "string", "Amount to allocate", required=True),
                Parameter(
                    "riskTolerance", "string", "Investor risk tolerance", required=True, enum=RISK_TOLERANCES
                ),
                Parameter("timeHorizon", "string", "Investment horizon", default="1y"),
            ),
            "Failed to optimize DeFindex allocation",
        ),
        Operation(
            "defindex_get_vault_analytics",
            "Get metrics and performance history for a DeFindex vault",
            vault_analytics,
            (
                Parameter("vaultAddress", "string", "Vault contract address", required=True),
                Parameter("period", "string", "Analytics period", default="30d"),
            ),
            "Failed to fetch DeFindex vault analytics",
        ),
        Operation(
            "combined_portfolio_analysis",
            "Analyse a user's combined Soroswap and DeFindex portfolio",
            combined_analysis,
            (
                _user(),
                Parameter(
                    "includeRecommendations", "boolean", "Append optimization recommendations", default=True
                ),
            ),
            "Failed to analyze combined portfolio",
        ),
    ]


def build_dispatcher(
    config: AppConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None
) -> OperationDispatcher:
    """Wire adapters from `config` into a ready dispatcher.

    Args:
        config: Process configuration.
        transport: Optional httpx transport shared by every backend (tests
            pass an httpx.MockTransport here).
    """
    ledger = LedgerClient(config.horizon_url, timeout_seconds=config.timeout_seconds, transport=transport)
    swap = SwapDataAdapter(config, transport=transport, ledger=ledger)
    vaults = VaultDataAdapter(config, transport=transport, ledger=ledger)
    portfolio = PortfolioAnalyzer(swap, vaults)
    return OperationDispatcher(build_operations(swap, vaults, portfolio), config.network)
