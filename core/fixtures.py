# =============================================================================
# core/fixtures.py  —  Static Fixture Tables (the mock catalogs)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Holds the ONE copy of every mock catalog used by the final fallback tier
#   of each adapter.  The adapters' mock generators and the test suite both
#   read from here, so the documented properties (e.g. "exactly one high-risk
#   vault with APY 25.7") are checked against the same data that is served.
#
# LAYOUT:
#   - Swap-data fixtures:  tokens(), pairs(), swap_positions(), TOKEN_PRICES
#   - Vault-data fixtures: vaults(), strategies(), vault_positions(),
#                          portfolio_performance(), analytics_history(),
#                          ALLOCATION_WEIGHTS, ANALYTICS_METRICS
#
#   Tables are built from plain dicts in wire format (camelCase) and parsed
#   through the same `from_dict` used for live responses.  Helper functions
#   return deep copies so no caller can mutate the catalog.
# =============================================================================

import copy
from typing import Any

from core.models import (
    HistoryPoint,
    LiquidityPosition,
    PerformanceReport,
    Strategy,
    Token,
    TradingPair,
    Vault,
    VaultPosition,
)

NATIVE = "native"
USDC_ADDRESS = "CAQCFVLOBK5GIULPNZRGATJJMIZL5BSP7X5YJNU4TKDGSR3RCNBFIW7A"
AQUA_ADDRESS = "CAUIKL3IYGMERDRUN6YSCLWVAKIFG5Q4YJHUKM4S4NJZQIA3BAS6OJPK"

XLM_USDC_PAIR = "CDLZFC3SYJYDZT7K67VZ75HPJVIEUVNIXF47ZG2FB2RMQQAHHAGHJMUOB"
XLM_AQUA_PAIR = "CAZNWAY5GKNZUY5QFPZJQY7JXDLWNXKXFKQ3KBQPG7QJLCZ7XQMDMCGL"

STABLE_VAULT = "CBQHNAXSI55GX2GN6D67GK7BHKQKQHX4J5DYKEN6PKVP7DTCMMY7XAQD"
BALANCED_VAULT = "CDLZFC3SYJYDZT7K67VZ75HPJVIEUVNIXF47ZG2FB2RMQQAHHAGHJMUOB"
HIGH_YIELD_VAULT = "CAZNWAY5GKNZUY5QFPZJQY7JXDLWNXKXFKQ3KBQPG7QJLCZ7XQMDMCGL"


# =============================================================================
# Swap-data fixtures
# =============================================================================
_TOKENS: list[dict[str, Any]] = [
    {"address": NATIVE, "symbol": "XLM", "name": "Stellar Lumens", "decimals": 7},
    {"address": USDC_ADDRESS, "symbol": "USDC", "name": "USD Coin", "decimals": 6},
    {"address": AQUA_ADDRESS, "symbol": "AQUA", "name": "Aqua Token", "decimals": 7},
]

_PAIRS: list[dict[str, Any]] = [
    {
        "pairAddress": XLM_USDC_PAIR,
        "token0": _TOKENS[0],
        "token1": _TOKENS[1],
        "reserve0": "1000000.0000000",
        "reserve1": "120000.000000",
        "totalSupply": "346410.1610000",
        "fee": "0.3",
        "volume24h": "125000",
        "tvl": "240000",
        "apr": "12.5",
    },
    {
        "pairAddress": XLM_AQUA_PAIR,
        "token0": _TOKENS[0],
        "token1": _TOKENS[2],
        "reserve0": "800000.0000000",
        "reserve1": "2500000.0000000",
        "totalSupply": "1414213.5620000",
        "fee": "0.3",
        "volume24h": "85000",
        "tvl": "170000",
        "apr": "18.2",
    },
]

# USD prices, keyed by symbol.
TOKEN_PRICES: dict[str, str] = {
    "XLM": "0.12",
    "USDC": "1.00",
    "AQUA": "0.08",
}

# Fixed XLM→USDC rate and pool fee used by the mock quote generator.
MOCK_SWAP_RATE = "0.12"
MOCK_SWAP_FEE_PERCENT = "0.3"

_SWAP_POSITIONS: list[dict[str, Any]] = [
    {
        "pairAddress": XLM_USDC_PAIR,
        "token0": "XLM",
        "token1": "USDC",
        "lpTokenBalance": "1000.0000000",
        "shareOfPool": "0.01",
        "token0Amount": "8333.3333333",
        "token1Amount": "1000.000000",
        "value": "2000.00",
        "pnl": "100.00",
        "pnlPercent": "5.0",
    },
]


# =============================================================================
# Vault-data fixtures
# =============================================================================
_VAULTS: list[dict[str, Any]] = [
    {
        "address": STABLE_VAULT,
        "name": "Stellar Stable Yield Vault",
        "symbol": "SSYV",
        "totalAssets": "1000000.0000000",
        "totalSupply": "950000.0000000",
        "apy": "8.5",
        "strategy": "USDC-XLM Liquidity Mining on Soroswap",
        "riskLevel": "low",
        "underlyingTokens": ["USDC", "XLM"],
        "underlyingProtocols": ["Soroswap"],
        "feeStructure": {"managementFee": "1.0", "performanceFee": "10.0"},
        "performance": {"7d": "0.15", "30d": "0.68", "90d": "2.1", "1y": "8.5"},
    },
    {
        "address": BALANCED_VAULT,
        "name": "Balanced Growth Vault",
        "symbol": "BGV",
        "totalAssets": "500000.0000000",
        "totalSupply": "480000.0000000",
        "apy": "15.2",
        "strategy": "Multi-Protocol Yield Farming",
        "riskLevel": "medium",
        "underlyingTokens": ["XLM", "USDC", "AQUA"],
        "underlyingProtocols": ["Soroswap", "Stellar DEX"],
        "feeStructure": {"managementFee": "1.5", "performanceFee": "15.0"},
        "performance": {"7d": "0.25", "30d": "1.2", "90d": "3.8", "1y": "15.2"},
    },
    {
        "address": HIGH_YIELD_VAULT,
        "name": "High Yield Vault",
        "symbol": "HYV",
        "totalAssets": "250000.0000000",
        "totalSupply": "230000.0000000",
        "apy": "25.7",
        "strategy": "Leveraged Yield Farming",
        "riskLevel": "high",
        "underlyingTokens": ["XLM", "AQUA"],
        "underlyingProtocols": ["Soroswap", "Lending Protocol"],
        "feeStructure": {"managementFee": "2.0", "performanceFee": "20.0"},
        "performance": {"7d": "0.45", "30d": "2.0", "90d": "6.4", "1y": "25.7"},
    },
]

_STRATEGIES: list[dict[str, Any]] = [
    {
        "id": "usdc-xlm-lp",
        "name": "USDC-XLM Liquidity Mining",
        "description": "Provide liquidity to USDC-XLM pool on Soroswap for stable yields",
        "expectedApy": "8.5",
        "riskLevel": "low",
        "protocols": ["Soroswap"],
        "minDeposit": "100",
        "maxDeposit": "1000000",
    },
    {
        "id": "multi-farm",
        "name": "Multi-Protocol Farming",
        "description": "Diversified farming across multiple DeFi protocols on Stellar",
        "expectedApy": "15.2",
        "riskLevel": "medium",
        "protocols": ["Soroswap", "Stellar DEX", "Aqua"],
        "minDeposit": "500",
        "maxDeposit": "500000",
    },
    {
        "id": "leveraged-yield",
        "name": "Leveraged Yield Farming",
        "description": "Leveraged positions in high-yield farming opportunities",
        "expectedApy": "25.7",
        "riskLevel": "high",
        "protocols": ["Soroswap", "Lending Protocol"],
        "minDeposit": "1000",
        "maxDeposit": "100000",
    },
]

_VAULT_POSITIONS: list[dict[str, Any]] = [
    {
        "vaultAddress": STABLE_VAULT,
        "vaultName": "Stellar Stable Yield Vault",
        "shares": "5000.0000000",
        "underlyingValue": "5200.0000000",
        "entryPrice": "1.0000000",
        "currentPrice": "1.0400000",
        "pnl": "200.0000000",
        "pnlPercent": "4.0",
        "depositedAt": "2024-01-01T00:00:00Z",
    },
    {
        "vaultAddress": BALANCED_VAULT,
        "vaultName": "Balanced Growth Vault",
        "shares": "4500.0000000",
        "underlyingValue": "4800.0000000",
        "entryPrice": "1.0000000",
        "currentPrice": "1.0667000",
        "pnl": "300.0000000",
        "pnlPercent": "6.67",
        "depositedAt": "2024-01-15T00:00:00Z",
    },
]

_PORTFOLIO_PERFORMANCE: dict[str, Any] = {
    "totalValue": "10000.0000000",
    "totalInvested": "9500.0000000",
    "totalPnl": "500.0000000",
    "totalPnlPercent": "5.26",
    "performanceByVault": [
        {
            "vaultAddress": STABLE_VAULT,
            "vaultName": "Stellar Stable Yield Vault",
            "invested": "5000.0000000",
            "currentValue": "5200.0000000",
            "pnl": "200.0000000",
            "pnlPercent": "4.0",
        },
        {
            "vaultAddress": BALANCED_VAULT,
            "vaultName": "Balanced Growth Vault",
            "invested": "4500.0000000",
            "currentValue": "4800.0000000",
            "pnl": "300.0000000",
            "pnlPercent": "6.67",
        },
    ],
}

# Fixed-weight splits: (risk level of the vault, percent of the total).
ALLOCATION_WEIGHTS: dict[str, tuple[tuple[str, int], ...]] = {
    "conservative": (("low", 70), ("medium", 30)),
    "moderate": (("low", 50), ("medium", 50)),
    "aggressive": (("low", 30), ("medium", 40), ("high", 30)),
}

DIVERSIFICATION_SCORE = "85"

# Multiplier applied to a vault's APY for a deposit timeframe; anything not
# listed uses DEFAULT_TIMEFRAME_MULTIPLIER.
TIMEFRAME_MULTIPLIERS: dict[str, str] = {"1y": "1", "6m": "0.5"}
DEFAULT_TIMEFRAME_MULTIPLIER = "0.25"

_ANALYTICS_HISTORY: list[dict[str, str]] = [
    {"date": "2024-01-01", "value": "100.0000000"},
    {"date": "2024-01-15", "value": "101.2000000"},
    {"date": "2024-02-01", "value": "102.8000000"},
    {"date": "2024-02-15", "value": "104.1000000"},
    {"date": "2024-03-01", "value": "105.5000000"},
]

ANALYTICS_METRICS: dict[str, str] = {
    "volatility": "12.3",
    "sharpeRatio": "1.2",
    "maxDrawdown": "5.5",
    "totalWithdrawals": "50000.0000000",
}

PORTFOLIO_RISK_METRICS: dict[str, str] = {
    "portfolioRisk": "medium",
    "diversificationScore": "78",
    "concentrationRisk": "low",
}

RECOMMENDATIONS: list[dict[str, str]] = [
    {
        "type": "rebalancing",
        "description": "Consider rebalancing towards more DeFindex positions for better yield",
        "impact": "Potential 2.5% APY increase",
    },
    {
        "type": "diversification",
        "description": "Add exposure to high-yield DeFindex vault for better returns",
        "impact": "Improved risk-adjusted returns",
    },
]


# =============================================================================
# Accessors (always return fresh objects)
# =============================================================================
def tokens() -> list[Token]:
    return [Token.from_dict(t) for t in copy.deepcopy(_TOKENS)]


def pairs() -> list[TradingPair]:
    return [TradingPair.from_dict(p) for p in copy.deepcopy(_PAIRS)]


def swap_positions() -> list[LiquidityPosition]:
    return [LiquidityPosition.from_dict(p) for p in copy.deepcopy(_SWAP_POSITIONS)]


def vaults() -> list[Vault]:
    return [Vault.from_dict(v) for v in copy.deepcopy(_VAULTS)]


def strategies() -> list[Strategy]:
    return [Strategy.from_dict(s) for s in copy.deepcopy(_STRATEGIES)]


def vault_positions() -> list[VaultPosition]:
    return [VaultPosition.from_dict(p) for p in copy.deepcopy(_VAULT_POSITIONS)]


def portfolio_performance(user_address: str, timeframe: str) -> PerformanceReport:
    return PerformanceReport.from_dict(
        {"userAddress": user_address, "timeframe": timeframe, **copy.deepcopy(_PORTFOLIO_PERFORMANCE)}
    )


def analytics_history() -> list[HistoryPoint]:
    return [HistoryPoint.from_dict(p) for p in copy.deepcopy(_ANALYTICS_HISTORY)]
