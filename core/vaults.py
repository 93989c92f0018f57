# =============================================================================
# core/vaults.py  —  Vault-Data Adapter (vaults, strategies, projections)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Enumerates yield vaults and strategies, projects deposits, and builds
#   fixed-weight allocation plans.  Each public method is a fallback chain:
#
#       get_available_vaults       live API  →  mock
#       get_vault_details          live API  →  mock (first vault if unknown)
#       get_yield_strategies       live API  →  mock
#       calculate_vault_deposit    live API  →  mock
#       get_portfolio_performance  live API  →  mock
#       get_user_positions         live API  →  ledger  →  mock
#       optimize_yield_allocation  live API  →  mock
#       get_vault_analytics        live API  →  mock
#
# HEURISTICS (mock tier):
#   - Deposit projection:  yield = amount × apy/100 × multiplier, where the
#     multiplier is 1 for "1y", 0.5 for "6m" and 0.25 for anything else.
#   - Allocation plans:    fixed per-tolerance weights (see fixtures).  The
#     diversification score is a constant.
#   - Analytics history:   the same five points whatever the period.
#   None of these is a real interest or risk model.
# =============================================================================

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
import logging

import httpx

from core import fixtures
from core.amounts import format_amount, parse_amount, to_decimal
from core.backend import BackendClient
from core.config import AppConfig
from core.errors import MalformedArgument, NotFound
from core.fallback import Tier, first_success
from core.ledger import CUSTOM_ASSET_TYPES, LedgerClient
from core.models import (
    Allocation,
    AllocationPlan,
    AnalyticsMetrics,
    AnalyticsReport,
    DepositFees,
    DepositProjection,
    PerformanceReport,
    Strategy,
    Vault,
    VaultPosition,
)

logger = logging.getLogger(__name__)

RISK_LEVELS = ("low", "medium", "high")
RISK_TOLERANCES = tuple(fixtures.ALLOCATION_WEIGHTS)

APY_PLACES = 2
SHARES_PER_UNIT = Decimal("0.95")


def vault_matches(vault: Vault, risk_level: Optional[str], min_apy: Optional[Decimal]) -> bool:
    """Exact risk-level match and APY >= min_apy (numeric compare)."""
    if risk_level and vault.risk_level != risk_level:
        return False
    if min_apy is not None and to_decimal(vault.apy) < min_apy:
        return False
    return True


def strategy_matches(strategy: Strategy, risk_level: Optional[str], protocol: Optional[str]) -> bool:
    """Exact risk-level match; protocol is a case-insensitive substring of any listed protocol."""
    if risk_level and strategy.risk_level != risk_level:
        return False
    if protocol:
        needle = protocol.lower()
        return any(needle in p.lower() for p in strategy.protocols)
    return True


def timeframe_multiplier(timeframe: str) -> Decimal:
    return Decimal(
        fixtures.TIMEFRAME_MULTIPLIERS.get(timeframe, fixtures.DEFAULT_TIMEFRAME_MULTIPLIER)
    )


class VaultDataAdapter:
    """DeFindex vault data with live → (ledger) → mock fallback."""

    def __init__(
        self,
        config: AppConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ledger: Optional[LedgerClient] = None,
    ):
        self.config = config
        self._api = BackendClient(
            "defindex",
            config.defindex_api_url,
            api_key=config.defindex_api_key,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )
        self._ledger = ledger or LedgerClient(
            config.horizon_url, timeout_seconds=config.timeout_seconds, transport=transport
        )

    # =========================================================================
    # Catalog lookups
    # =========================================================================
    async def get_available_vaults(
        self, risk_level: Optional[str] = None, min_apy: Optional[str] = None
    ) -> list[Vault]:
        """List vaults, optionally filtered by risk level and minimum APY.

        Args:
            risk_level: "low", "medium" or "high" (exact match).
            min_apy: Decimal string; vaults with a lower APY are dropped.

        Returns:
            The matching vaults.

        Raises:
            MalformedArgument: if `min_apy` isn't a decimal.
        """
        floor = parse_amount(min_apy, "minApy") if min_apy not in (None, "") else None

        async def live() -> list[Vault]:
            data = await self._api.get(
                "/api/vaults", params={"riskLevel": risk_level or None, "minApy": min_apy or None}
            )
            found = [Vault.from_dict(v) for v in data.get("vaults") or []]
            return [v for v in found if vault_matches(v, risk_level, floor)]

        async def mock() -> list[Vault]:
            return [v for v in fixtures.vaults() if vault_matches(v, risk_level, floor)]

        return await first_success(
            "get_available_vaults", [Tier("live", live), Tier("mock", mock)]
        )

    async def get_vault_details(self, vault_address: str) -> Vault:
        """One vault by address.

        On the mock tier an unknown address is answered with the first
        cataloged vault (logged as a warning), never an error.
        """

        async def live() -> Vault:
            return Vault.from_dict(await self._api.get(f"/api/vault/{vault_address}"))

        async def mock() -> Vault:
            return self._mock_vault(vault_address)

        return await first_success("get_vault_details", [Tier("live", live), Tier("mock", mock)])

    async def get_yield_strategies(
        self, risk_level: Optional[str] = None, protocol: Optional[str] = None
    ) -> list[Strategy]:
        """List yield strategies, optionally filtered by risk level and protocol."""

        async def live() -> list[Strategy]:
            data = await self._api.get(
                "/api/strategies", params={"riskLevel": risk_level or None, "protocol": protocol or None}
            )
            found = [Strategy.from_dict(s) for s in data.get("strategies") or []]
            return [s for s in found if strategy_matches(s, risk_level, protocol)]

        async def mock() -> list[Strategy]:
            return [s for s in fixtures.strategies() if strategy_matches(s, risk_level, protocol)]

        return await first_success(
            "get_yield_strategies", [Tier("live", live), Tier("mock", mock)]
        )

    # =========================================================================
    # Projections
    # =========================================================================
    async def calculate_vault_deposit(
        self, vault_address: str, deposit_amount: str, timeframe: str = "1y"
    ) -> DepositProjection:
        """Project the outcome of depositing `deposit_amount` into a vault.

        Args:
            vault_address: Target vault.
            deposit_amount: Decimal string amount.
            timeframe: "1y", "6m", or anything else (treated as a quarter).

        Returns:
            A DepositProjection with shares, projected value/yield and fees.
        """
        amount = parse_amount(deposit_amount, "depositAmount", minimum=Decimal(0))

        async def live() -> DepositProjection:
            data = await self._api.post(
                "/api/vault/calculate",
                {"vaultAddress": vault_address, "depositAmount": deposit_amount, "timeframe": timeframe},
            )
            return DepositProjection.from_dict(data["calculation"])

        async def mock() -> DepositProjection:
            return self._mock_deposit(vault_address, amount, timeframe)

        return await first_success(
            "calculate_vault_deposit", [Tier("live", live), Tier("mock", mock)]
        )

    async def optimize_yield_allocation(
        self, total_amount: str, risk_tolerance: str, time_horizon: str = "1y"
    ) -> AllocationPlan:
        """Split `total_amount` across vaults by a fixed per-tolerance weighting.

        Raises:
            MalformedArgument: if `total_amount` isn't a non-negative decimal or
                `risk_tolerance` is not conservative/moderate/aggressive.
        """
        amount = parse_amount(total_amount, "totalAmount", minimum=Decimal(0))
        if risk_tolerance not in fixtures.ALLOCATION_WEIGHTS:
            raise MalformedArgument(
                f"'riskTolerance' must be one of {', '.join(RISK_TOLERANCES)}, got {risk_tolerance!r}"
            )

        async def live() -> AllocationPlan:
            data = await self._api.post(
                "/api/optimize",
                {"totalAmount": total_amount, "riskTolerance": risk_tolerance, "timeHorizon": time_horizon},
            )
            return AllocationPlan.from_dict(data["optimization"])

        async def mock() -> AllocationPlan:
            return self._mock_allocation(total_amount, amount, risk_tolerance, time_horizon)

        return await first_success(
            "optimize_yield_allocation", [Tier("live", live), Tier("mock", mock)]
        )

    # =========================================================================
    # User data
    # =========================================================================
    async def get_portfolio_performance(
        self, user_address: str, timeframe: str = "30d"
    ) -> PerformanceReport:
        """A user's portfolio performance over `timeframe`."""

        async def live() -> PerformanceReport:
            data = await self._api.get(f"/api/portfolio/{user_address}", params={"timeframe": timeframe})
            return PerformanceReport.from_dict(data["performance"])

        async def mock() -> PerformanceReport:
            return fixtures.portfolio_performance(user_address, timeframe)

        return await first_success(
            "get_portfolio_performance", [Tier("live", live), Tier("mock", mock)]
        )

    async def get_user_positions(self, user_address: str) -> list[VaultPosition]:
        """Vault positions held by `user_address`.

        The ledger tier maps each custom-asset balance to a stand-in position
        priced at 1.0 with zero PnL.
        """

        async def live() -> list[VaultPosition]:
            data = await self._api.get(f"/api/positions/{user_address}")
            return [VaultPosition.from_dict(p) for p in data.get("positions") or []]

        async def ledger() -> list[VaultPosition]:
            entries = await self._ledger.balances_of_type(user_address, CUSTOM_ASSET_TYPES)
            deposited_at = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
            return [
                VaultPosition(
                    vault_address=entry.get("asset_issuer") or "unknown",
                    vault_name=f"{entry.get('asset_code')} Vault",
                    shares=entry["balance"],
                    underlying_value=entry["balance"],
                    entry_price="1.0",
                    current_price="1.0",
                    pnl="0",
                    pnl_percent="0",
                    deposited_at=deposited_at,
                )
                for entry in entries
            ]

        async def mock() -> list[VaultPosition]:
            return fixtures.vault_positions()

        return await first_success(
            "get_user_positions",
            [Tier("live", live), Tier("ledger", ledger), Tier("mock", mock)],
        )

    async def get_vault_analytics(self, vault_address: str, period: str = "30d") -> AnalyticsReport:
        """Metrics and a (fixed five-point) history for one vault."""

        async def live() -> AnalyticsReport:
            data = await self._api.get(f"/api/vault/{vault_address}/analytics", params={"period": period})
            return AnalyticsReport.from_dict(data["analytics"])

        async def mock() -> AnalyticsReport:
            return self._mock_analytics(vault_address, period)

        return await first_success(
            "get_vault_analytics", [Tier("live", live), Tier("mock", mock)]
        )

    # =========================================================================
    # Mock generators
    # =========================================================================
    def _mock_vault(self, vault_address: str) -> Vault:
        catalog = fixtures.vaults()
        try:
            return _find_vault(catalog, vault_address)
        except NotFound as exc:
            logger.warning("%s; substituting %s", exc.message, catalog[0].name)
            return catalog[0]

    def _mock_deposit(self, vault_address: str, amount: Decimal, timeframe: str) -> DepositProjection:
        vault = self._mock_vault(vault_address)
        apy = to_decimal(vault.apy) / 100
        multiplier = timeframe_multiplier(timeframe)
        projected_yield = amount * apy * multiplier
        fees = vault.fee_structure
        return DepositProjection(
            vault_address=vault_address,
            deposit_amount=format_amount(amount),
            timeframe=timeframe,
            expected_shares=format_amount(amount * SHARES_PER_UNIT),
            projected_value=format_amount(amount + projected_yield),
            projected_yield=format_amount(projected_yield),
            fees=DepositFees(
                deposit_fee="0",
                management_fee=format_amount(amount * to_decimal(fees.management_fee) / 100),
                performance_fee=format_amount(
                    amount * apy * to_decimal(fees.performance_fee) / 100
                ),
            ),
        )

    def _mock_allocation(
        self, total_amount: str, amount: Decimal, risk_tolerance: str, time_horizon: str
    ) -> AllocationPlan:
        by_risk: dict[str, Vault] = {}
        for vault in fixtures.vaults():
            by_risk.setdefault(vault.risk_level, vault)

        allocations = []
        portfolio_apy = Decimal(0)
        for risk_level, weight in fixtures.ALLOCATION_WEIGHTS[risk_tolerance]:
            vault = by_risk[risk_level]
            fraction = Decimal(weight) / 100
            portfolio_apy += fraction * to_decimal(vault.apy)
            allocations.append(
                Allocation(
                    vault_address=vault.address,
                    vault_name=vault.name,
                    allocation=str(weight),
                    amount=format_amount(amount * fraction),
                    expected_apy=vault.apy,
                    risk_level=vault.risk_level,
                )
            )

        return AllocationPlan(
            total_amount=total_amount,
            risk_tolerance=risk_tolerance,
            time_horizon=time_horizon,
            recommended_allocation=allocations,
            expected_portfolio_apy=format_amount(portfolio_apy, APY_PLACES),
            diversification_score=fixtures.DIVERSIFICATION_SCORE,
        )

    def _mock_analytics(self, vault_address: str, period: str) -> AnalyticsReport:
        vault = self._mock_vault(vault_address)
        withdrawals = fixtures.ANALYTICS_METRICS["totalWithdrawals"]
        metrics = AnalyticsMetrics(
            total_return=vault.apy,
            volatility=fixtures.ANALYTICS_METRICS["volatility"],
            sharpe_ratio=fixtures.ANALYTICS_METRICS["sharpeRatio"],
            max_drawdown=fixtures.ANALYTICS_METRICS["maxDrawdown"],
            average_apy=vault.apy,
            total_deposits=vault.total_assets,
            total_withdrawals=withdrawals,
            net_flow=format_amount(to_decimal(vault.total_assets) - to_decimal(withdrawals)),
        )
        return AnalyticsReport(
            vault_address=vault_address,
            period=period,
            metrics=metrics,
            performance_history=fixtures.analytics_history(),
            top_performers=[{"strategy": vault.strategy, "contribution": "100%"}],
        )


def _find_vault(catalog: list[Vault], vault_address: str) -> Vault:
    for vault in catalog:
        if vault.address == vault_address:
            return vault
    raise NotFound(f"vault {vault_address} is not in the catalog")
