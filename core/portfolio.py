# =============================================================================
# core/portfolio.py  —  Combined Portfolio Analysis
# =============================================================================
#
# Merges a user's swap-side and vault-side positions into one summary.
#
# FLOW:
#   1. Fetch both position lists CONCURRENTLY (asyncio.gather).  The join
#      waits for both sides to finish; then the first error, if any, is
#      re-raised and the whole analysis fails.  There are no partial
#      results.
#   2. Sum value / pnl on each side.  Missing or unparsable numbers count
#      as zero (ledger-served swap positions carry no value at all).
#   3. totalPnlPercent = totalPnl / totalValue × 100, or "0" when the
#      portfolio is empty.
#   4. Attach the fixed risk metrics and, if asked, the fixed
#      recommendations.  Neither is personalized.
# =============================================================================

from decimal import Decimal
import asyncio
import logging

from core import fixtures
from core.amounts import format_amount, to_decimal
from core.models import PortfolioAnalysis, PortfolioSummary
from core.swap import SwapDataAdapter
from core.vaults import VaultDataAdapter

logger = logging.getLogger(__name__)

PNL_PERCENT_PLACES = 2


class PortfolioAnalyzer:
    """Cross-adapter aggregation for a single user."""

    def __init__(self, swap: SwapDataAdapter, vaults: VaultDataAdapter):
        self.swap = swap
        self.vaults = vaults

    async def analyze(self, user_address: str, include_recommendations: bool = True) -> PortfolioAnalysis:
        """Build the combined analysis for `user_address`.

        Args:
            user_address: The account to analyse.
            include_recommendations: Append the fixed advisory list.

        Returns:
            A PortfolioAnalysis.

        Raises:
            UpstreamUnavailable: if either side exhausted all its tiers.
        """
        results = await asyncio.gather(
            self.swap.get_user_positions(user_address),
            self.vaults.get_user_positions(user_address),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        swap_positions, vault_positions = results

        swap_value = sum((to_decimal(p.value) for p in swap_positions), Decimal(0))
        swap_pnl = sum((to_decimal(p.pnl) for p in swap_positions), Decimal(0))
        vault_value = sum((to_decimal(p.underlying_value) for p in vault_positions), Decimal(0))
        vault_pnl = sum((to_decimal(p.pnl) for p in vault_positions), Decimal(0))

        total_value = swap_value + vault_value
        total_pnl = swap_pnl + vault_pnl
        if total_value == 0:
            pnl_percent = "0"
        else:
            pnl_percent = format_amount(total_pnl / total_value * 100, PNL_PERCENT_PLACES)

        logger.debug(
            "portfolio %s: %d swap / %d vault positions, total value %s",
            user_address, len(swap_positions), len(vault_positions), total_value,
        )

        return PortfolioAnalysis(
            user_address=user_address,
            summary=PortfolioSummary(
                total_value=format_amount(total_value),
                soroswap_value=format_amount(swap_value),
                defindex_value=format_amount(vault_value),
                total_pnl=format_amount(total_pnl),
                total_pnl_percent=pnl_percent,
            ),
            soroswap_positions=swap_positions,
            defindex_positions=vault_positions,
            risk_metrics=dict(fixtures.PORTFOLIO_RISK_METRICS),
            recommendations=[dict(r) for r in fixtures.RECOMMENDATIONS] if include_recommendations else None,
        )
