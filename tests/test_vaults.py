"""
Tests for the vault-data adapter: filtering, projections, allocation plans,
analytics and the three-tier position lookup.
"""

import asyncio
from decimal import Decimal

import pytest

from core import fixtures
from core.errors import MalformedArgument
from core.vaults import VaultDataAdapter
from tests.conftest import USER


@pytest.fixture
def offline(config, offline_transport):
    return VaultDataAdapter(config, transport=offline_transport)


class TestVaultCatalog:
    def test_high_risk_filter(self, offline):
        vaults = asyncio.run(offline.get_available_vaults("high"))
        assert len(vaults) == 1
        assert vaults[0].apy == "25.7"
        assert vaults[0].risk_level == "high"

    def test_min_apy_is_numeric(self, offline):
        vaults = asyncio.run(offline.get_available_vaults(min_apy="10"))
        assert {v.apy for v in vaults} == {"15.2", "25.7"}

    def test_bad_min_apy_rejected(self, offline):
        with pytest.raises(MalformedArgument):
            asyncio.run(offline.get_available_vaults(min_apy="lots"))

    def test_live_and_mock_have_same_shape(self, config, offline, api_transport):
        live = asyncio.run(VaultDataAdapter(config, transport=api_transport).get_available_vaults())
        mock = asyncio.run(offline.get_available_vaults())
        assert len(live) == len(mock)
        assert [sorted(v.to_dict()) for v in live] == [sorted(v.to_dict()) for v in mock]

    def test_unknown_vault_falls_back_to_first(self, offline):
        vault = asyncio.run(offline.get_vault_details("CNOTAVAULT"))
        assert vault.address == fixtures.STABLE_VAULT

    def test_known_vault(self, offline):
        vault = asyncio.run(offline.get_vault_details(fixtures.HIGH_YIELD_VAULT))
        assert vault.name == "High Yield Vault"


class TestStrategies:
    def test_protocol_is_case_insensitive_substring(self, offline):
        strategies = asyncio.run(offline.get_yield_strategies(protocol="aqua"))
        assert [s.id for s in strategies] == ["multi-farm"]
        assert len(asyncio.run(offline.get_yield_strategies(protocol="SOROSWAP"))) == 3

    def test_risk_and_protocol_combined(self, offline):
        strategies = asyncio.run(offline.get_yield_strategies("high", "lending"))
        assert [s.id for s in strategies] == ["leveraged-yield"]

    def test_live_tier(self, config, api_transport):
        adapter = VaultDataAdapter(config, transport=api_transport)
        strategies = asyncio.run(adapter.get_yield_strategies("low"))
        assert [s.id for s in strategies] == ["usdc-xlm-lp"]


class TestDepositProjection:
    def _yield(self, adapter, timeframe):
        projection = asyncio.run(
            adapter.calculate_vault_deposit(fixtures.STABLE_VAULT, "1000", timeframe)
        )
        return Decimal(projection.projected_yield)

    def test_one_year_is_double_six_months(self, offline):
        assert self._yield(offline, "1y") == 2 * self._yield(offline, "6m")

    def test_other_timeframes_use_quarter(self, offline):
        assert self._yield(offline, "3m") == Decimal("21.25")
        assert self._yield(offline, "30d") == Decimal("21.25")

    def test_fees_and_shares(self, offline):
        projection = asyncio.run(offline.calculate_vault_deposit(fixtures.STABLE_VAULT, "1000"))
        assert projection.timeframe == "1y"
        assert projection.expected_shares == "950"
        assert projection.projected_value == "1085"
        assert projection.fees.deposit_fee == "0"
        assert projection.fees.management_fee == "10"
        assert projection.fees.performance_fee == "8.5"

    def test_missing_amount_rejected(self, offline):
        with pytest.raises(MalformedArgument):
            asyncio.run(offline.calculate_vault_deposit(fixtures.STABLE_VAULT, None))

    @pytest.mark.parametrize("amount", ["-1000", "1e31"])
    def test_out_of_range_amount_rejected(self, offline, amount):
        with pytest.raises(MalformedArgument) as info:
            asyncio.run(offline.calculate_vault_deposit(fixtures.STABLE_VAULT, amount))
        assert "depositAmount" in info.value.message

    def test_zero_deposit_projects_nothing(self, offline):
        projection = asyncio.run(offline.calculate_vault_deposit(fixtures.STABLE_VAULT, "0"))
        assert projection.projected_yield == "0"
        assert projection.fees.management_fee == "0"


class TestAllocation:
    @pytest.mark.parametrize("tolerance", ["conservative", "moderate", "aggressive"])
    def test_allocations_sum_to_100(self, offline, tolerance):
        plan = asyncio.run(offline.optimize_yield_allocation("10000", tolerance))
        assert sum(int(a.allocation) for a in plan.recommended_allocation) == 100
        assert sum(Decimal(a.amount) for a in plan.recommended_allocation) == Decimal("10000")

    def test_conservative_plan(self, offline):
        plan = asyncio.run(offline.optimize_yield_allocation("10000", "conservative", "1y"))
        assert len(plan.recommended_allocation) == 2
        assert plan.expected_portfolio_apy == "10.51"
        assert plan.diversification_score == "85"
        assert [a.risk_level for a in plan.recommended_allocation] == ["low", "medium"]

    def test_aggressive_includes_high_risk(self, offline):
        plan = asyncio.run(offline.optimize_yield_allocation("10000", "aggressive"))
        assert [a.allocation for a in plan.recommended_allocation] == ["30", "40", "30"]
        assert plan.expected_portfolio_apy == "16.34"

    def test_unknown_tolerance_rejected(self, offline):
        with pytest.raises(MalformedArgument):
            asyncio.run(offline.optimize_yield_allocation("10000", "reckless"))

    def test_negative_total_rejected(self, offline):
        with pytest.raises(MalformedArgument) as info:
            asyncio.run(offline.optimize_yield_allocation("-10000", "moderate"))
        assert "totalAmount" in info.value.message


class TestAnalyticsAndPerformance:
    def test_analytics_fixed_history(self, offline):
        report = asyncio.run(offline.get_vault_analytics(fixtures.STABLE_VAULT, "7d"))
        assert report.period == "7d"
        assert len(report.performance_history) == 5
        assert report.metrics.total_return == "8.5"
        assert report.metrics.net_flow == "950000"
        assert report.top_performers == [
            {"strategy": "USDC-XLM Liquidity Mining on Soroswap", "contribution": "100%"}
        ]

    def test_history_ignores_period(self, offline):
        week = asyncio.run(offline.get_vault_analytics(fixtures.STABLE_VAULT, "7d"))
        year = asyncio.run(offline.get_vault_analytics(fixtures.STABLE_VAULT, "1y"))
        assert week.performance_history == year.performance_history

    def test_portfolio_performance(self, offline):
        report = asyncio.run(offline.get_portfolio_performance(USER))
        assert report.user_address == USER
        assert report.timeframe == "30d"
        assert len(report.performance_by_vault) == 2


class TestUserPositions:
    def test_ledger_tier_builds_stand_ins(self, config, ledger_transport):
        adapter = VaultDataAdapter(config, transport=ledger_transport)
        positions = asyncio.run(adapter.get_user_positions(USER))
        assert [p.vault_name for p in positions] == ["DFX Vault", "DFXVAULT Vault"]
        assert positions[1].vault_address == "unknown"
        assert all(p.entry_price == "1.0" and p.current_price == "1.0" for p in positions)
        assert all(p.pnl == "0" for p in positions)

    def test_mock_tier(self, offline):
        positions = asyncio.run(offline.get_user_positions(USER))
        assert [p.vault_address for p in positions] == [
            fixtures.STABLE_VAULT,
            fixtures.BALANCED_VAULT,
        ]


class TestFixtureIsolation:
    def test_vault_token_lists_are_not_shared(self):
        fixtures.vaults()[0].underlying_tokens.append("EXTRA")
        assert "EXTRA" not in fixtures.vaults()[0].underlying_tokens

    def test_strategy_protocols_are_not_shared(self):
        fixtures.strategies()[0].protocols.clear()
        assert fixtures.strategies()[0].protocols == ["Soroswap"]

    def test_served_catalog_survives_caller_mutation(self, offline):
        served = asyncio.run(offline.get_available_vaults())
        served[0].underlying_tokens.append("EXTRA")
        again = asyncio.run(offline.get_available_vaults())
        assert "EXTRA" not in again[0].underlying_tokens
