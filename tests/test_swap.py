"""
Tests for the swap-data adapter: pair filtering, quotes, pools, prices and
positions, on both the live and the mock tier.
"""

import asyncio
from decimal import Decimal

import pytest

from core import fixtures
from core.errors import MalformedArgument
from core.swap import SwapDataAdapter, pair_matches
from tests.conftest import USER


@pytest.fixture
def offline(config, offline_transport):
    return SwapDataAdapter(config, transport=offline_transport)


def _quote(adapter, amount_in, slippage="0.5"):
    return asyncio.run(
        adapter.get_swap_quote(fixtures.NATIVE, fixtures.USDC_ADDRESS, amount_in, slippage)
    )


class TestTokenPairs:
    def test_unfiltered_returns_catalog(self, offline):
        pairs = asyncio.run(offline.get_token_pairs())
        assert [p.pair_address for p in pairs] == [p.pair_address for p in fixtures.pairs()]

    @pytest.mark.parametrize("token", ["XLM", "USDC", "AQUA", fixtures.USDC_ADDRESS, "native", "BTC"])
    def test_filtered_is_subset(self, offline, token):
        everything = {p.pair_address for p in asyncio.run(offline.get_token_pairs())}
        filtered = asyncio.run(offline.get_token_pairs(token))
        assert {p.pair_address for p in filtered} <= everything
        assert all(pair_matches(p, token) for p in filtered)

    def test_symbol_match_is_exact(self, offline):
        assert asyncio.run(offline.get_token_pairs("usdc")) == []
        assert len(asyncio.run(offline.get_token_pairs("USDC"))) == 1
        assert len(asyncio.run(offline.get_token_pairs("XLM"))) == 2

    def test_live_tier_applies_same_filter(self, config, api_transport):
        adapter = SwapDataAdapter(config, transport=api_transport)
        pairs = asyncio.run(adapter.get_token_pairs("AQUA"))
        assert [p.pair_address for p in pairs] == [fixtures.XLM_AQUA_PAIR]


class TestSwapQuote:
    def test_mock_quote_values(self, offline):
        quote = _quote(offline, "1000")
        assert quote.amount_out == "119.640000"
        assert quote.minimum_received == "119.041800"
        assert quote.route == [fixtures.NATIVE, fixtures.USDC_ADDRESS]
        assert quote.token_in.symbol == "XLM"
        assert quote.token_out.symbol == "USDC"
        assert quote.slippage == "0.5"

    def test_amount_out_increases_with_amount_in(self, offline):
        quotes = [_quote(offline, amount) for amount in ("1", "10", "250.5", "1000")]
        outs = [Decimal(q.amount_out) for q in quotes]
        minimums = [Decimal(q.minimum_received) for q in quotes]
        assert outs == sorted(outs) and len(set(outs)) == len(outs)
        assert minimums == sorted(minimums) and len(set(minimums)) == len(minimums)

    def test_minimum_received_decreases_with_slippage(self, offline):
        quotes = [_quote(offline, "1000", slippage) for slippage in ("0.1", "0.5", "1", "5")]
        assert len({q.amount_out for q in quotes}) == 1
        minimums = [Decimal(q.minimum_received) for q in quotes]
        assert minimums == sorted(minimums, reverse=True)
        assert len(set(minimums)) == len(minimums)

    @pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity", ""])
    def test_malformed_amount_rejected(self, offline, amount):
        with pytest.raises(MalformedArgument):
            _quote(offline, amount)

    @pytest.mark.parametrize("amount", ["-1000", "-0.01", "1e40"])
    def test_out_of_range_amount_rejected(self, offline, amount):
        with pytest.raises(MalformedArgument) as info:
            _quote(offline, amount)
        assert "amountIn" in info.value.message

    @pytest.mark.parametrize("slippage", ["-1", "150", "100.01"])
    def test_slippage_outside_percent_range_rejected(self, offline, slippage):
        with pytest.raises(MalformedArgument) as info:
            _quote(offline, "1000", slippage)
        assert "slippage" in info.value.message

    def test_slippage_bounds_are_inclusive(self, offline):
        assert _quote(offline, "1000", "0").minimum_received == "119.640000"
        assert _quote(offline, "1000", "100").minimum_received == "0.000000"

    def test_very_large_amount_is_quoted(self, offline):
        quote = _quote(offline, "100000000000000000000000")
        assert quote.amount_out == "11964000000000000000000.000000"
        assert quote.minimum_received == "11904180000000000000000.000000"


class TestPoolsAndPrices:
    def test_single_pool_by_address(self, offline):
        pools = asyncio.run(offline.get_liquidity_pools(fixtures.XLM_USDC_PAIR))
        assert len(pools) == 1
        assert pools[0].pair_address == fixtures.XLM_USDC_PAIR

    def test_unknown_pool_is_empty(self, offline):
        assert asyncio.run(offline.get_liquidity_pools("CUNKNOWN")) == []

    def test_price_by_symbol_and_address(self, offline):
        by_symbol = asyncio.run(offline.get_token_price("xlm"))
        by_address = asyncio.run(offline.get_token_price(fixtures.USDC_ADDRESS, "EUR"))
        assert by_symbol.price == "0.12"
        assert by_address.price == "1.00"
        assert by_address.base_currency == "EUR"

    def test_unknown_token(self, offline):
        price = asyncio.run(offline.get_token_price("CUNKNOWN"))
        assert price.price == "0"
        assert price.token.symbol == "UNKNOWN"
        info = asyncio.run(offline.get_token_info("CUNKNOWN"))
        assert info.decimals == 7

    def test_liquidity_provision_placeholder(self, offline):
        calc = offline.calculate_liquidity_provision("native", fixtures.USDC_ADDRESS, "1000")
        assert calc.required_amount_b == "500"
        assert calc.expected_lp_tokens == "707"
        assert calc.share_of_pool == "0.05"

    def test_liquidity_provision_wire_keys(self, offline):
        calc = offline.calculate_liquidity_provision("native", fixtures.USDC_ADDRESS, "1000")
        payload = calc.to_dict()
        assert payload["expectedLPTokens"] == "707"
        assert "expectedLpTokens" not in payload
        assert payload["requiredAmountB"] == "500"

    def test_negative_liquidity_amount_rejected(self, offline):
        with pytest.raises(MalformedArgument):
            offline.calculate_liquidity_provision("native", fixtures.USDC_ADDRESS, "-10")


class TestUserPositions:
    def test_ledger_tier_maps_pool_shares(self, config, ledger_transport):
        adapter = SwapDataAdapter(config, transport=ledger_transport)
        positions = asyncio.run(adapter.get_user_positions(USER))
        assert len(positions) == 1
        assert positions[0].lp_token_balance == "42.5000000"
        assert positions[0].value is None

    def test_mock_tier_when_ledger_down(self, offline):
        positions = asyncio.run(offline.get_user_positions(USER))
        assert positions[0].to_dict() == fixtures.swap_positions()[0].to_dict()
