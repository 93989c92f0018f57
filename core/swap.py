# =============================================================================
# core/swap.py  —  Swap-Data Adapter (pairs, quotes, pools, prices, positions)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Answers trading-pair, quote, pool and price questions for Soroswap.  Each
#   public method is a fallback chain (see core/fallback.py):
#
#       get_token_pairs       live API  →  mock
#       get_swap_quote        live API  →  mock
#       get_liquidity_pools   live API  →  mock
#       get_token_price       live API  →  mock
#       get_token_info        live API  →  mock
#       get_user_positions    ledger    →  mock
#
#   Live and mock tiers share the same filter predicates and return the same
#   record types, so a caller sees one shape regardless of which tier served.
#   Each call is all-live or all-mock; nothing is retried.
#
# MOCK GENERATORS:
#   The `_mock_*` methods read the fixture tables in core/fixtures.py.  The
#   quote generator applies a fixed XLM→USDC rate and the 0.3% pool fee; it
#   is NOT a constant-product model.
# =============================================================================

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import httpx

from core import fixtures
from core.amounts import format_amount, parse_amount
from core.backend import BackendClient
from core.config import AppConfig
from core.fallback import Tier, first_success
from core.ledger import LIQUIDITY_POOL_SHARES, LedgerClient
from core.models import (
    LiquidityPosition,
    LiquidityProvision,
    PriceRecord,
    SwapQuote,
    Token,
    TradingPair,
)


QUOTE_PLACES = 6


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def pair_matches(pair: TradingPair, token: Optional[str]) -> bool:
    """True if `token` is either side's symbol or address (exact match)."""
    if not token:
        return True
    return token in (
        pair.token0.symbol,
        pair.token1.symbol,
        pair.token0.address,
        pair.token1.address,
    )


class SwapDataAdapter:
    """Soroswap data with live → mock fallback."""

    def __init__(
        self,
        config: AppConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ledger: Optional[LedgerClient] = None,
    ):
        self.config = config
        self._api = BackendClient(
            "soroswap",
            config.soroswap_api_url,
            api_key=config.soroswap_api_key,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )
        self._ledger = ledger or LedgerClient(
            config.horizon_url, timeout_seconds=config.timeout_seconds, transport=transport
        )

    # =========================================================================
    # Pairs & pools
    # =========================================================================
    async def get_token_pairs(self, token: Optional[str] = None) -> list[TradingPair]:
        """List trading pairs, optionally only those involving `token`.

        Args:
            token: A token symbol ("XLM") or address; exact match against
                either side of the pair.

        Returns:
            The matching pairs (all pairs when `token` is None).
        """

        async def live() -> list[TradingPair]:
            data = await self._api.get("/api/pairs", params={"token": token})
            found = [TradingPair.from_dict(p) for p in data.get("pairs") or []]
            return [p for p in found if pair_matches(p, token)]

        async def mock() -> list[TradingPair]:
            return self._mock_token_pairs(token)

        return await first_success(
            "get_token_pairs", [Tier("live", live), Tier("mock", mock)]
        )

    async def get_liquidity_pools(self, pair_address: Optional[str] = None) -> list[TradingPair]:
        """List liquidity pools; with `pair_address`, at most the one matching pool."""

        async def live() -> list[TradingPair]:
            data = await self._api.get("/api/pools", params={"pairAddress": pair_address})
            found = [TradingPair.from_dict(p) for p in data.get("pools") or []]
            return _select_pool(found, pair_address)

        async def mock() -> list[TradingPair]:
            return _select_pool(fixtures.pairs(), pair_address)

        return await first_success(
            "get_liquidity_pools", [Tier("live", live), Tier("mock", mock)]
        )

    # =========================================================================
    # Quotes
    # =========================================================================
    async def get_swap_quote(
        self,
        token_in: str,
        token_out: str,
        amount_in: str,
        slippage: str = "0.5",
    ) -> SwapQuote:
        """Quote a swap of `amount_in` of `token_in` into `token_out`.

        Args:
            token_in: Input token address (or "native").
            token_out: Output token address.
            amount_in: Decimal string amount of `token_in`.
            slippage: Slippage tolerance in percent ("0.5" = 0.5%).

        Returns:
            A SwapQuote whose `minimum_received` is `amount_out` reduced by
            `slippage` percent.

        Raises:
            MalformedArgument: if `amount_in` is not a non-negative decimal or
                `slippage` is outside 0 to 100.
        """
        amount = parse_amount(amount_in, "amountIn", minimum=Decimal(0))
        tolerance = parse_amount(slippage, "slippage", minimum=Decimal(0), maximum=Decimal(100))

        async def live() -> SwapQuote:
            data = await self._api.get(
                "/api/quote",
                params={
                    "tokenIn": token_in,
                    "tokenOut": token_out,
                    "amountIn": amount_in,
                    "slippage": slippage,
                },
            )
            return SwapQuote.from_dict(data)

        async def mock() -> SwapQuote:
            return self._mock_swap_quote(token_in, token_out, amount, tolerance)

        return await first_success("get_swap_quote", [Tier("live", live), Tier("mock", mock)])

    def calculate_liquidity_provision(
        self, token_a: str, token_b: str, amount_a: str
    ) -> LiquidityProvision:
        """Placeholder estimate for adding liquidity.

        Uses a fixed 2:1 ratio and a fixed LP-token factor; there is no live
        source for this calculation.
        """
        amount = parse_amount(amount_a, "amountA", minimum=Decimal(0))
        return LiquidityProvision(
            token_a=token_a,
            token_b=token_b,
            amount_a=amount_a,
            required_amount_b=format_amount(amount * Decimal("0.5")),
            expected_lp_tokens=format_amount(amount * Decimal("0.707")),
            share_of_pool="0.05",
        )

    # =========================================================================
    # Prices & token metadata
    # =========================================================================
    async def get_token_price(self, token_address: str, base_currency: str = "USD") -> PriceRecord:
        """Current price of a token in `base_currency`."""

        async def live() -> PriceRecord:
            data = await self._api.get(
                f"/api/price/{token_address}", params={"baseCurrency": base_currency}
            )
            return PriceRecord.from_dict(data)

        async def mock() -> PriceRecord:
            return self._mock_token_price(token_address, base_currency)

        return await first_success("get_token_price", [Tier("live", live), Tier("mock", mock)])

    async def get_token_info(self, token_address: str) -> Token:
        """Symbol, name and decimals of a token."""

        async def live() -> Token:
            return Token.from_dict(await self._api.get(f"/api/token/{token_address}"))

        async def mock() -> Token:
            return self._mock_token_info(token_address)

        return await first_success("get_token_info", [Tier("live", live), Tier("mock", mock)])

    # =========================================================================
    # Positions
    # =========================================================================
    async def get_user_positions(self, user_address: str) -> list[LiquidityPosition]:
        """Liquidity positions held by `user_address`.

        The ledger tier only knows the pool id and share balance, so value
        and PnL fields are None on that path.
        """

        async def ledger() -> list[LiquidityPosition]:
            entries = await self._ledger.balances_of_type(user_address, LIQUIDITY_POOL_SHARES)
            return [
                LiquidityPosition(
                    pair_address=entry["liquidity_pool_id"],
                    lp_token_balance=entry["balance"],
                )
                for entry in entries
            ]

        async def mock() -> list[LiquidityPosition]:
            return fixtures.swap_positions()

        return await first_success(
            "get_user_positions", [Tier("ledger", ledger), Tier("mock", mock)]
        )

    # =========================================================================
    # Mock generators
    # =========================================================================
    def _mock_token_pairs(self, token: Optional[str] = None) -> list[TradingPair]:
        return [p for p in fixtures.pairs() if pair_matches(p, token)]

    def _mock_swap_quote(
        self, token_in: str, token_out: str, amount_in: Decimal, slippage: Decimal
    ) -> SwapQuote:
        rate = Decimal(fixtures.MOCK_SWAP_RATE)
        fee = Decimal(fixtures.MOCK_SWAP_FEE_PERCENT)
        amount_out = amount_in * rate * (1 - fee / 100)
        minimum = amount_out * (1 - slippage / 100)
        return SwapQuote(
            token_in=self._mock_token_info(token_in),
            token_out=self._mock_token_info(token_out),
            amount_in=format_amount(amount_in),
            amount_out=format_amount(amount_out, QUOTE_PLACES),
            price_impact="0.1",
            route=[token_in, token_out],
            slippage=format_amount(slippage),
            fee=fixtures.MOCK_SWAP_FEE_PERCENT,
            minimum_received=format_amount(minimum, QUOTE_PLACES),
            gas_estimate="0.001",
        )

    def _mock_token_price(self, token_address: str, base_currency: str) -> PriceRecord:
        token = self._mock_token_info(token_address)
        price = fixtures.TOKEN_PRICES.get(token.symbol, "0")
        return PriceRecord(
            token=token,
            price=price,
            base_currency=base_currency,
            change24h="2.5",
            volume24h="125000",
            timestamp=_utc_now(),
            market_cap="1000000000",
        )

    def _mock_token_info(self, token_address: str) -> Token:
        for token in fixtures.tokens():
            if token_address == token.address or token_address.upper() == token.symbol:
                return token
        return Token(address=token_address, symbol="UNKNOWN", name="Unknown Token", decimals=7)


def _select_pool(pools: list[TradingPair], pair_address: Optional[str]) -> list[TradingPair]:
    if not pair_address:
        return pools
    return [pool for pool in pools if pool.pair_address == pair_address][:1]
