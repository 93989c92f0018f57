# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of every record the tools return.  They
# carry no behavior beyond (de)serialization: each one is built fresh per
# request and thrown away afterwards.
#
# WIRE FORMAT:
#   Field names are snake_case in Python and camelCase on the wire
#   (pair_address → "pairAddress").  `to_dict()` performs the conversion and
#   `from_dict()` reverses it, so a record parsed from a live backend and a
#   record built from the fixture table serialize to exactly the same keys.
#
# AMOUNTS:
#   Every monetary amount is a decimal STRING.  No float fields exist.
# =============================================================================

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, ClassVar, Optional


def _camel(name: str) -> str:
    """pair_address → pairAddress; volume24h stays volume24h."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _wire_key(record: Any, name: str) -> str:
    return getattr(record, "_wire_names", {}).get(name) or _camel(name)


def dump(value: Any) -> Any:
    """Recursively convert records (and lists/dicts of records) to JSON-ready data.

    Dataclass field names are camelCased (or taken from `_wire_names`); keys
    of plain dicts are left alone.  Fields listed in `_omit_if_none` are left
    out entirely when they are None.
    """
    if is_dataclass(value) and not isinstance(value, type):
        omit = getattr(value, "_omit_if_none", frozenset())
        return {
            _wire_key(value, f.name): dump(getattr(value, f.name))
            for f in fields(value)
            if not (f.name in omit and getattr(value, f.name) is None)
        }
    if isinstance(value, (list, tuple)):
        return [dump(item) for item in value]
    if isinstance(value, dict):
        return {key: dump(item) for key, item in value.items()}
    return value


class Record:
    """Mixin giving dataclasses camelCase (de)serialization.

    Subclasses list nested record fields in `_nested`; a nested value may be a
    single mapping or a list of mappings.  `_wire_names` overrides the
    camelCase key of a field whose wire name doesn't follow the rule.
    """

    _nested: ClassVar[dict[str, type]] = {}
    _wire_names: ClassVar[dict[str, str]] = {}
    _omit_if_none: ClassVar[frozenset[str]] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        return dump(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a record from a camelCase payload.

        Raises:
            TypeError / KeyError: if the payload is not a mapping or a
            required field is missing.  Callers treat this as a parse failure.
        """
        if not isinstance(data, dict):
            raise TypeError(f"{cls.__name__} payload must be an object, got {type(data).__name__}")
        kwargs: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = _wire_key(cls, f.name)
            if key not in data:
                continue
            value = data[key]
            nested = cls._nested.get(f.name)
            if nested is not None and value is not None:
                if isinstance(value, list):
                    value = [nested.from_dict(item) for item in value]
                else:
                    value = nested.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)


# -----------------------------------------------------------------------------
# Token — one asset, identified by its contract address ("native" for XLM)
# -----------------------------------------------------------------------------
@dataclass
class Token(Record):
    address: str                       # Contract address, or "native"
    symbol: str                        # "XLM", "USDC"
    name: str                          # "Stellar Lumens"
    decimals: int                      # On-chain precision
    icon: Optional[str] = None


# -----------------------------------------------------------------------------
# TradingPair — a two-token market with reserves (also used for pools)
# -----------------------------------------------------------------------------
@dataclass
class TradingPair(Record):
    """A tradable pair / liquidity pool."""

    _nested: ClassVar[dict[str, type]] = {"token0": Token, "token1": Token}

    pair_address: str
    token0: Token
    token1: Token
    reserve0: str
    reserve1: str
    total_supply: str
    fee: str                           # Swap fee, percent ("0.3")
    volume24h: Optional[str] = None
    tvl: Optional[str] = None
    apr: Optional[str] = None


# -----------------------------------------------------------------------------
# SwapQuote — what you would receive for a swap right now
# -----------------------------------------------------------------------------
@dataclass
class SwapQuote(Record):
    """A swap quote, including the slippage-protected minimum."""

    _nested: ClassVar[dict[str, type]] = {"token_in": Token, "token_out": Token}

    token_in: Token
    token_out: Token
    amount_in: str
    amount_out: str
    price_impact: str                  # Percent
    route: list[str]                   # Token identifiers traversed, in order
    slippage: str                      # Percent ("0.5")
    fee: str                           # Percent
    minimum_received: str              # amount_out reduced by slippage
    gas_estimate: Optional[str] = None


@dataclass
class PriceRecord(Record):
    _nested: ClassVar[dict[str, type]] = {"token": Token}

    token: Token
    price: str
    base_currency: str
    change24h: str
    volume24h: str
    timestamp: str
    market_cap: Optional[str] = None


@dataclass
class LiquidityProvision(Record):
    """Placeholder estimate of what adding liquidity to a pair requires."""

    _wire_names: ClassVar[dict[str, str]] = {"expected_lp_tokens": "expectedLPTokens"}

    token_a: str
    token_b: str
    amount_a: str
    required_amount_b: str
    expected_lp_tokens: str
    share_of_pool: str


# -----------------------------------------------------------------------------
# LiquidityPosition — a user's share of a liquidity pool
# -----------------------------------------------------------------------------
# Positions read from the ledger only know the pool id and the raw share
# balance; the remaining fields stay None on that path.
# -----------------------------------------------------------------------------
@dataclass
class LiquidityPosition(Record):
    pair_address: str
    lp_token_balance: str
    token0: Optional[str] = None
    token1: Optional[str] = None
    share_of_pool: Optional[str] = None
    token0_amount: Optional[str] = None
    token1_amount: Optional[str] = None
    value: Optional[str] = None
    pnl: Optional[str] = None
    pnl_percent: Optional[str] = None


# -----------------------------------------------------------------------------
# Vault — a yield-bearing pooled position
# -----------------------------------------------------------------------------
@dataclass
class FeeStructure(Record):
    management_fee: str                # Percent per year
    performance_fee: str               # Percent of yield


@dataclass
class Vault(Record):
    """A yield vault with its strategy, APY and fee schedule."""

    _nested: ClassVar[dict[str, type]] = {"fee_structure": FeeStructure}

    address: str
    name: str
    symbol: str
    total_assets: str
    total_supply: str
    apy: str                           # Percent ("8.5")
    strategy: str
    risk_level: str                    # "low" | "medium" | "high"
    underlying_tokens: list[str]
    underlying_protocols: list[str]
    fee_structure: FeeStructure
    performance: Optional[dict[str, str]] = None   # {"7d": ..., "1y": ...}


@dataclass
class Strategy(Record):
    id: str
    name: str
    description: str
    expected_apy: str
    risk_level: str
    protocols: list[str]
    min_deposit: Optional[str] = None
    max_deposit: Optional[str] = None


# -----------------------------------------------------------------------------
# DepositProjection — projected outcome of depositing into a vault
# -----------------------------------------------------------------------------
@dataclass
class DepositFees(Record):
    deposit_fee: str
    management_fee: str
    performance_fee: str


@dataclass
class DepositProjection(Record):
    _nested: ClassVar[dict[str, type]] = {"fees": DepositFees}

    vault_address: str
    deposit_amount: str
    timeframe: str                     # "1y", "6m", ...
    expected_shares: str
    projected_value: str
    projected_yield: str
    fees: DepositFees


@dataclass
class VaultPerformance(Record):
    vault_address: str
    vault_name: str
    invested: str
    current_value: str
    pnl: str
    pnl_percent: str


@dataclass
class PerformanceReport(Record):
    """A user's portfolio performance over a timeframe."""

    _nested: ClassVar[dict[str, type]] = {"performance_by_vault": VaultPerformance}

    user_address: str
    timeframe: str
    total_value: str
    total_invested: str
    total_pnl: str
    total_pnl_percent: str
    performance_by_vault: list[VaultPerformance] = field(default_factory=list)


@dataclass
class VaultPosition(Record):
    """A user's holding in one vault."""

    vault_address: str
    vault_name: str
    shares: str
    underlying_value: str
    entry_price: str
    current_price: str
    pnl: str
    pnl_percent: str
    deposited_at: str                  # ISO-8601


# -----------------------------------------------------------------------------
# Allocation / AllocationPlan — a split of a total amount across vaults
# -----------------------------------------------------------------------------
@dataclass
class Allocation(Record):
    vault_address: str
    vault_name: str
    allocation: str                    # Percent of the total ("70")
    amount: str
    expected_apy: str
    risk_level: str


@dataclass
class AllocationPlan(Record):
    _nested: ClassVar[dict[str, type]] = {"recommended_allocation": Allocation}

    total_amount: str
    risk_tolerance: str
    time_horizon: str
    recommended_allocation: list[Allocation]
    expected_portfolio_apy: str        # Allocation-weighted APY, 2 dp
    diversification_score: str        # Constant placeholder


# -----------------------------------------------------------------------------
# AnalyticsReport — vault metrics plus a (fixed-shape) history series
# -----------------------------------------------------------------------------
@dataclass
class AnalyticsMetrics(Record):
    total_return: str
    volatility: str
    sharpe_ratio: str
    max_drawdown: str
    average_apy: str
    total_deposits: str
    total_withdrawals: str
    net_flow: str


@dataclass
class HistoryPoint(Record):
    date: str
    value: str


@dataclass
class AnalyticsReport(Record):
    _nested: ClassVar[dict[str, type]] = {
        "metrics": AnalyticsMetrics,
        "performance_history": HistoryPoint,
    }

    vault_address: str
    period: str
    metrics: AnalyticsMetrics
    performance_history: list[HistoryPoint]
    top_performers: list[dict[str, str]] = field(default_factory=list)


# -----------------------------------------------------------------------------
# PortfolioAnalysis — combined view across both adapters
# -----------------------------------------------------------------------------
@dataclass
class PortfolioSummary(Record):
    total_value: str
    soroswap_value: str
    defindex_value: str
    total_pnl: str
    total_pnl_percent: str


@dataclass
class PortfolioAnalysis(Record):
    _nested: ClassVar[dict[str, type]] = {
        "summary": PortfolioSummary,
        "soroswap_positions": LiquidityPosition,
        "defindex_positions": VaultPosition,
    }
    _omit_if_none: ClassVar[frozenset[str]] = frozenset({"recommendations"})

    user_address: str
    summary: PortfolioSummary
    soroswap_positions: list[LiquidityPosition]
    defindex_positions: list[VaultPosition]
    risk_metrics: dict[str, str]
    recommendations: Optional[list[dict[str, str]]] = None
