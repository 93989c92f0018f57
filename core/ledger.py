# =============================================================================
# core/ledger.py  —  Ledger (Horizon) Account Lookups
# =============================================================================
#
# The ledger is the SECONDARY data source: when an API has no position data,
# the adapters read the user's account balances straight from Horizon and
# map the relevant balance entries into position records.
#
# Horizon's account resource:  GET {horizon}/accounts/{address}
#   → {"balances": [{"asset_type": "...", "balance": "...", ...}, ...]}
#
# Asset types of interest:
#   liquidity_pool_shares                  → pool share balances (swap side)
#   credit_alphanum4 / credit_alphanum12   → custom assets (vault side)
# =============================================================================

from typing import Any, Optional
import logging

import httpx

from core.backend import BackendClient
from core.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

LIQUIDITY_POOL_SHARES = "liquidity_pool_shares"
CUSTOM_ASSET_TYPES = frozenset({"credit_alphanum4", "credit_alphanum12"})


class LedgerClient:
    """Reads account balances from a Horizon server."""

    def __init__(
        self,
        horizon_url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._http = BackendClient(
            "horizon", horizon_url, timeout_seconds=timeout_seconds, transport=transport
        )

    async def load_balances(self, account_address: str) -> list[dict[str, Any]]:
        """Return the balance entries of an account.

        Raises:
            UpstreamUnavailable: if the account can't be loaded or the
                response has no balances list.
        """
        account = await self._http.get(f"/accounts/{account_address}")
        balances = account.get("balances") if isinstance(account, dict) else None
        if not isinstance(balances, list):
            raise UpstreamUnavailable(
                f"horizon: account {account_address} response has no balances", source="horizon"
            )
        logger.debug("horizon: %d balance entries for %s", len(balances), account_address)
        return balances

    async def balances_of_type(
        self, account_address: str, asset_types: frozenset[str] | str
    ) -> list[dict[str, Any]]:
        """Balance entries whose `asset_type` is in `asset_types`."""
        if isinstance(asset_types, str):
            asset_types = frozenset({asset_types})
        balances = await self.load_balances(account_address)
        return [b for b in balances if b.get("asset_type") in asset_types]
