"""
Stellar Swap MCP Test Configuration
-----------------------------------
Shared fixtures for all tests.

Backends are never contacted: every adapter is built with an
httpx.MockTransport.  Three transports are provided:

  offline_transport   every request fails to connect → mock tier serves
  api_transport       swap/vault APIs serve the fixture catalog → live tier
  ledger_transport    APIs are down, Horizon serves a canned account
"""

import sys
from pathlib import Path

import httpx
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core import fixtures  # noqa: E402
from core.config import AppConfig  # noqa: E402

USER = "GBZXN7PIRZGNMHGA7MUUUF4GWPY5AYPV6LY4UV2GL6VJGIQRXFDNMADI"

LEDGER_ACCOUNT = {
    "id": USER,
    "balances": [
        {"asset_type": "native", "balance": "250.0000000"},
        {
            "asset_type": "liquidity_pool_shares",
            "liquidity_pool_id": "a468d41d8e9b8f3c7209651608b74b7db7ac9952dcae0cdf24871d1d9c7b0088",
            "balance": "42.5000000",
        },
        {
            "asset_type": "credit_alphanum4",
            "asset_code": "DFX",
            "asset_issuer": "GCKFBEIYV2U22IO2BJ4KVJOIP7XPWQGQFKKWXR6DOSJBV7STMAQSMTGG",
            "balance": "300.0000000",
        },
        {
            "asset_type": "credit_alphanum12",
            "asset_code": "DFXVAULT",
            "balance": "75.0000000",
        },
    ],
}


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def _serve_api(request: httpx.Request) -> httpx.Response:
    """Answer the swap/vault API routes from the fixture catalog."""
    path = request.url.path
    host = request.url.host
    if host == "api.soroswap.finance" and path == "/api/pairs":
        return httpx.Response(200, json={"pairs": [p.to_dict() for p in fixtures.pairs()]})
    if host == "api.defindex.io" and path == "/api/vaults":
        return httpx.Response(200, json={"vaults": [v.to_dict() for v in fixtures.vaults()]})
    if host == "api.defindex.io" and path == "/api/strategies":
        return httpx.Response(200, json={"strategies": [s.to_dict() for s in fixtures.strategies()]})
    return httpx.Response(404, json={"error": "not found"})


def _serve_ledger(request: httpx.Request) -> httpx.Response:
    if request.url.host == "horizon-testnet.stellar.org" and request.url.path == f"/accounts/{USER}":
        return httpx.Response(200, json=LEDGER_ACCOUNT)
    if request.url.host == "horizon-testnet.stellar.org":
        return httpx.Response(404, json={"status": 404})
    return httpx.Response(503, text="service unavailable")


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def offline_transport():
    return httpx.MockTransport(_refuse)


@pytest.fixture
def api_transport():
    return httpx.MockTransport(_serve_api)


@pytest.fixture
def ledger_transport():
    return httpx.MockTransport(_serve_ledger)
