"""
Tests for the ordered fallback combinator and the HTTP backend client.
"""

import asyncio

import httpx
import pytest

from core.backend import BackendClient
from core.errors import MalformedArgument, UpstreamUnavailable
from core.fallback import Tier, first_success


def _returning(value):
    async def fetch():
        return value

    return fetch


def _raising(exc):
    async def fetch():
        raise exc

    return fetch


class TestFirstSuccess:
    def test_first_tier_wins(self):
        result = asyncio.run(
            first_success("op", [Tier("live", _returning("live")), Tier("mock", _returning("mock"))])
        )
        assert result == "live"

    def test_failed_tier_falls_through(self):
        tiers = [
            Tier("live", _raising(UpstreamUnavailable("down"))),
            Tier("ledger", _raising(KeyError("balances"))),
            Tier("mock", _returning("mock")),
        ]
        assert asyncio.run(first_success("op", tiers)) == "mock"

    def test_all_tiers_failed(self):
        tiers = [
            Tier("live", _raising(UpstreamUnavailable("down"))),
            Tier("mock", _raising(ValueError("bad fixture"))),
        ]
        with pytest.raises(UpstreamUnavailable) as info:
            asyncio.run(first_success("op", tiers))
        assert "all 2 tiers failed" in info.value.message
        assert info.value.source == "mock"

    def test_malformed_argument_is_not_a_tier_failure(self):
        called = []

        async def mock():
            called.append("mock")
            return "mock"

        tiers = [Tier("live", _raising(MalformedArgument("bad amount"))), Tier("mock", mock)]
        with pytest.raises(MalformedArgument):
            asyncio.run(first_success("op", tiers))
        assert called == []

    def test_no_tiers(self):
        with pytest.raises(ValueError):
            asyncio.run(first_success("op", []))


class TestBackendClient:
    def test_bearer_header_and_params(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"ok": True})

        client = BackendClient(
            "soroswap", "https://api.example.test/", api_key="secret",
            transport=httpx.MockTransport(handler),
        )
        data = asyncio.run(client.get("/api/pairs", params={"token": "XLM", "skip": None}))

        assert data == {"ok": True}
        assert seen["auth"] == "Bearer secret"
        assert seen["params"] == {"token": "XLM"}

    def test_no_key_means_no_auth_header(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={})

        client = BackendClient("defindex", "https://api.example.test", transport=httpx.MockTransport(handler))
        asyncio.run(client.post("/api/optimize", {"totalAmount": "1"}))
        assert seen["auth"] is None

    @pytest.mark.parametrize(
        "handler",
        [
            lambda request: httpx.Response(500, json={"error": "boom"}),
            lambda request: httpx.Response(200, text="<html>not json</html>"),
        ],
    )
    def test_bad_responses_become_upstream_unavailable(self, handler):
        client = BackendClient("soroswap", "https://api.example.test", transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamUnavailable):
            asyncio.run(client.get("/api/pairs"))

    def test_timeout_becomes_upstream_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = BackendClient("soroswap", "https://api.example.test", transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamUnavailable) as info:
            asyncio.run(client.get("/api/pairs"))
        assert "timed out" in info.value.message
