"""
Tests for the FastMCP binding, driven through an in-memory fastmcp Client.
"""

import asyncio
import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from core import fixtures
from core.operations import build_dispatcher
from tools.mcp_server import SERVER_NAME, create_server
from tests.test_dispatcher import CATALOG


@pytest.fixture
def server(config, offline_transport):
    return create_server(build_dispatcher(config, transport=offline_transport))


def _list_tools(server):
    async def run():
        async with Client(server) as client:
            return await client.list_tools()

    return asyncio.run(run())


def _call(server, name, arguments):
    async def run():
        async with Client(server) as client:
            return await client.call_tool(name, arguments)

    return asyncio.run(run())


class TestToolListing:
    def test_server_name(self, server):
        assert server.name == SERVER_NAME

    def test_every_operation_is_a_tool(self, server):
        assert sorted(t.name for t in _list_tools(server)) == sorted(CATALOG)

    def test_schema_uses_wire_names(self, server):
        tools = {t.name: t for t in _list_tools(server)}
        schema = tools["soroswap_get_swap_quote"].inputSchema
        assert set(schema["properties"]) == {"tokenIn", "tokenOut", "amountIn", "slippage"}
        assert set(schema["required"]) == {"tokenIn", "tokenOut", "amountIn"}


class TestToolCalls:
    def test_quote_round_trip(self, server):
        result = _call(
            server,
            "soroswap_get_swap_quote",
            {"tokenIn": fixtures.NATIVE, "tokenOut": fixtures.USDC_ADDRESS, "amountIn": "1000"},
        )
        payload = json.loads(result.content[0].text)
        assert payload["quote"]["amountOut"] == "119.640000"
        assert payload["network"] == "testnet"

    def test_conservative_allocation(self, server):
        result = _call(
            server,
            "defindex_optimize_allocation",
            {"totalAmount": "10000", "riskTolerance": "conservative"},
        )
        payload = json.loads(result.content[0].text)
        assert payload["optimization"]["expectedPortfolioApy"] == "10.51"

    def test_malformed_argument_is_a_tool_error(self, server):
        with pytest.raises(ToolError) as info:
            _call(
                server,
                "soroswap_get_swap_quote",
                {"tokenIn": fixtures.NATIVE, "tokenOut": fixtures.USDC_ADDRESS, "amountIn": "lots"},
            )
        assert "malformed_argument" in str(info.value)
