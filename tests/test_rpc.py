"""
Tests for the JSON-RPC client.
"""

from __future__ import annotations

import httpx
import pytest
from eth_abi import decode

from accesscore import RpcError
from accesscore.abis import GET_ROLE_MEMBER_ABI, HAS_ROLE_ABI, OWNER_ABI, PENDING_DEFAULT_ADMIN_ABI
from accesscore.rpc import RpcClient

from fakes import CONTRACT, MINTER_ROLE, OWNER, FakeChain


def _client(handler) -> RpcClient:
    return RpcClient("http://node.test", http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestRequest:
    """Tests for JSON-RPC envelope handling."""

    @pytest.mark.asyncio
    async def test_block_number(self, chain: FakeChain, rpc: RpcClient) -> None:
        """Test reading the block number."""
        chain.block_number = 19_000_000
        assert await rpc.block_number() == 19_000_000

    @pytest.mark.asyncio
    async def test_error_body_raises(self) -> None:
        """Test a JSON-RPC error body raises RpcError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}})

        with pytest.raises(RpcError, match="eth_blockNumber failed: boom") as exc_info:
            await _client(handler).block_number()
        assert exc_info.value.rpc_code == -32000

    @pytest.mark.asyncio
    async def test_http_status_raises(self) -> None:
        """Test an HTTP error status raises RpcError."""
        with pytest.raises(RpcError, match="transport failure"):
            await _client(lambda request: httpx.Response(502)).block_number()

    @pytest.mark.asyncio
    async def test_connection_error_raises(self) -> None:
        """Test a connection error raises RpcError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused")

        with pytest.raises(RpcError):
            await _client(handler).block_number()

    @pytest.mark.asyncio
    async def test_non_json_raises(self) -> None:
        """Test a non-JSON body raises RpcError."""
        with pytest.raises(RpcError, match="non-JSON"):
            await _client(lambda request: httpx.Response(200, text="<html>")).block_number()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[1], "x", 7])
    async def test_non_object_body_raises(self, body) -> None:
        """Test a non-object JSON body raises RpcError."""
        with pytest.raises(RpcError, match="non-object JSON"):
            await _client(lambda request: httpx.Response(200, json=body)).block_number()

    @pytest.mark.asyncio
    async def test_string_error_member_raises(self) -> None:
        """Test a string error member raises RpcError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": "rate limited"})

        with pytest.raises(RpcError, match="rate limited") as exc_info:
            await _client(handler).block_number()
        assert exc_info.value.rpc_code is None

    @pytest.mark.asyncio
    async def test_non_hex_result_raises(self) -> None:
        """Test a non-hex result raises RpcError."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"hex": "0x1"}})

        with pytest.raises(RpcError, match="malformed data"):
            await _client(handler).block_number()
        with pytest.raises(RpcError, match="malformed data"):
            await _client(handler).call_function(CONTRACT, OWNER_ABI)

    @pytest.mark.asyncio
    async def test_missing_result_raises(self) -> None:
        """Test a missing result raises RpcError."""
        with pytest.raises(RpcError, match="no result"):
            await _client(lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1})).block_number()


class TestCallFunction:
    """Tests for ABI-level calls."""

    @pytest.mark.asyncio
    async def test_address_output_is_checksummed(self, chain: FakeChain, rpc: RpcClient) -> None:
        """Test address outputs are checksummed."""
        chain.returns("owner()", ["address"], "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")

        assert await rpc.call_function(CONTRACT, OWNER_ABI) == ("0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",)

    @pytest.mark.asyncio
    async def test_arguments_are_encoded(self, chain: FakeChain, rpc: RpcClient) -> None:
        """Test arguments are ABI-encoded."""
        seen = []

        def respond(args: bytes) -> bytes:
            seen.append(decode(["bytes32", "address"], args))
            return bytes(31) + b"\x01"

        chain.responds("hasRole(bytes32,address)", respond)

        assert await rpc.call_function(CONTRACT, HAS_ROLE_ABI, [MINTER_ROLE, OWNER]) == (True,)
        role, account = seen[0]
        assert "0x" + role.hex() == MINTER_ROLE
        assert account == OWNER

    @pytest.mark.asyncio
    async def test_tuple_outputs(self, chain: FakeChain, rpc: RpcClient) -> None:
        """Test tuple outputs."""
        chain.returns("pendingDefaultAdmin()", ["address", "uint48"], OWNER, 1700000000)

        new_admin, schedule = await rpc.call_function(CONTRACT, PENDING_DEFAULT_ADMIN_ABI)

        assert new_admin.lower() == OWNER
        assert schedule == 1700000000

    @pytest.mark.asyncio
    async def test_revert_raises(self, rpc: RpcClient) -> None:
        """Test a revert raises RpcError."""
        with pytest.raises(RpcError, match="execution reverted"):
            await rpc.call_function(CONTRACT, OWNER_ABI)

    @pytest.mark.asyncio
    async def test_undecodable_result_raises(self, chain: FakeChain, rpc: RpcClient) -> None:
        """Test an undecodable result raises RpcError."""
        chain.responds("owner()", lambda args: b"")

        with pytest.raises(RpcError, match="Failed to decode owner\\(\\)"):
            await rpc.call_function(CONTRACT, OWNER_ABI)

    @pytest.mark.asyncio
    async def test_unencodable_argument_raises(self, rpc: RpcClient) -> None:
        """Test an unencodable argument raises RpcError."""
        with pytest.raises(RpcError, match="Failed to encode"):
            await rpc.call_function(CONTRACT, GET_ROLE_MEMBER_ABI, [MINTER_ROLE, -1])


class TestLifecycle:
    """Ownership of the underlying HTTP client."""

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self) -> None:
        """Test an injected client is left open."""
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        async with RpcClient("http://node.test", http_client=http_client):
            pass
        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_own_client_closed(self) -> None:
        """Test an owned client is closed."""
        rpc = RpcClient("http://node.test")
        await rpc.aclose()
        assert rpc._client.is_closed
