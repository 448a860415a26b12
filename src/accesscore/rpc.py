"""JSON-RPC transport for read-only contract calls.

``RpcClient`` wraps an ``httpx.AsyncClient`` and speaks just enough JSON-RPC
for the reader: ``eth_call`` against ``latest`` and ``eth_blockNumber``.
ABI encoding/decoding goes through eth_abi; selectors through eth_utils.

No retries and no timeouts beyond the transport's own. Every failure
surfaces as RpcError so callers can decide between required and optional
handling.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional, Sequence

import httpx
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import decode_hex, function_signature_to_4byte_selector, to_checksum_address

from .abis import AbiFragment, function_signature, input_types, output_types
from .exceptions import RpcError

logger = logging.getLogger(__name__)


def _encode_arg(type_: str, value: Any) -> Any:
    # eth_abi expects raw bytes for fixed-size byte arrays
    if type_.startswith("bytes") and isinstance(value, str):
        return decode_hex(value)
    return value


def _normalize_output(type_: str, value: Any) -> Any:
    if type_ == "address":
        return to_checksum_address(value)
    if type_.startswith("bytes") and isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value


class RpcClient:
    """Minimal async JSON-RPC client for ``eth_call``.

    Usage:
        async with RpcClient("https://rpc.example") as rpc:
            (owner,) = await rpc.call_function(address, OWNER_ABI)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
        )
        self._ids = itertools.count(1)

    # ── Context manager ──────────────────────────────────────────────

    async def __aenter__(self) -> RpcClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    # ── JSON-RPC primitives ──────────────────────────────────────────

    async def request(self, method: str, params: list[Any]) -> Any:
        """Send one JSON-RPC request and return its ``result``."""
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = await self._client.post(self.rpc_url, json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as exc:
            raise RpcError(f"{method} transport failure: {exc}", method=method) from exc
        except ValueError as exc:
            raise RpcError(f"{method} returned a non-JSON response", method=method) from exc

        if not isinstance(body, dict):
            raise RpcError(f"{method} returned a non-object JSON response", method=method)
        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            raise RpcError(
                f"{method} failed: {error.get('message', 'unknown error')}",
                rpc_code=error.get("code"),
                method=method,
                data=error.get("data"),
            )
        if "result" not in body:
            raise RpcError(f"{method} response has no result", method=method)
        return body["result"]

    async def eth_call(self, to: str, data: bytes) -> bytes:
        result = await self.request("eth_call", [{"to": to, "data": "0x" + data.hex()}, "latest"])
        try:
            return decode_hex(result)
        except (TypeError, ValueError) as exc:
            raise RpcError(f"eth_call returned malformed data: {result!r}", method="eth_call") from exc

    async def block_number(self) -> int:
        result = await self.request("eth_blockNumber", [])
        try:
            return int(result, 16)
        except (TypeError, ValueError) as exc:
            raise RpcError(f"eth_blockNumber returned malformed data: {result!r}", method="eth_blockNumber") from exc

    # ── ABI helpers ──────────────────────────────────────────────────

    async def call_function(
        self,
        address: str,
        fragment: AbiFragment,
        args: Sequence[Any] = (),
    ) -> tuple[Any, ...]:
        """Call a view function described by a single-function fragment.

        Returns the decoded outputs as a tuple. Addresses are returned
        checksummed and fixed-size bytes as lowercase 0x-hex.

        Raises:
            RpcError: transport failure, revert, or undecodable return data.
        """
        signature = function_signature(fragment)
        in_types = input_types(fragment)
        out_types = output_types(fragment)

        try:
            call_data = function_signature_to_4byte_selector(signature) + abi_encode(
                in_types, [_encode_arg(t, v) for t, v in zip(in_types, args)]
            )
        except EncodingError as exc:
            raise RpcError(f"Failed to encode arguments for {signature}: {exc}", function=signature) from exc

        logger.debug("eth_call %s on %s", signature, address)
        result = await self.eth_call(address, call_data)

        if not out_types:
            return tuple()

        try:
            decoded = abi_decode(out_types, result)
        except DecodingError as exc:
            raise RpcError(f"Failed to decode {signature} response: {exc}", function=signature) from exc

        return tuple(_normalize_output(t, v) for t, v in zip(out_types, decoded))


__all__ = ["RpcClient"]
