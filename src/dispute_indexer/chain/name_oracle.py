"""Jurisdiction naming oracle over Ethereum JSON-RPC.

A jurisdiction's display name is read once, when the indexer first sees
the jurisdiction address, by an ``eth_call`` of the contract's ``name()``
view. There is no fallback: a failed call raises
:class:`~dispute_indexer.core.errors.ExternalCallError` and the triggering
event writes nothing.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

import httpx

from dispute_indexer.core.errors import ExternalCallError

logger = logging.getLogger(__name__)

# keccak256("name()")[:4]
NAME_SELECTOR = "0x06fdde03"

_WORD = 32


def decode_abi_string(result: str) -> str:
    """Decode an ABI-encoded dynamic ``string`` return value.

    Layout: ``offset (32 bytes) | ... | length (32 bytes) | utf-8 bytes``.

    Raises:
        ValueError: the payload is truncated or not valid hex/UTF-8.
    """
    if not result.startswith("0x"):
        raise ValueError("result is not 0x-prefixed hex")
    raw = bytes.fromhex(result[2:])
    if len(raw) < 2 * _WORD:
        raise ValueError(f"result too short ({len(raw)} bytes)")
    offset = int.from_bytes(raw[:_WORD], "big")
    if offset + _WORD > len(raw):
        raise ValueError(f"string offset {offset} out of range")
    length = int.from_bytes(raw[offset:offset + _WORD], "big")
    start = offset + _WORD
    if start + length > len(raw):
        raise ValueError(f"string length {length} out of range")
    return raw[start:start + length].decode("utf-8")


class JsonRpcNameOracle:
    """``INameOracle`` backed by a JSON-RPC endpoint.

    Args:
        rpc_url: HTTP(S) JSON-RPC endpoint.
        timeout: Per-request timeout in seconds.
        block_tag: Block to call against (``"latest"`` by default).
        client: Optional pre-built client; not closed by :meth:`close`.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: float = 10.0,
        block_tag: str = "latest",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._block_tag = block_tag
        self._client = client
        self._owns_client = client is None
        self._ids = itertools.count(1)

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
            self._owns_client = True

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> JsonRpcNameOracle:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def name(self, address: str) -> str:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "eth_call",
            "params": [{"to": address, "data": NAME_SELECTOR}, self._block_tag],
        }
        body = await self._post(address, payload)

        if body.get("error") is not None:
            raise ExternalCallError(address, "name", f"rpc error: {body['error']}")
        result = body.get("result")
        if not isinstance(result, str):
            raise ExternalCallError(address, "name", "missing result")
        try:
            name = decode_abi_string(result)
        except ValueError as exc:
            raise ExternalCallError(address, "name", f"undecodable result: {exc}") from exc

        logger.debug("Resolved jurisdiction name %s -> %r", address, name)
        return name

    async def _post(self, address: str, payload: dict[str, Any]) -> dict[str, Any]:
        await self.open()
        assert self._client is not None
        try:
            resp = await self._client.post(self._rpc_url, json=payload)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, RecursionError) as exc:
            raise ExternalCallError(address, "name", f"{type(exc).__name__}: {exc}") from exc
        if not isinstance(body, dict):
            raise ExternalCallError(address, "name", "response is not a JSON object")
        return body
