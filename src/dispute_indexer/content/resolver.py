"""Best-effort content resolution from an IPFS HTTP gateway.

Posts, verdicts, cancellations, rules and avatars reference off-chain JSON
documents by URI (``ipfs://<cid>`` or a gateway URL). The final path
segment of the URI is the content key. Resolution degrades one stage at
a time and never raises:

    fetch  ──fail──▶ ContentFetchError   → data absent, type absent
      │
    parse  ──fail──▶ ContentParseError   → data kept,   type absent
      │
    ContentDocument  → data kept, type = top-level string "type" or absent

Exactly one fetch attempt is made per call; there is no retry and no
caching. The resolver holds no per-URI state and can be shared across
concurrent tasks.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Union

import httpx

from dispute_indexer.core.interfaces import ResolvedContent

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContentFetchError:
    """Nothing was retrieved for the key."""

    key: str
    reason: str


@dataclass(frozen=True)
class ContentParseError:
    """Bytes were retrieved but are not a JSON document."""

    data: bytes
    reason: str


@dataclass(frozen=True)
class ContentDocument:
    """Bytes were retrieved and parsed."""

    data: bytes
    document: Any

    @property
    def declared_type(self) -> str | None:
        if not isinstance(self.document, dict):
            return None
        value = self.document.get("type")
        return value if isinstance(value, str) else None


DocumentResult = Union[ContentDocument, ContentParseError, ContentFetchError]


def content_key(uri: str) -> str:
    """Final ``/``-separated segment of *uri*."""
    return uri.rsplit("/", 1)[-1]


def parse_document(data: bytes) -> ContentDocument | ContentParseError:
    try:
        return ContentDocument(data=data, document=json.loads(data))
    except (ValueError, RecursionError) as exc:
        return ContentParseError(data=data, reason=str(exc))


def fold_result(result: DocumentResult) -> ResolvedContent:
    """Collapse a three-state result into the (data, declared_type) pair."""
    if isinstance(result, ContentFetchError):
        return ResolvedContent()
    if isinstance(result, ContentParseError):
        return ResolvedContent(data=result.data)
    return ResolvedContent(data=result.data, declared_type=result.declared_type)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class ContentResolver:
    """Resolve URIs against an IPFS gateway.

    Args:
        gateway_url: Base URL serving ``/ipfs/<key>``.
        timeout: Per-request timeout in seconds.
        client: Optional pre-built client (tests inject one backed by
            ``httpx.MockTransport``). An injected client is not closed by
            :meth:`close`.
    """

    def __init__(
        self,
        gateway_url: str = "https://ipfs.io",
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._gateway_url = gateway_url.rstrip("/")
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    # -- Lifecycle -----------------------------------------------------------

    async def open(self) -> None:
        """Create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))
            self._owns_client = True

    async def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ContentResolver:
        await self.open()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # -- Resolution ----------------------------------------------------------

    async def resolve(self, uri: str) -> ResolvedContent:
        """Return the best-effort ``(data, declared_type)`` pair for *uri*."""
        return fold_result(await self.fetch_document(uri))

    async def fetch_document(self, uri: str) -> DocumentResult:
        key = content_key(uri)
        if not key:
            return ContentFetchError(key=key, reason="empty content key")

        fetched = await self._fetch(key)
        if isinstance(fetched, ContentFetchError):
            logger.warning("Content fetch failed for %s: %s", key, fetched.reason)
            return fetched

        result = parse_document(fetched)
        if isinstance(result, ContentParseError):
            logger.warning("Content for %s is not a JSON document: %s", key, result.reason)
        return result

    async def _fetch(self, key: str) -> bytes | ContentFetchError:
        await self.open()
        assert self._client is not None
        url = f"{self._gateway_url}/ipfs/{key}"
        try:
            resp = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return ContentFetchError(key=key, reason=f"{type(exc).__name__}: {exc}")

        if resp.status_code != 200:
            return ContentFetchError(key=key, reason=f"HTTP {resp.status_code}")
        return resp.content
