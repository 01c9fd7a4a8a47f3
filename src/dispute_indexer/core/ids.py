"""Canonical identifier builders for persisted entities.

ID Categories
-------------
1. Aggregate IDs: the lowercase hex address of the contract instance
   (Case, Jurisdiction).
2. Composite IDs: ``"{parent}_{subkey}"`` for entities owned by an
   aggregate (CaseRole, CasePost, CaseEvent, JurisdictionRule,
   JurisdictionRuleEffect).
3. Token IDs: the decimal string of an ERC-721 token id (AvatarNft).

All builders are pure; calling one twice with the same inputs yields the
same identifier, which is what makes load-or-create idempotent.
"""

from __future__ import annotations

import json
import re
from typing import Any

_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")
_TX_HASH_RE = re.compile(r"^0x[0-9a-f]{64}$")


def normalize_address(value: str) -> str:
    """Lowercase and validate a 20-byte ``0x``-prefixed hex address."""
    normalized = value.strip().lower()
    if not _ADDRESS_RE.match(normalized):
        raise ValueError(f"not a 20-byte hex address: {value!r}")
    return normalized


def normalize_tx_hash(value: str) -> str:
    """Lowercase and validate a 32-byte ``0x``-prefixed transaction hash."""
    normalized = value.strip().lower()
    if not _TX_HASH_RE.match(normalized):
        raise ValueError(f"not a 32-byte hex transaction hash: {value!r}")
    return normalized


def case_role_id(case_id: str, role_id: int) -> str:
    return f"{case_id}_{role_id}"


def case_post_id(case_id: str, transaction_hash: str) -> str:
    return f"{case_id}_{transaction_hash}"


def case_event_id(case_id: str, transaction_hash: str) -> str:
    """Journal key. Omits event kind and log index, so two kinds in one
    transaction share a key."""
    return f"{case_id}_{transaction_hash}"


def jurisdiction_rule_id(jurisdiction_id: str, rule_id: int) -> str:
    return f"{jurisdiction_id}_{rule_id}"


def rule_effect_id(rule_entity_id: str, effect_name: str) -> str:
    return f"{rule_entity_id}_{effect_name}"


def avatar_nft_id(token_id: int) -> str:
    return str(token_id)


def canonical_json(payload: dict[str, Any]) -> bytes:
    """Serialize *payload* deterministically: sorted keys, compact, UTF-8."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False,
    ).encode("utf-8")
