"""Decoded contract events consumed by the indexer.

Every event carries the emitting contract ``address``, the block
timestamp, the transaction hash and the log index, plus kind-specific
parameters. Events are immutable pydantic models discriminated on
``kind`` so a JSON/JSONL feed decodes straight into the right type.

Addresses and transaction hashes are validated and lowercased here, at
the input boundary; handlers never see malformed identifiers.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
)

from .enums import CaseStage, EventKind, JurisdictionRole
from .errors import EventDecodeError
from .ids import normalize_address, normalize_tx_hash

Address = Annotated[str, AfterValidator(normalize_address)]
TxHash = Annotated[str, AfterValidator(normalize_tx_hash)]

_ENVELOPE_FIELDS = {"kind", "address", "block_timestamp", "transaction_hash", "log_index"}


class ChainEvent(BaseModel):
    """Base for all decoded events."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: str
    address: Address
    block_timestamp: int = Field(ge=0)
    transaction_hash: TxHash
    log_index: int = Field(default=0, ge=0)

    @property
    def event_kind(self) -> EventKind:
        return EventKind(self.kind)

    def params_document(self) -> dict[str, Any]:
        """Kind-specific parameters as a JSON-safe dict (journal payload)."""
        return self.model_dump(mode="json", by_alias=True, exclude=_ENVELOPE_FIELDS)


# ===========================================================================
# Factory events (no owning aggregate)
# ===========================================================================

class JurisdictionCreated(ChainEvent):
    kind: Literal["jurisdiction-created"] = "jurisdiction-created"
    jurisdiction: Address


class CaseCreated(ChainEvent):
    kind: Literal["case-created"] = "case-created"
    case: Address
    jurisdiction: Address
    name: str = ""
    stage: CaseStage = CaseStage.DRAFT


class AvatarMinted(ChainEvent):
    kind: Literal["avatar-minted"] = "avatar-minted"
    owner: Address
    token_id: int = Field(ge=0)
    uri: str = ""


# ===========================================================================
# Jurisdiction-scoped events (address = jurisdiction contract)
# ===========================================================================

class JurisdictionRuleAdded(ChainEvent):
    kind: Literal["jurisdiction-rule-added"] = "jurisdiction-rule-added"
    rule_id: int = Field(ge=0)
    about: str = ""
    affected: str = ""
    negation: bool = False
    uri: str = ""


class RuleEffectSet(ChainEvent):
    kind: Literal["rule-effect-set"] = "rule-effect-set"
    rule_id: int = Field(ge=0)
    name: str
    direction: bool
    value: int = 0


class RuleDisabled(ChainEvent):
    kind: Literal["rule-disabled"] = "rule-disabled"
    rule_id: int = Field(ge=0)
    disabled: bool = True


class JurisdictionRoleChanged(ChainEvent):
    kind: Literal["jurisdiction-role-changed"] = "jurisdiction-role-changed"
    role: JurisdictionRole
    accounts: list[Address]
    accounts_count: int | None = Field(default=None, ge=0)


# ===========================================================================
# Case-scoped events (address = case contract)
# ===========================================================================

class RoleTransfer(ChainEvent):
    kind: Literal["role-transfer"] = "role-transfer"
    operator: Address
    from_account: Address = Field(alias="from")
    to: Address
    role_id: int = Field(ge=0)
    value: int = 1


class RuleAdded(ChainEvent):
    kind: Literal["rule-added"] = "rule-added"
    jurisdiction: Address
    rule_id: int = Field(ge=0)


class RuleConfirmed(ChainEvent):
    kind: Literal["rule-confirmed"] = "rule-confirmed"
    jurisdiction: Address
    rule_id: int = Field(ge=0)


class PostCreated(ChainEvent):
    kind: Literal["post-created"] = "post-created"
    account: Address
    entity_role: str
    uri: str


class StageChanged(ChainEvent):
    kind: Literal["stage-changed"] = "stage-changed"
    stage: CaseStage


class VerdictIssued(ChainEvent):
    kind: Literal["verdict-issued"] = "verdict-issued"
    account: Address
    uri: str


class CaseCancelled(ChainEvent):
    kind: Literal["case-cancelled"] = "case-cancelled"
    account: Address
    uri: str


AnyChainEvent = Annotated[
    Union[
        JurisdictionCreated,
        CaseCreated,
        AvatarMinted,
        JurisdictionRuleAdded,
        RuleEffectSet,
        RuleDisabled,
        JurisdictionRoleChanged,
        RoleTransfer,
        RuleAdded,
        RuleConfirmed,
        PostCreated,
        StageChanged,
        VerdictIssued,
        CaseCancelled,
    ],
    Field(discriminator="kind"),
]

_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(AnyChainEvent)


def parse_event(record: dict[str, Any], line: int | None = None) -> ChainEvent:
    """Decode one event record.

    Raises:
        EventDecodeError: unknown ``kind`` or invalid parameters.
    """
    try:
        return _EVENT_ADAPTER.validate_python(record)
    except ValidationError as exc:
        raise EventDecodeError(line, str(exc)) from exc


def read_events(path: str | Path) -> Iterator[ChainEvent]:
    """Yield events from a JSONL file in file order. Blank lines are skipped."""
    with open(path, encoding="utf-8") as f:
        for lineno, raw in enumerate(f, start=1):
            raw = raw.strip()
            if not raw:
                continue
            try:
                record = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise EventDecodeError(lineno, f"invalid JSON: {exc.msg}") from exc
            if not isinstance(record, dict):
                raise EventDecodeError(lineno, "record is not a JSON object")
            yield parse_event(record, line=lineno)
