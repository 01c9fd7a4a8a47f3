"""Persisted entity models.

Every entity is keyed by a stable string ``id`` (see :mod:`.ids`) and is
stored under ``(entity_type, id)``. Handlers load an entity, mutate its
fields and save it back; stores hand out detached copies, so a mutation
that is never saved has no effect.

``accounts``-style fields are ordered lists of lowercase hex addresses.
Raw content fetched from the content-addressed store is kept as bytes and
serialized as base64 in JSON mode.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from .enums import CaseStage


class Entity(BaseModel):
    """Base for all persisted entities."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    entity_type: ClassVar[str] = "Entity"

    id: str


# ---------------------------------------------------------------------------
# Case aggregate
# ---------------------------------------------------------------------------

class Case(Entity):
    entity_type: ClassVar[str] = "Case"

    jurisdiction: str
    name: str = ""
    created_date: int = 0
    stage: int = CaseStage.DRAFT.value
    rules: list[str] = Field(default_factory=list)
    # Set semantics: membership is checked before insert
    participant_accounts: list[str] = Field(default_factory=list)
    confirmed_rules: list[str] = Field(default_factory=list)

    verdict_author: str | None = None
    verdict_uri: str | None = None
    verdict_uri_data: bytes | None = None
    verdict_uri_type: str | None = None

    cancellation_author: str | None = None
    cancellation_uri: str | None = None
    cancellation_uri_data: bytes | None = None
    cancellation_uri_type: str | None = None


class CaseRole(Entity):
    entity_type: ClassVar[str] = "CaseRole"

    case: str
    role_id: int
    # Multiset: one entry per role-token transfer received
    accounts: list[str] = Field(default_factory=list)


class CasePost(Entity):
    """Append-only; never mutated after creation."""

    entity_type: ClassVar[str] = "CasePost"

    case: str
    author: str
    created_date: int
    entity_role: str
    uri: str
    uri_data: bytes | None = None
    uri_type: str | None = None


class CaseEvent(Entity):
    """Journal record of one processed case event."""

    entity_type: ClassVar[str] = "CaseEvent"

    case: str
    created_date: int
    type: str
    data: bytes


# ---------------------------------------------------------------------------
# Jurisdiction aggregate
# ---------------------------------------------------------------------------

class Jurisdiction(Entity):
    entity_type: ClassVar[str] = "Jurisdiction"

    name: str
    rules_count: int = 0
    cases_count: int = 0
    member_accounts: list[str] = Field(default_factory=list)
    judge_accounts: list[str] = Field(default_factory=list)
    admin_accounts: list[str] = Field(default_factory=list)
    # Only the member role carries a count
    member_accounts_count: int = 0


class JurisdictionRule(Entity):
    entity_type: ClassVar[str] = "JurisdictionRule"

    jurisdiction: str
    rule_id: int
    about: str = ""
    affected: str = ""
    negation: bool = False
    uri: str = ""
    uri_data: bytes | None = None
    uri_type: str | None = None
    effects: list[str] = Field(default_factory=list)
    is_positive: bool = True
    is_disabled: bool = False


class JurisdictionRuleEffect(Entity):
    entity_type: ClassVar[str] = "JurisdictionRuleEffect"

    rule: str
    name: str
    direction: bool
    value: int = 0


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class Account(Entity):
    entity_type: ClassVar[str] = "Account"

    avatar_nft: str | None = None


class AvatarNft(Entity):
    entity_type: ClassVar[str] = "AvatarNft"

    owner: str
    uri: str = ""
    uri_data: bytes | None = None
    uri_type: str | None = None
    jurisdictions: list[str] = Field(default_factory=list)


ENTITY_MODELS: dict[str, type[Entity]] = {
    cls.entity_type: cls
    for cls in (
        Case,
        CaseRole,
        CasePost,
        CaseEvent,
        Jurisdiction,
        JurisdictionRule,
        JurisdictionRuleEffect,
        Account,
        AvatarNft,
    )
}
