"""Enumerations used across the indexer."""

from enum import Enum, IntEnum


class CaseStage(IntEnum):
    DRAFT = 0
    OPEN = 1
    VERDICT = 2
    CLOSED = 3
    CANCELLED = 4


class JurisdictionRole(str, Enum):
    MEMBER = "member"
    JUDGE = "judge"
    ADMIN = "admin"


class EventKind(str, Enum):
    # Factory / creation events (no owning aggregate)
    JURISDICTION_CREATED = "jurisdiction-created"
    CASE_CREATED = "case-created"
    AVATAR_MINTED = "avatar-minted"

    # Jurisdiction-scoped
    JURISDICTION_RULE_ADDED = "jurisdiction-rule-added"
    RULE_EFFECT_SET = "rule-effect-set"
    RULE_DISABLED = "rule-disabled"
    JURISDICTION_ROLE_CHANGED = "jurisdiction-role-changed"

    # Case-scoped
    ROLE_TRANSFER = "role-transfer"
    RULE_ADDED = "rule-added"
    RULE_CONFIRMED = "rule-confirmed"
    POST_CREATED = "post-created"
    STAGE_CHANGED = "stage-changed"
    VERDICT_ISSUED = "verdict-issued"
    CASE_CANCELLED = "case-cancelled"


class StorageBackend(str, Enum):
    MEMORY = "memory"
    SQL = "sql"
