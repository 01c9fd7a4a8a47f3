"""Shared fixtures for the dispute-indexer test suite."""

from __future__ import annotations

import itertools

import pytest

from dispute_indexer.content.resolver import content_key, fold_result, parse_document
from dispute_indexer.core.enums import CaseStage, JurisdictionRole
from dispute_indexer.core.errors import ExternalCallError
from dispute_indexer.core.events import (
    AvatarMinted,
    CaseCancelled,
    CaseCreated,
    JurisdictionCreated,
    JurisdictionRoleChanged,
    JurisdictionRuleAdded,
    PostCreated,
    RoleTransfer,
    RuleAdded,
    RuleConfirmed,
    RuleDisabled,
    RuleEffectSet,
    StageChanged,
    VerdictIssued,
)
from dispute_indexer.core.interfaces import ResolvedContent
from dispute_indexer.projection.context import IndexerContext
from dispute_indexer.projection.router import EventRouter
from dispute_indexer.storage.memory_store import InMemoryEntityStore


HUB = "0x" + "99" * 20
JURISDICTION = "0x" + "11" * 20
CASE = "0x" + "22" * 20
OTHER_CASE = "0x" + "33" * 20
ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20
ZERO = "0x" + "00" * 20


def tx_hash(n: int) -> str:
    return "0x" + f"{n:064x}"


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------

class FakeResolver:
    """Serves documents from a dict keyed by content key; misses resolve to
    absent content, like an unreachable gateway."""

    def __init__(self, documents: dict[str, bytes] | None = None) -> None:
        self.documents = documents or {}
        self.calls: list[str] = []

    async def resolve(self, uri: str) -> ResolvedContent:
        self.calls.append(uri)
        data = self.documents.get(content_key(uri))
        if data is None:
            return ResolvedContent()
        return fold_result(parse_document(data))


class FakeOracle:
    def __init__(self, names: dict[str, str] | None = None, default: str = "Sample") -> None:
        self.names = names or {}
        self.default = default
        self.fail = False
        self.calls: list[str] = []

    async def name(self, address: str) -> str:
        self.calls.append(address)
        if self.fail:
            raise ExternalCallError(address, "name", "connection refused")
        return self.names.get(address, self.default)


class EventFactory:
    """Builds decoded events with increasing tx hashes and timestamps."""

    hub = HUB
    jurisdiction = JURISDICTION
    case = CASE
    alice = ALICE
    bob = BOB

    def __init__(self) -> None:
        self._tx = itertools.count(1)
        self._ts = itertools.count(1_700_000_000, 12)

    def _envelope(self, address: str, tx: str | None) -> dict:
        return {
            "address": address,
            "block_timestamp": next(self._ts),
            "transaction_hash": tx or tx_hash(next(self._tx)),
        }

    def jurisdiction_created(self, jurisdiction: str = JURISDICTION) -> JurisdictionCreated:
        return JurisdictionCreated(**self._envelope(HUB, None), jurisdiction=jurisdiction)

    def case_created(
        self, case: str = CASE, jurisdiction: str = JURISDICTION, name: str = "Sample case",
    ) -> CaseCreated:
        return CaseCreated(
            **self._envelope(HUB, None), case=case, jurisdiction=jurisdiction, name=name,
        )

    def avatar_minted(self, owner: str, token_id: int, uri: str = "") -> AvatarMinted:
        return AvatarMinted(**self._envelope(HUB, None), owner=owner, token_id=token_id, uri=uri)

    def jurisdiction_rule_added(
        self, rule_id: int, uri: str = "", jurisdiction: str = JURISDICTION,
    ) -> JurisdictionRuleAdded:
        return JurisdictionRuleAdded(
            **self._envelope(jurisdiction, None),
            rule_id=rule_id, about="theft", affected="community", uri=uri,
        )

    def rule_effect(
        self, rule_id: int, name: str, direction: bool, jurisdiction: str = JURISDICTION,
    ) -> RuleEffectSet:
        return RuleEffectSet(
            **self._envelope(jurisdiction, None),
            rule_id=rule_id, name=name, direction=direction, value=1,
        )

    def rule_disabled(self, rule_id: int, jurisdiction: str = JURISDICTION) -> RuleDisabled:
        return RuleDisabled(**self._envelope(jurisdiction, None), rule_id=rule_id)

    def role_changed(
        self,
        role: JurisdictionRole,
        accounts: list[str],
        count: int | None = None,
        jurisdiction: str = JURISDICTION,
    ) -> JurisdictionRoleChanged:
        return JurisdictionRoleChanged(
            **self._envelope(jurisdiction, None),
            role=role, accounts=accounts, accounts_count=count,
        )

    def role_transfer(
        self, to: str, role_id: int, case: str = CASE, tx: str | None = None,
    ) -> RoleTransfer:
        return RoleTransfer(
            **self._envelope(case, tx),
            operator=HUB, from_account=ZERO, to=to, role_id=role_id,
        )

    def rule_added(
        self, rule_id: int, case: str = CASE, jurisdiction: str = JURISDICTION,
        tx: str | None = None,
    ) -> RuleAdded:
        return RuleAdded(**self._envelope(case, tx), jurisdiction=jurisdiction, rule_id=rule_id)

    def rule_confirmed(
        self, rule_id: int, case: str = CASE, jurisdiction: str = JURISDICTION,
    ) -> RuleConfirmed:
        return RuleConfirmed(**self._envelope(case, None), jurisdiction=jurisdiction, rule_id=rule_id)

    def post(
        self, account: str, uri: str, entity_role: str = "plaintiff",
        case: str = CASE, tx: str | None = None,
    ) -> PostCreated:
        return PostCreated(
            **self._envelope(case, tx), account=account, entity_role=entity_role, uri=uri,
        )

    def stage(self, stage: CaseStage, case: str = CASE, tx: str | None = None) -> StageChanged:
        return StageChanged(**self._envelope(case, tx), stage=stage)

    def verdict(
        self, account: str, uri: str, case: str = CASE, tx: str | None = None,
    ) -> VerdictIssued:
        return VerdictIssued(**self._envelope(case, tx), account=account, uri=uri)

    def cancelled(self, account: str, uri: str, case: str = CASE) -> CaseCancelled:
        return CaseCancelled(**self._envelope(case, None), account=account, uri=uri)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def ctx(store, resolver, oracle) -> IndexerContext:
    return IndexerContext(store=store, resolver=resolver, oracle=oracle)


@pytest.fixture
def router(ctx) -> EventRouter:
    return EventRouter(ctx)


@pytest.fixture
def ev() -> EventFactory:
    return EventFactory()


@pytest.fixture
async def seeded_router(router, ev) -> EventRouter:
    """Router with jurisdiction ``JURISDICTION`` and case ``CASE`` created."""
    await router.dispatch(ev.jurisdiction_created())
    await router.dispatch(ev.case_created())
    return router
