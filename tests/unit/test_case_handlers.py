"""Tests for case-scoped handlers, dispatched through the router."""

from __future__ import annotations

import json

import pytest

from dispute_indexer.core.enums import CaseStage
from dispute_indexer.core.ids import case_event_id, case_post_id, case_role_id, jurisdiction_rule_id
from dispute_indexer.core.models import Case, CaseEvent, CasePost, CaseRole

VERDICT_DOC = json.dumps({"type": "verdict", "confirmed": True}).encode()
POST_DOC = json.dumps({"type": "evidence", "text": "receipt attached"}).encode()


@pytest.fixture(autouse=True)
def documents(resolver):
    resolver.documents.update({
        "QmVerdict": VERDICT_DOC,
        "QmPost": POST_DOC,
        "QmBinary": b"\x00\x01\x02",
        "QmDeep": b"[" * 100_000 + b"]" * 100_000,
    })


async def _case(store, ev) -> Case:
    return await store.get(Case, ev.case)


class TestRoleTransfer:
    async def test_transfer_updates_role_and_participants(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.role_transfer(ev.alice, 2))
        await seeded_router.dispatch(ev.role_transfer(ev.alice, 2))
        await seeded_router.dispatch(ev.role_transfer(ev.bob, 3))

        assert (await store.get(CaseRole, case_role_id(ev.case, 2))).accounts == [ev.alice, ev.alice]
        assert (await store.get(CaseRole, case_role_id(ev.case, 3))).accounts == [ev.bob]
        assert (await _case(store, ev)).participant_accounts == [ev.alice, ev.bob]

    async def test_source_account_is_never_removed(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.role_transfer(ev.alice, 2))
        await seeded_router.dispatch(ev.role_transfer(ev.bob, 2))
        assert (await _case(store, ev)).participant_accounts == [ev.alice, ev.bob]
        assert (await store.get(CaseRole, case_role_id(ev.case, 2))).accounts == [ev.alice, ev.bob]

    async def test_transfer_is_journaled(self, seeded_router, store, ev):
        event = ev.role_transfer(ev.alice, 2)
        await seeded_router.dispatch(event)

        record = await store.get(CaseEvent, case_event_id(ev.case, event.transaction_hash))
        assert record.type == "role-transfer"
        assert json.loads(record.data) == {
            "operator": ev.hub,
            "from": "0x" + "00" * 20,
            "to": ev.alice,
            "role_id": 2,
            "value": 1,
        }


class TestRules:
    async def test_existing_rule_is_added(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.jurisdiction_rule_added(1))
        assert await seeded_router.dispatch(ev.rule_added(1)) is True
        assert (await _case(store, ev)).rules == [jurisdiction_rule_id(ev.jurisdiction, 1)]

    async def test_missing_rule_is_dropped_and_not_journaled(self, seeded_router, store, ev):
        event = ev.rule_added(7)
        assert await seeded_router.dispatch(event) is False
        assert (await _case(store, ev)).rules == []
        assert await store.get(CaseEvent, case_event_id(ev.case, event.transaction_hash)) is None

    async def test_rule_from_another_jurisdiction_is_not_found(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.jurisdiction_rule_added(1))
        await seeded_router.dispatch(ev.rule_added(1, jurisdiction="0x" + "44" * 20))
        assert (await _case(store, ev)).rules == []

    async def test_confirmed_rules_are_a_set(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.jurisdiction_rule_added(1))
        await seeded_router.dispatch(ev.rule_confirmed(1))
        await seeded_router.dispatch(ev.rule_confirmed(1))
        assert (await _case(store, ev)).confirmed_rules == [jurisdiction_rule_id(ev.jurisdiction, 1)]

    async def test_confirming_missing_rule_is_dropped(self, seeded_router, store, ev):
        assert await seeded_router.dispatch(ev.rule_confirmed(3)) is False
        assert (await _case(store, ev)).confirmed_rules == []


class TestPosts:
    async def test_post_with_typed_content(self, seeded_router, store, ev):
        event = ev.post(ev.alice, "ipfs://QmPost", entity_role="plaintiff")
        await seeded_router.dispatch(event)

        post = await store.get(CasePost, case_post_id(ev.case, event.transaction_hash))
        assert post.case == ev.case
        assert post.author == ev.alice
        assert post.entity_role == "plaintiff"
        assert post.created_date == event.block_timestamp
        assert post.uri == "ipfs://QmPost"
        assert post.uri_data == POST_DOC
        assert post.uri_type == "evidence"

    async def test_post_with_unresolvable_uri_is_still_created(self, seeded_router, store, ev):
        event = ev.post(ev.alice, "ipfs://QmNowhere")
        assert await seeded_router.dispatch(event) is True

        post = await store.get(CasePost, case_post_id(ev.case, event.transaction_hash))
        assert post.uri_data is None
        assert post.uri_type is None

    async def test_post_with_malformed_content_keeps_bytes(self, seeded_router, store, ev):
        event = ev.post(ev.alice, "https://ipfs.io/ipfs/QmBinary")
        await seeded_router.dispatch(event)

        post = await store.get(CasePost, case_post_id(ev.case, event.transaction_hash))
        assert post.uri_data == b"\x00\x01\x02"
        assert post.uri_type is None

    async def test_post_with_deeply_nested_content_is_still_created(self, seeded_router, store, ev):
        event = ev.post(ev.alice, "ipfs://QmDeep")
        assert await seeded_router.dispatch(event) is True

        post = await store.get(CasePost, case_post_id(ev.case, event.transaction_hash))
        assert post.uri_data == b"[" * 100_000 + b"]" * 100_000
        assert post.uri_type is None

    async def test_post_is_created_once(self, seeded_router, store, resolver, ev):
        tx = "0x" + "ab" * 32
        await seeded_router.dispatch(ev.post(ev.alice, "ipfs://QmPost", tx=tx))
        assert await seeded_router.dispatch(ev.post(ev.bob, "ipfs://QmOther", tx=tx)) is False

        post = await store.get(CasePost, case_post_id(ev.case, tx))
        assert post.author == ev.alice
        assert resolver.calls == ["ipfs://QmPost"]


class TestStageVerdictCancellation:
    async def test_stage(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.stage(CaseStage.OPEN))
        assert (await _case(store, ev)).stage == 1
        await seeded_router.dispatch(ev.stage(CaseStage.CLOSED))
        assert (await _case(store, ev)).stage == 3

    async def test_verdict(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.verdict(ev.bob, "ipfs://QmVerdict"))

        case = await _case(store, ev)
        assert case.verdict_author == ev.bob
        assert case.verdict_uri == "ipfs://QmVerdict"
        assert case.verdict_uri_data == VERDICT_DOC
        assert case.verdict_uri_type == "verdict"
        assert case.cancellation_uri is None

    async def test_cancellation_with_missing_content(self, seeded_router, store, ev):
        await seeded_router.dispatch(ev.cancelled(ev.alice, "ipfs://QmGone"))

        case = await _case(store, ev)
        assert case.cancellation_author == ev.alice
        assert case.cancellation_uri == "ipfs://QmGone"
        assert case.cancellation_uri_data is None
        assert case.cancellation_uri_type is None

    async def test_two_kinds_in_one_transaction_share_a_journal_record(self, seeded_router, store, ev):
        # Documents current behaviour: the later write wins.
        tx = "0x" + "cd" * 32
        await seeded_router.dispatch(ev.stage(CaseStage.VERDICT, tx=tx))
        await seeded_router.dispatch(ev.verdict(ev.bob, "ipfs://QmVerdict", tx=tx))

        records = [r for r in await store.list_all(CaseEvent) if r.case == ev.case]
        assert len(records) == 1
        assert records[0].type == "verdict-issued"
        # Both mutations were still applied to the case
        case = await _case(store, ev)
        assert case.stage == CaseStage.VERDICT
        assert case.verdict_uri == "ipfs://QmVerdict"
