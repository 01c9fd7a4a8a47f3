"""Handlers for case-scoped events.

The router only calls these for a case that already exists; no handler
here ever creates a Case. Each applied mutation is followed by a journal
record; a mutation dropped for a missing reference is not journaled.
"""

from __future__ import annotations

import logging

from dispute_indexer.core.events import (
    CaseCancelled,
    ChainEvent,
    PostCreated,
    RoleTransfer,
    RuleAdded,
    RuleConfirmed,
    StageChanged,
    VerdictIssued,
)
from dispute_indexer.core.ids import case_post_id, jurisdiction_rule_id
from dispute_indexer.core.models import Case, CasePost, JurisdictionRule

from .context import IndexerContext

logger = logging.getLogger(__name__)


async def _journal(ctx: IndexerContext, case: Case, event: ChainEvent) -> None:
    await ctx.journal.append(
        case.id,
        event.transaction_hash,
        event.block_timestamp,
        event.event_kind,
        event.params_document(),
    )


async def _load_rule(ctx: IndexerContext, jurisdiction: str, rule_id: int) -> JurisdictionRule | None:
    rule = await ctx.store.get(JurisdictionRule, jurisdiction_rule_id(jurisdiction, rule_id))
    if rule is None:
        logger.debug("Rule %s of %s not found", rule_id, jurisdiction)
    return rule


async def on_role_transfer(ctx: IndexerContext, event: RoleTransfer, case: Case) -> bool:
    await ctx.roles.apply_transfer(case, event.role_id, event.to)
    await _journal(ctx, case, event)
    return True


async def on_rule_added(ctx: IndexerContext, event: RuleAdded, case: Case) -> bool:
    rule = await _load_rule(ctx, event.jurisdiction, event.rule_id)
    if rule is None:
        return False
    case.rules.append(rule.id)
    await ctx.store.save(case)
    await _journal(ctx, case, event)
    return True


async def on_rule_confirmed(ctx: IndexerContext, event: RuleConfirmed, case: Case) -> bool:
    rule = await _load_rule(ctx, event.jurisdiction, event.rule_id)
    if rule is None:
        return False
    if rule.id not in case.confirmed_rules:
        case.confirmed_rules.append(rule.id)
        await ctx.store.save(case)
    await _journal(ctx, case, event)
    return True


async def on_post_created(ctx: IndexerContext, event: PostCreated, case: Case) -> bool:
    entity_id = case_post_id(case.id, event.transaction_hash)
    if await ctx.store.get(CasePost, entity_id) is not None:
        return False

    content = await ctx.resolver.resolve(event.uri)
    post = CasePost(
        id=entity_id,
        case=case.id,
        author=event.account,
        created_date=event.block_timestamp,
        entity_role=event.entity_role,
        uri=event.uri,
        uri_data=content.data,
        uri_type=content.declared_type,
    )
    await ctx.store.save(post)
    await _journal(ctx, case, event)
    return True


async def on_stage_changed(ctx: IndexerContext, event: StageChanged, case: Case) -> bool:
    case.stage = int(event.stage)
    await ctx.store.save(case)
    await _journal(ctx, case, event)
    return True


async def on_verdict_issued(ctx: IndexerContext, event: VerdictIssued, case: Case) -> bool:
    content = await ctx.resolver.resolve(event.uri)
    case.verdict_author = event.account
    case.verdict_uri = event.uri
    case.verdict_uri_data = content.data
    case.verdict_uri_type = content.declared_type
    await ctx.store.save(case)
    await _journal(ctx, case, event)
    return True


async def on_case_cancelled(ctx: IndexerContext, event: CaseCancelled, case: Case) -> bool:
    content = await ctx.resolver.resolve(event.uri)
    case.cancellation_author = event.account
    case.cancellation_uri = event.uri
    case.cancellation_uri_data = content.data
    case.cancellation_uri_type = content.declared_type
    await ctx.store.save(case)
    await _journal(ctx, case, event)
    return True
