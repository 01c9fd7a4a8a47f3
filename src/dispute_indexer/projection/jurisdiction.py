"""Handlers for jurisdiction, rule and avatar events.

Jurisdictions are created on first sight, which is the only place the
naming oracle is called. Rule and role events are scoped to an existing
jurisdiction; the router drops them when it is unknown.
"""

from __future__ import annotations

import logging

from dispute_indexer.core.enums import JurisdictionRole
from dispute_indexer.core.events import (
    AvatarMinted,
    CaseCreated,
    JurisdictionCreated,
    JurisdictionRoleChanged,
    JurisdictionRuleAdded,
    RuleDisabled,
    RuleEffectSet,
)
from dispute_indexer.core.ids import avatar_nft_id, jurisdiction_rule_id, rule_effect_id
from dispute_indexer.core.models import (
    Account,
    AvatarNft,
    Case,
    Jurisdiction,
    JurisdictionRule,
    JurisdictionRuleEffect,
)

from .context import IndexerContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Entity helpers
# ---------------------------------------------------------------------------

async def get_or_create_jurisdiction(ctx: IndexerContext, address: str) -> Jurisdiction:
    """Load a jurisdiction, creating it (named by the oracle) on first sight.

    Raises:
        ExternalCallError: the name lookup failed; nothing is saved.
    """
    jurisdiction = await ctx.store.get(Jurisdiction, address)
    if jurisdiction is None:
        name = await ctx.oracle.name(address)
        jurisdiction = Jurisdiction(id=address, name=name)
        await ctx.store.save(jurisdiction)
        logger.info("Jurisdiction %s created (%s)", address, name)
    return jurisdiction


async def add_avatar_to_account(ctx: IndexerContext, account: str, avatar: AvatarNft) -> None:
    entity = await ctx.store.get(Account, account)
    if entity is None:
        entity = Account(id=account)
    entity.avatar_nft = avatar.id
    await ctx.store.save(entity)


async def _load_avatar(ctx: IndexerContext, account: str) -> AvatarNft | None:
    entity = await ctx.store.get(Account, account)
    if entity is None or entity.avatar_nft is None:
        return None
    return await ctx.store.get(AvatarNft, entity.avatar_nft)


async def add_jurisdiction_to_avatar(ctx: IndexerContext, account: str, jurisdiction_id: str) -> None:
    avatar = await _load_avatar(ctx, account)
    if avatar is None:
        return
    if jurisdiction_id in avatar.jurisdictions:
        return
    avatar.jurisdictions.append(jurisdiction_id)
    await ctx.store.save(avatar)


async def remove_jurisdiction_from_avatar(ctx: IndexerContext, account: str, jurisdiction_id: str) -> None:
    avatar = await _load_avatar(ctx, account)
    if avatar is None:
        return
    if jurisdiction_id in avatar.jurisdictions:
        avatar.jurisdictions.remove(jurisdiction_id)
    await ctx.store.save(avatar)


# ---------------------------------------------------------------------------
# Factory events
# ---------------------------------------------------------------------------

async def on_jurisdiction_created(ctx: IndexerContext, event: JurisdictionCreated, _: None) -> bool:
    await get_or_create_jurisdiction(ctx, event.jurisdiction)
    return True


async def on_case_created(ctx: IndexerContext, event: CaseCreated, _: None) -> bool:
    jurisdiction = await get_or_create_jurisdiction(ctx, event.jurisdiction)
    if await ctx.store.get(Case, event.case) is not None:
        logger.debug("Case %s already exists", event.case)
        return False

    case = Case(
        id=event.case,
        jurisdiction=jurisdiction.id,
        name=event.name,
        created_date=event.block_timestamp,
        stage=int(event.stage),
    )
    await ctx.store.save(case)

    jurisdiction.cases_count += 1
    await ctx.store.save(jurisdiction)
    logger.info("Case %s created under %s", case.id, jurisdiction.id)
    return True


async def on_avatar_minted(ctx: IndexerContext, event: AvatarMinted, _: None) -> bool:
    entity_id = avatar_nft_id(event.token_id)
    if await ctx.store.get(AvatarNft, entity_id) is not None:
        return False

    content = await ctx.resolver.resolve(event.uri)
    avatar = AvatarNft(
        id=entity_id,
        owner=event.owner,
        uri=event.uri,
        uri_data=content.data,
        uri_type=content.declared_type,
    )
    await ctx.store.save(avatar)
    await add_avatar_to_account(ctx, event.owner, avatar)
    return True


# ---------------------------------------------------------------------------
# Jurisdiction-scoped events
# ---------------------------------------------------------------------------

async def on_rule_added(ctx: IndexerContext, event: JurisdictionRuleAdded, jurisdiction: Jurisdiction) -> bool:
    entity_id = jurisdiction_rule_id(jurisdiction.id, event.rule_id)
    if await ctx.store.get(JurisdictionRule, entity_id) is not None:
        return False

    content = await ctx.resolver.resolve(event.uri)
    rule = JurisdictionRule(
        id=entity_id,
        jurisdiction=jurisdiction.id,
        rule_id=event.rule_id,
        about=event.about,
        affected=event.affected,
        negation=event.negation,
        uri=event.uri,
        uri_data=content.data,
        uri_type=content.declared_type,
    )
    await ctx.store.save(rule)

    jurisdiction.rules_count += 1
    await ctx.store.save(jurisdiction)
    return True


async def on_rule_effect_set(ctx: IndexerContext, event: RuleEffectSet, jurisdiction: Jurisdiction) -> bool:
    rule = await ctx.store.get(JurisdictionRule, jurisdiction_rule_id(jurisdiction.id, event.rule_id))
    if rule is None:
        logger.debug("Effect %r for unknown rule %s dropped", event.name, event.rule_id)
        return False

    effect = JurisdictionRuleEffect(
        id=rule_effect_id(rule.id, event.name),
        rule=rule.id,
        name=event.name,
        direction=event.direction,
        value=event.value,
    )
    await ctx.store.save(effect)
    if effect.id not in rule.effects:
        rule.effects.append(effect.id)
    await ctx.rules.recompute(rule, effect)
    return True


async def on_rule_disabled(ctx: IndexerContext, event: RuleDisabled, jurisdiction: Jurisdiction) -> bool:
    rule = await ctx.store.get(JurisdictionRule, jurisdiction_rule_id(jurisdiction.id, event.rule_id))
    if rule is None:
        return False
    rule.is_disabled = event.disabled
    await ctx.store.save(rule)
    return True


async def on_role_changed(ctx: IndexerContext, event: JurisdictionRoleChanged, jurisdiction: Jurisdiction) -> bool:
    """Replace the role's account list with the event's full list.

    Only the member role keeps a count. Member changes are mirrored onto
    the members' avatar NFTs.
    """
    accounts = list(event.accounts)

    if event.role == JurisdictionRole.MEMBER:
        previous = jurisdiction.member_accounts
        jurisdiction.member_accounts = accounts
        jurisdiction.member_accounts_count = (
            event.accounts_count if event.accounts_count is not None else len(accounts)
        )
    elif event.role == JurisdictionRole.JUDGE:
        jurisdiction.judge_accounts = accounts
    elif event.role == JurisdictionRole.ADMIN:
        jurisdiction.admin_accounts = accounts
    await ctx.store.save(jurisdiction)

    if event.role == JurisdictionRole.MEMBER:
        for account in accounts:
            if account not in previous:
                await add_jurisdiction_to_avatar(ctx, account, jurisdiction.id)
        for account in previous:
            if account not in accounts:
                await remove_jurisdiction_from_avatar(ctx, account, jurisdiction.id)
    return True
