"""Rule positivity aggregation.

A rule is positive when every one of its effects points in the positive
direction. Effects are distinct by name: when an effect arrives, any
stored effect with the same name is treated as superseded and left out.

    is_positive = new.direction AND all(e.direction for e in E')
    E'          = stored effects whose name != new.name

The flag is recomputed from the full effect set on every write, never
patched from the incoming direction alone. A rule with no effects is
positive.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dispute_indexer.core.interfaces import IEntityStore
from dispute_indexer.core.models import JurisdictionRule, JurisdictionRuleEffect

logger = logging.getLogger(__name__)


def compute_positivity(
    effects: Iterable[JurisdictionRuleEffect],
    new_effect: JurisdictionRuleEffect,
) -> bool:
    """AND over the directions of *new_effect* and the effects it does not
    supersede."""
    if not new_effect.direction:
        return False
    return all(e.direction for e in effects if e.name != new_effect.name)


class RuleEffectAggregator:
    def __init__(self, store: IEntityStore) -> None:
        self._store = store

    async def load_effects(self, rule: JurisdictionRule) -> list[JurisdictionRuleEffect]:
        """Stored effects referenced by *rule*; dangling references are skipped."""
        effects: list[JurisdictionRuleEffect] = []
        for effect_id in rule.effects:
            effect = await self._store.get(JurisdictionRuleEffect, effect_id)
            if effect is None:
                logger.debug("Rule %s references missing effect %s", rule.id, effect_id)
                continue
            effects.append(effect)
        return effects

    async def recompute(
        self,
        rule: JurisdictionRule,
        new_effect: JurisdictionRuleEffect,
    ) -> bool:
        """Recompute and save ``rule.is_positive`` after *new_effect* arrives."""
        effects = await self.load_effects(rule)
        rule.is_positive = compute_positivity(effects, new_effect)
        await self._store.save(rule)
        logger.debug(
            "Rule %s positivity=%s over %d effect(s)",
            rule.id, rule.is_positive, len(effects),
        )
        return rule.is_positive
