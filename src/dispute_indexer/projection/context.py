"""Collaborators shared by every handler during one processing run."""

from __future__ import annotations

from dataclasses import dataclass, field

from dispute_indexer.core.interfaces import IContentResolver, IEntityStore, INameOracle

from .journal import EventJournal
from .roles import RoleSetManager
from .rules import RuleEffectAggregator


@dataclass
class IndexerContext:
    """Injected into every handler. Scoped to a processing run."""

    store: IEntityStore
    resolver: IContentResolver
    oracle: INameOracle
    roles: RoleSetManager = field(init=False)
    rules: RuleEffectAggregator = field(init=False)
    journal: EventJournal = field(init=False)

    def __post_init__(self) -> None:
        self.roles = RoleSetManager(self.store)
        self.rules = RuleEffectAggregator(self.store)
        self.journal = EventJournal(self.store)
