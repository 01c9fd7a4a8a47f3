"""State projection: applies decoded events to the entity graph.

Key components
--------------
EventRouter           Resolves the owning aggregate and dispatches by kind
RoleSetManager        Case role multisets and the participant set
RuleEffectAggregator  Recomputes rule positivity over distinct-by-name effects
EventJournal          Append-only per-case record of processed events
IndexerContext        Collaborators injected into every handler
"""

from .context import IndexerContext
from .journal import EventJournal
from .roles import RoleSetManager
from .router import EventRouter
from .rules import RuleEffectAggregator, compute_positivity

__all__ = [
    "IndexerContext",
    "EventJournal",
    "RoleSetManager",
    "EventRouter",
    "RuleEffectAggregator",
    "compute_positivity",
]
