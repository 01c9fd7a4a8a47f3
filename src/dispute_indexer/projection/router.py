"""Event routing.

``EventRouter.dispatch`` applies one decoded event:

1.  Look up the route for the event's kind.
2.  For scoped kinds, load the owning aggregate (Case or Jurisdiction) by
    the event's contract address. If it is not there, the event is
    dropped without error: the address belongs to a contract this
    indexer does not track, or its creation event has not been seen.
3.  Run the handler.

Factory kinds (jurisdiction/case creation, avatar mint) have no owning
aggregate and go straight to their handler.

Events for one aggregate must be dispatched in chain order and never
concurrently: every handler is a load-mutate-save sequence with no
concurrency check. Events for different aggregates are independent.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from dispute_indexer.core.enums import EventKind
from dispute_indexer.core.events import ChainEvent
from dispute_indexer.core.models import Case, Entity, Jurisdiction
from dispute_indexer.observability.logger import new_trace_id

from . import case as case_handlers
from . import jurisdiction as jurisdiction_handlers
from .context import IndexerContext

logger = logging.getLogger(__name__)

Handler = Callable[[IndexerContext, Any, Any], Awaitable[bool]]


@dataclass(frozen=True)
class Route:
    aggregate: type[Entity] | None
    handler: Handler


DEFAULT_ROUTES: dict[EventKind, Route] = {
    # Factory
    EventKind.JURISDICTION_CREATED: Route(None, jurisdiction_handlers.on_jurisdiction_created),
    EventKind.CASE_CREATED: Route(None, jurisdiction_handlers.on_case_created),
    EventKind.AVATAR_MINTED: Route(None, jurisdiction_handlers.on_avatar_minted),
    # Jurisdiction-scoped
    EventKind.JURISDICTION_RULE_ADDED: Route(Jurisdiction, jurisdiction_handlers.on_rule_added),
    EventKind.RULE_EFFECT_SET: Route(Jurisdiction, jurisdiction_handlers.on_rule_effect_set),
    EventKind.RULE_DISABLED: Route(Jurisdiction, jurisdiction_handlers.on_rule_disabled),
    EventKind.JURISDICTION_ROLE_CHANGED: Route(Jurisdiction, jurisdiction_handlers.on_role_changed),
    # Case-scoped
    EventKind.ROLE_TRANSFER: Route(Case, case_handlers.on_role_transfer),
    EventKind.RULE_ADDED: Route(Case, case_handlers.on_rule_added),
    EventKind.RULE_CONFIRMED: Route(Case, case_handlers.on_rule_confirmed),
    EventKind.POST_CREATED: Route(Case, case_handlers.on_post_created),
    EventKind.STAGE_CHANGED: Route(Case, case_handlers.on_stage_changed),
    EventKind.VERDICT_ISSUED: Route(Case, case_handlers.on_verdict_issued),
    EventKind.CASE_CANCELLED: Route(Case, case_handlers.on_case_cancelled),
}


class EventRouter:
    """Dispatch decoded events to their handlers.

    Args:
        ctx: Collaborators for this processing run.
        routes: Override the kind → route table (tests).
    """

    def __init__(
        self,
        ctx: IndexerContext,
        routes: dict[EventKind, Route] | None = None,
    ) -> None:
        self._ctx = ctx
        self._routes = dict(DEFAULT_ROUTES if routes is None else routes)
        self._stats: Counter[str] = Counter()

    @property
    def context(self) -> IndexerContext:
        return self._ctx

    async def dispatch(self, event: ChainEvent) -> bool:
        """Apply *event*. Returns ``True`` if its handler changed state.

        Raises:
            ExternalCallError: the naming oracle failed while creating a
                jurisdiction. No partial state is written for the event.
        """
        new_trace_id()
        kind = event.event_kind
        self._stats["dispatched"] += 1

        route = self._routes.get(kind)
        if route is None:
            logger.warning("No handler for %s; event ignored", kind.value)
            self._stats["unrouted"] += 1
            return False

        aggregate = None
        if route.aggregate is not None:
            aggregate = await self._ctx.store.get(route.aggregate, event.address)
            if aggregate is None:
                logger.debug(
                    "Dropped %s for untracked %s %s",
                    kind.value, route.aggregate.entity_type, event.address,
                )
                self._stats["dropped"] += 1
                return False

        applied = await route.handler(self._ctx, event, aggregate)
        self._stats["applied" if applied else "skipped"] += 1
        logger.debug(
            "%s at %s tx=%s applied=%s",
            kind.value, event.address, event.transaction_hash, applied,
        )
        return applied

    async def dispatch_many(self, events: Iterable[ChainEvent]) -> int:
        """Dispatch *events* in order. Returns how many were applied.

        Stops at the first fatal error, which propagates.
        """
        applied = 0
        for event in events:
            if await self.dispatch(event):
                applied += 1
        return applied

    def stats(self) -> dict[str, int]:
        """Counters: dispatched, applied, skipped, dropped, unrouted."""
        return {
            key: self._stats.get(key, 0)
            for key in ("dispatched", "applied", "skipped", "dropped", "unrouted")
        }
