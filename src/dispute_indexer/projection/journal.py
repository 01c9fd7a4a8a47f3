"""Append-only journal of processed case events.

Each record is keyed by ``(case, transaction hash)`` and stores the event
kind plus its parameters as canonical JSON bytes. The key carries neither
the event kind nor the log index: two events for the same case in one
transaction land on the same record and the later one wins. Reprocessing
the same event rewrites an identical record.
"""

from __future__ import annotations

import logging
from typing import Any

from dispute_indexer.core.enums import EventKind
from dispute_indexer.core.ids import canonical_json, case_event_id
from dispute_indexer.core.interfaces import IEntityStore
from dispute_indexer.core.models import CaseEvent

logger = logging.getLogger(__name__)


class EventJournal:
    def __init__(self, store: IEntityStore) -> None:
        self._store = store

    async def append(
        self,
        case_id: str,
        transaction_hash: str,
        timestamp: int,
        kind: EventKind | str,
        params: dict[str, Any],
    ) -> CaseEvent:
        entity_id = case_event_id(case_id, transaction_hash)
        record = CaseEvent(
            id=entity_id,
            case=case_id,
            created_date=timestamp,
            type=EventKind(kind).value,
            data=canonical_json(params),
        )
        previous = await self._store.get(CaseEvent, entity_id)
        if previous is not None and previous.type != record.type:
            logger.debug(
                "Journal key %s already holds %s; overwritten by %s",
                entity_id, previous.type, record.type,
            )
        await self._store.save(record)
        return record

    async def entries(self, case_id: str) -> list[CaseEvent]:
        """Journal records for *case_id*, oldest first."""
        records = await self._store.list_all(CaseEvent)
        return sorted(
            (r for r in records if r.case == case_id),
            key=lambda r: r.created_date,
        )
