"""Case role and participant maintenance.

A case role is held as a balance of role tokens, so every transfer to an
account appends that account to the role's list again (multiset). The
case's participant list answers "who ever held any role" and only grows
by accounts it does not already contain (set).

Nothing is ever removed: the sending side of a transfer is ignored.
"""

from __future__ import annotations

import logging

from dispute_indexer.core.ids import case_role_id
from dispute_indexer.core.interfaces import IEntityStore
from dispute_indexer.core.models import Case, CaseRole

logger = logging.getLogger(__name__)


class RoleSetManager:
    def __init__(self, store: IEntityStore) -> None:
        self._store = store

    async def get_or_create_role(self, case: Case, role_id: int) -> CaseRole:
        """Load ``CaseRole(case, role_id)``; build an empty one on first sight.

        A newly built role is not persisted until the caller saves it.
        """
        entity_id = case_role_id(case.id, role_id)
        role = await self._store.get(CaseRole, entity_id)
        if role is None:
            role = CaseRole(id=entity_id, case=case.id, role_id=role_id, accounts=[])
        return role

    async def apply_transfer(self, case: Case, role_id: int, to: str) -> CaseRole:
        """Grant one unit of *role_id* in *case* to *to*.

        Saves both the role and the case. Returns the saved role.
        """
        role = await self.get_or_create_role(case, role_id)
        role.accounts.append(to)
        await self._store.save(role)

        if to not in case.participant_accounts:
            case.participant_accounts.append(to)
            await self._store.save(case)

        logger.debug(
            "Role %s of case %s granted to %s (units=%d)",
            role_id, case.id, to, role.accounts.count(to),
        )
        return role
