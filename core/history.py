# core/history.py

"""
Append-only audit trail for entity mutations.

Entries are written after the entity mutation has committed, on the same
call path. A failed append never unwinds the mutation: ``record`` turns it
into a warning the caller reports alongside its result.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from core.config import settings
from core.diff import diff
from core.errors import HistoryAppendFailed, HotelOpsError, IndexRequired
from core.history_records import HistoryEntry, canonical_entity_type, normalize_record
from core.identity import UserDirectory
from core.logging_config import logger
from core.storage import DocumentStore, OrderBy, Predicate
from core.timeutils import utcnow


HISTORY_COLLECTION = "history"
UNKNOWN_USER = "Unknown user"
UNKNOWN_EMAIL = "Unknown email"


def unknown_user_label(user_id: Optional[str]) -> str:
    if not user_id:
        return UNKNOWN_USER
    return f"{UNKNOWN_USER} ({str(user_id)[:8]}...)"


@dataclass
class HistoryOutcome:
    """What a mutation reports about its audit entry."""

    entry_id: Optional[str] = None
    warning: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.entry_id is not None


class HistoryLog:
    def __init__(
        self,
        store: DocumentStore,
        directory: UserDirectory,
        candidate_limit: Optional[int] = None,
        scan_unindexed: Optional[bool] = None,
        clock: Callable = utcnow,
    ):
        self.store = store
        self.directory = directory
        self.candidate_limit = candidate_limit or settings.HISTORY_CANDIDATE_LIMIT
        self.scan_unindexed = settings.HISTORY_SCAN_UNINDEXED if scan_unindexed is None else scan_unindexed
        self._clock = clock

    # -----------------------------------------------------
    # Write path
    # -----------------------------------------------------
    async def _actor_details(self, actor_id: Optional[str]) -> Tuple[str, str]:
        """Display name and email of the actor, frozen into the entry at write time."""
        user = None
        if actor_id:
            try:
                user = await self.directory.lookup(actor_id)
            except HotelOpsError as e:
                logger.warning(f"Could not resolve history actor {actor_id}: {e}")

        if user is None:
            return unknown_user_label(actor_id), UNKNOWN_EMAIL

        name = user.name or user.display_name or user.email or unknown_user_label(actor_id)
        return name, user.email or UNKNOWN_EMAIL

    async def append(
        self,
        entity_id: str,
        entity_type: str,
        previous: Optional[Mapping[str, Any]],
        next_state: Optional[Mapping[str, Any]],
        actor_id: Optional[str],
        operation: str,
    ) -> str:
        """
        Write one history entry and return its id.

        Raises:
            HistoryAppendFailed: the store rejected or timed out on the write
        """
        previous = dict(previous) if previous else None
        next_state = dict(next_state) if next_state else None
        user_name, user_email = await self._actor_details(actor_id)

        entry: Dict[str, Any] = {
            "entityId": entity_id,
            "entityType": str(entity_type),
            "operation": str(operation),
            "action": str(operation),
            "changedFields": diff(previous, next_state),
            "userId": actor_id or "unknown",
            "userName": user_name,
            "userEmail": user_email,
            "timestamp": self._clock(),
        }
        if previous is not None:
            entry["previousState"] = previous
        if next_state is not None:
            entry["newState"] = next_state

        try:
            entry_id = await self.store.insert(HISTORY_COLLECTION, entry)
        except HotelOpsError as e:
            raise HistoryAppendFailed(entity_id, e) from e

        logger.info(f"History entry {entry_id} recorded: {operation} {entity_type}/{entity_id}")
        return entry_id

    async def record(self, *args, **kwargs) -> HistoryOutcome:
        """``append`` for mutation paths: failures come back as a warning, never raised."""
        try:
            entry_id = await self.append(*args, **kwargs)
        except HistoryAppendFailed as e:
            logger.warning(str(e))
            return HistoryOutcome(warning="The change was saved but its history entry could not be recorded")
        return HistoryOutcome(entry_id=entry_id)

    # -----------------------------------------------------
    # Read path
    # -----------------------------------------------------
    async def _scan_candidates(self) -> List[Dict[str, Any]]:
        return await self.store.query(
            HISTORY_COLLECTION,
            [],
            limit=self.candidate_limit,
            order_by=OrderBy("timestamp", descending=True),
        )

    @staticmethod
    def _mentions(row: Mapping[str, Any], entity_id: str) -> bool:
        changes = row.get("changes")
        if isinstance(changes, list):
            return any(
                isinstance(change, Mapping)
                and (change.get("new") == entity_id or change.get("old") == entity_id)
                for change in changes
            )
        if isinstance(changes, Mapping):
            return entity_id in json.dumps(changes, default=str)
        return False

    @classmethod
    def _matches(cls, row: Mapping[str, Any], entity_id: str, entity_type: Optional[str]) -> bool:
        if row.get("entityId") == entity_id:
            if entity_type and row.get("entityType"):
                return canonical_entity_type(row["entityType"]) == canonical_entity_type(entity_type)
            return True
        # Writers that never set entityId only reference the entity inside their changes
        return not row.get("entityId") and cls._mentions(row, entity_id)

    async def entries_for(self, entity_id: str, entity_type: Optional[str] = None) -> List[HistoryEntry]:
        """
        History of one entity, newest first. No history is an empty list,
        not an error.
        """
        if not entity_id:
            return []

        try:
            # Newest first so the limit never cuts off the latest entries
            rows = await self.store.query(
                HISTORY_COLLECTION,
                [Predicate.eq("entityId", entity_id)],
                limit=self.candidate_limit,
                order_by=OrderBy("timestamp", descending=True),
            )
            if self.scan_unindexed:
                rows = rows + await self._scan_candidates()
        except IndexRequired:
            logger.warning("History index unavailable, scanning recent entries instead")
            rows = await self._scan_candidates()

        seen = set()
        matched = []
        for row in rows:
            key = row.get("id")
            if key is not None and key in seen:
                continue
            seen.add(key)
            if self._matches(row, entity_id, entity_type):
                matched.append(row)

        entries = [normalize_record(row) for row in matched]

        # Stable sort on the reversed fetch order puts later writes first on timestamp ties
        entries.reverse()
        entries.sort(key=lambda entry: entry.timestamp.timestamp() if entry.timestamp else float("-inf"), reverse=True)
        return entries
