# services/entity_service.py

"""
Scoped CRUD shared by incidents, technical interventions and lost items.

Reads go through the permission resolver and query planner; a caller with
no access gets an empty list. Writes check hotel access first (AccessDenied
otherwise), commit the entity, then append a history entry. A failed append
comes back as a warning on the MutationResult.
"""

from typing import Any, Dict, List, Optional

from core.config import settings
from core.errors import AccessDenied, NotFound
from core.history import HistoryLog
from core.history_records import HistoryEntry
from core.logging_config import logger
from core.permissions import PermissionResolver, scope_for
from core.query_planner import HOTEL_FIELD, QueryPlan, ScopedQueryPlanner, execute_plan
from core.storage import DocumentStore
from core.timeutils import utcnow
from models.common import MutationResult
from models.enums import Operation
from models.user import User


class ScopedEntityService:
    collection: str = ""
    entity_type: str = ""
    status_field: str = "statusId"
    sort_field: str = "date"
    label: str = "Item"

    def __init__(
        self,
        store: DocumentStore,
        resolver: PermissionResolver,
        planner: ScopedQueryPlanner,
        history: HistoryLog,
    ):
        self.store = store
        self.resolver = resolver
        self.planner = planner
        self.history = history

    # -----------------------------------------------------
    # Helpers
    # -----------------------------------------------------
    async def _require_user(self, identity: Optional[str]) -> User:
        user = await self.resolver.resolve_user(identity)
        if user is None:
            logger.warning(f"Write on {self.collection} refused: unknown identity {identity!r}")
            raise AccessDenied(f"Unknown identity {identity!r}")
        return user

    def _check_current(self, user: User, current: Dict[str, Any]):
        # Admins may still repair or delete rows that lost their hotel
        if user.is_admin and not current.get(HOTEL_FIELD):
            return
        self._check_hotel(user, current.get(HOTEL_FIELD))

    def _check_hotel(self, user: User, hotel_id: Optional[str]):
        """A write must name a hotel the user can access. A blank hotel is never valid."""
        if not hotel_id or not scope_for(user).contains(hotel_id):
            logger.warning(f"User {user.id} denied write on {self.collection} for hotel {hotel_id!r}")
            raise AccessDenied(f"No access to hotel {hotel_id!r}")

    async def _load(self, entity_id: str) -> Dict[str, Any]:
        row = await self.store.get(self.collection, entity_id)
        if row is None:
            raise NotFound(f"{self.label} {entity_id} not found")
        return dict(row)

    @staticmethod
    def _result(entity_id: str, outcome) -> MutationResult:
        return MutationResult(id=entity_id, history_id=outcome.entry_id, warning=outcome.warning)

    # Subclass hooks
    def prepare_create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        return document

    def prepare_update(self, current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
        return changes

    # -----------------------------------------------------
    # Reads
    # -----------------------------------------------------
    async def plan(
        self,
        identity: Optional[str],
        hotel: Optional[str] = None,
        status: Optional[str] = None,
        date_from=None,
        limit: Optional[int] = None,
    ) -> QueryPlan:
        return await self.planner.plan(
            identity,
            hotel,
            collection=self.collection,
            status=status,
            status_field=self.status_field,
            sort_field=self.sort_field,
            date_from=date_from,
            limit=limit,
        )

    async def list(
        self,
        identity: Optional[str],
        hotel: Optional[str] = None,
        status: Optional[str] = None,
        date_from=None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        plan = await self.plan(identity, hotel, status, date_from, limit)
        return await execute_plan(self.store, plan)

    async def get(self, identity: Optional[str], entity_id: str) -> Dict[str, Any]:
        """Out-of-scope entities are reported as missing."""
        row = await self._load(entity_id)
        scope = await self.resolver.accessible_hotels(identity)
        if not scope.contains(row.get(HOTEL_FIELD)):
            raise NotFound(f"{self.label} {entity_id} not found")
        return row

    async def history_for(self, identity: Optional[str], entity_id: str) -> List[HistoryEntry]:
        """
        History of an entity the caller can see. A deleted entity keeps its
        history, which stays readable for hotels in scope through the
        delete entry's snapshot.
        """
        scope = await self.resolver.accessible_hotels(identity)
        if scope.is_empty:
            return []

        row = await self.store.get(self.collection, entity_id)
        entries = await self.history.entries_for(entity_id, self.entity_type)

        if row is not None:
            hotel_id = row.get(HOTEL_FIELD)
        else:
            hotel_id = _last_known_hotel(entries)
        if not scope.contains(hotel_id):
            return []
        return entries

    async def stats_rows(self, identity: Optional[str], hotel: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self.list(identity, hotel, limit=settings.STATS_QUERY_LIMIT)

    # -----------------------------------------------------
    # Writes
    # -----------------------------------------------------
    async def create(self, identity: Optional[str], data: Dict[str, Any]) -> MutationResult:
        user = await self._require_user(identity)
        self._check_hotel(user, data.get(HOTEL_FIELD))

        now = utcnow()
        document = dict(data)
        document.pop("id", None)
        document.update({"createdAt": now, "updatedAt": now, "createdBy": user.id})
        document = self.prepare_create(document)

        entity_id = await self.store.insert(self.collection, document)
        logger.info(f"{self.label} {entity_id} created by {user.id}")

        outcome = await self.history.record(
            entity_id, self.entity_type, None, {**document, "id": entity_id}, user.id, Operation.create.value
        )
        return self._result(entity_id, outcome)

    async def update(self, identity: Optional[str], entity_id: str, changes: Dict[str, Any]) -> MutationResult:
        user = await self._require_user(identity)
        current = await self._load(entity_id)
        self._check_current(user, current)

        changes = {key: value for key, value in changes.items() if key != "id"}
        if HOTEL_FIELD in changes and changes[HOTEL_FIELD] != current.get(HOTEL_FIELD):
            self._check_hotel(user, changes[HOTEL_FIELD])

        changes = self.prepare_update(current, changes)
        changes.update({"updatedAt": utcnow(), "updatedBy": user.id})

        await self.store.update(self.collection, entity_id, changes)
        logger.info(f"{self.label} {entity_id} updated by {user.id}")

        outcome = await self.history.record(
            entity_id, self.entity_type, current, {**current, **changes}, user.id, Operation.update.value
        )
        return self._result(entity_id, outcome)

    async def delete(self, identity: Optional[str], entity_id: str) -> MutationResult:
        """Only the creator or a system admin may delete."""
        user = await self._require_user(identity)
        current = await self._load(entity_id)
        self._check_current(user, current)

        if not user.is_admin and current.get("createdBy") != user.id:
            logger.warning(f"User {user.id} denied delete of {self.label.lower()} {entity_id}: not the creator")
            raise AccessDenied("Only the creator or an administrator can delete this item")

        await self.store.delete(self.collection, entity_id)
        logger.info(f"{self.label} {entity_id} deleted by {user.id}")

        outcome = await self.history.record(
            entity_id, self.entity_type, current, None, user.id, Operation.delete.value
        )
        return self._result(entity_id, outcome)


def _last_known_hotel(entries: List[HistoryEntry]) -> Optional[str]:
    for entry in entries:
        raw = entry.raw
        for key in ("newState", "previousState"):
            snapshot = raw.get(key)
            if isinstance(snapshot, dict) and snapshot.get(HOTEL_FIELD):
                return snapshot[HOTEL_FIELD]
    return None


def count_by(rows: List[Dict[str, Any]], field: str) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for row in rows:
        key = row.get(field)
        if key is None:
            continue
        counts[str(key)] = counts.get(str(key), 0) + 1
    return counts
