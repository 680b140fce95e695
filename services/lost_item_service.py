# services/lost_item_service.py

from typing import Any, Dict, List, Optional

from core.logging_config import logger
from core.query_planner import HOTEL_FIELD
from core.timeutils import utcnow
from models.common import MutationResult
from models.enums import EntityType, LostItemStatus, Operation
from models.lost_item import LostItemStats
from services.entity_service import ScopedEntityService, count_by


class LostItemService(ScopedEntityService):
    collection = "lost_items"
    entity_type = EntityType.lost_item.value
    status_field = "status"
    sort_field = "discoveryDate"
    label = "Lost item"

    async def mark_returned(
        self,
        identity: Optional[str],
        entity_id: str,
        returned_by_id: Optional[str] = None,
        returned_notes: Optional[str] = None,
    ) -> MutationResult:
        user = await self._require_user(identity)
        current = await self._load(entity_id)
        self._check_current(user, current)

        now = utcnow()
        changes = {
            "status": LostItemStatus.returned.value,
            "returnedById": returned_by_id or user.id,
            "returnedDate": now,
            "returnedNotes": returned_notes or "",
            "updatedAt": now,
            "updatedBy": user.id,
        }
        await self.store.update(self.collection, entity_id, changes)
        logger.info(f"Lost item {entity_id} marked as returned by {user.id}")

        outcome = await self.history.record(
            entity_id, self.entity_type, current, {**current, **changes}, user.id, Operation.update.value
        )
        return self._result(entity_id, outcome)

    async def stats(self, identity: Optional[str], hotel: Optional[str] = None) -> LostItemStats:
        rows = await self.stats_rows(identity, hotel)
        return compute_lost_item_stats(rows)


def compute_lost_item_stats(rows: List[Dict[str, Any]]) -> LostItemStats:
    total = len(rows)
    conserved = sum(1 for row in rows if row.get("status") == LostItemStatus.conserved.value)
    returned = sum(1 for row in rows if row.get("status") == LostItemStatus.returned.value)

    return LostItemStats(
        total=total,
        conserved=conserved,
        returned=returned,
        return_rate=round(returned / total * 100) if total else 0,
        by_type=count_by(rows, "itemTypeId"),
        by_hotel=count_by(rows, HOTEL_FIELD),
    )
