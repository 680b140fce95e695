# services/intervention_service.py

from typing import Any, Dict, List, Optional

from core.timeutils import coerce_datetime
from models.enums import EntityType, InterventionStatus
from models.intervention import InterventionStats
from services.entity_service import ScopedEntityService


class InterventionService(ScopedEntityService):
    collection = "technical_interventions"
    entity_type = EntityType.technical_intervention.value
    status_field = "statusId"
    sort_field = "date"
    label = "Intervention"

    async def stats(self, identity: Optional[str], hotel: Optional[str] = None) -> InterventionStats:
        rows = await self.stats_rows(identity, hotel)
        return compute_intervention_stats(rows)


def _final_cost(row: Dict[str, Any]) -> float:
    """Best accepted quote when there is one, the recorded final cost otherwise."""
    quotes = row.get("quotes") or []
    if row.get("hasQuote") and quotes:
        accepted = [
            (quote.get("amount") or 0) - (quote.get("discount") or 0)
            for quote in quotes
            if isinstance(quote, dict) and quote.get("status") == "accepted"
        ]
        if accepted:
            return min(accepted)
    return row.get("finalCost") or 0


def compute_intervention_stats(rows: List[Dict[str, Any]]) -> InterventionStats:
    def count(status: InterventionStatus) -> int:
        return sum(1 for row in rows if row.get("statusId") == status.value)

    days = []
    for row in rows:
        if row.get("statusId") != InterventionStatus.completed.value:
            continue
        start = coerce_datetime(row.get("startDate"))
        end = coerce_datetime(row.get("endDate"))
        if start and end:
            days.append((end - start).total_seconds() / 86400)

    return InterventionStats(
        total=len(rows),
        pending=count(InterventionStatus.pending),
        in_progress=count(InterventionStatus.in_progress),
        completed=count(InterventionStatus.completed),
        average_completion_time=round(sum(days) / len(days), 1) if days else 0,
        total_estimated_cost=sum(row.get("estimatedCost") or 0 for row in rows),
        total_final_cost=sum(_final_cost(row) for row in rows),
    )
