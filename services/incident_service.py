# services/incident_service.py

from typing import Any, Dict, List, Optional

from core.timeutils import coerce_datetime, utcnow
from models.enums import EntityType, IncidentStatus
from models.incident import IncidentStats
from services.entity_service import ScopedEntityService


RESOLVED_STATUSES = (IncidentStatus.resolved.value, IncidentStatus.closed.value)
SATISFACTION_SCORES = {"satisfied": 5, "neutral": 3}


class IncidentService(ScopedEntityService):
    collection = "incidents"
    entity_type = EntityType.incident.value
    status_field = "statusId"
    sort_field = "date"
    label = "Incident"

    def prepare_create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        # Older screens read the location from locationId
        if document.get("location") is not None:
            document["locationId"] = document["location"]
        if document.get("statusId") in RESOLVED_STATUSES:
            document["resolvedAt"] = document["createdAt"]
        return document

    def prepare_update(self, current: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
        if "location" in changes:
            changes["locationId"] = changes["location"]
        elif "locationId" in changes:
            changes["location"] = changes["locationId"]

        if changes.get("statusId") in RESOLVED_STATUSES:
            changes["resolvedAt"] = utcnow()
        return changes

    async def stats(self, identity: Optional[str], hotel: Optional[str] = None) -> IncidentStats:
        rows = await self.stats_rows(identity, hotel)
        return compute_incident_stats(rows)


def compute_incident_stats(rows: List[Dict[str, Any]]) -> IncidentStats:
    def count(status: IncidentStatus) -> int:
        return sum(1 for row in rows if row.get("statusId") == status.value)

    hours = []
    for row in rows:
        created = coerce_datetime(row.get("createdAt"))
        resolved = coerce_datetime(row.get("resolvedAt"))
        if created and resolved:
            hours.append((resolved - created).total_seconds() / 3600)

    scores = [
        SATISFACTION_SCORES.get(row["clientSatisfactionId"], 1)
        for row in rows
        if row.get("clientSatisfactionId")
    ]

    return IncidentStats(
        total=len(rows),
        open=count(IncidentStatus.open),
        in_progress=count(IncidentStatus.in_progress),
        resolved=count(IncidentStatus.resolved),
        closed=count(IncidentStatus.closed),
        average_resolution_time=round(sum(hours) / len(hours), 1) if hours else 0,
        satisfaction_score=round(sum(scores) / len(scores), 1) if scores else 0,
    )
