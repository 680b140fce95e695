# core/history_records.py

"""
Read-side representation of stored history entries.

Two payload shapes have been written over time:

    legacy   changedFields + previousState / newState snapshots
    changes  "changes" as a list of {field, old, new} or an opaque mapping

``normalize_record`` detects which one a stored row uses and returns a
HistoryEntry whose payload is one of LegacyPayload, ChangesPayload or
MalformedPayload. It never raises.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from core.diff import diff
from core.timeutils import coerce_datetime
from models.enums import Operation


# Entity type spellings used by older writers
ENTITY_TYPE_ALIASES = {
    "lostItem": "lost_item",
    "maintenance": "technical_intervention",
}


def canonical_entity_type(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return ENTITY_TYPE_ALIASES.get(value, value)


@dataclass(frozen=True)
class HistoryChange:
    field: Optional[str]
    old: Any = None
    new: Any = None


@dataclass(frozen=True)
class LegacyPayload:
    changed_fields: List[str]
    previous_state: Optional[Dict[str, Any]] = None
    new_state: Optional[Dict[str, Any]] = None
    recomputed: bool = False


@dataclass(frozen=True)
class ChangesPayload:
    changes: Optional[List[HistoryChange]] = None
    opaque: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class MalformedPayload:
    reason: str


Payload = Union[LegacyPayload, ChangesPayload, MalformedPayload]


@dataclass
class HistoryEntry:
    id: Optional[str]
    entity_id: Optional[str]
    entity_type: Optional[str]
    operation: str
    user_id: Optional[str]
    user_name: Optional[str]
    user_email: Optional[str]
    timestamp: Optional[datetime]
    payload: Payload
    record_type: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_malformed(self) -> bool:
        return isinstance(self.payload, MalformedPayload)

    @property
    def changed_fields(self) -> List[str]:
        payload = self.payload
        if isinstance(payload, LegacyPayload):
            return list(payload.changed_fields)
        if isinstance(payload, ChangesPayload):
            if payload.changes is not None:
                return [change.field for change in payload.changes if change.field]
            return list((payload.opaque or {}).keys())
        return []


def _legacy_payload(row: Mapping[str, Any]) -> Payload:
    previous = row.get("previousState")
    new = row.get("newState")

    for name, snapshot in (("previousState", previous), ("newState", new)):
        if snapshot is not None and not isinstance(snapshot, Mapping):
            return MalformedPayload(f"{name} is not an object")

    previous = dict(previous) if previous else None
    new = dict(new) if new else None

    changed = row.get("changedFields")
    if changed is None:
        return LegacyPayload(diff(previous, new), previous, new, recomputed=True)

    if not isinstance(changed, list) or not all(isinstance(name, str) for name in changed):
        return MalformedPayload("changedFields is not a list of field names")

    return LegacyPayload(list(changed), previous, new)


def _changes_payload(changes: Any) -> Payload:
    if isinstance(changes, list):
        parsed = []
        for item in changes:
            if not isinstance(item, Mapping):
                return MalformedPayload("changes contains a non-object item")
            field_name = item.get("field")
            parsed.append(HistoryChange(
                field=str(field_name) if field_name is not None else None,
                old=item.get("old"),
                new=item.get("new"),
            ))
        return ChangesPayload(changes=parsed)

    if isinstance(changes, Mapping):
        return ChangesPayload(opaque=dict(changes))

    return MalformedPayload("changes is neither a list nor an object")


def detect_payload(row: Mapping[str, Any], operation: str) -> Payload:
    if row.get("changes") is not None:
        return _changes_payload(row["changes"])

    if any(key in row for key in ("changedFields", "previousState", "newState")):
        return _legacy_payload(row)

    # Creations and deletions were sometimes logged without any detail
    if operation in (Operation.create.value, Operation.delete.value):
        return LegacyPayload([])

    return MalformedPayload("no changes, changedFields or snapshots")


def normalize_record(row: Any) -> HistoryEntry:
    if not isinstance(row, Mapping):
        return HistoryEntry(
            id=None, entity_id=None, entity_type=None, operation="update",
            user_id=None, user_name=None, user_email=None, timestamp=None,
            payload=MalformedPayload("record is not an object"),
        )

    operation = row.get("operation") or row.get("action") or Operation.update.value
    operation = str(operation)

    user_id = row.get("userId")
    return HistoryEntry(
        id=str(row["id"]) if row.get("id") is not None else None,
        entity_id=row.get("entityId"),
        entity_type=canonical_entity_type(row.get("entityType")),
        operation=operation,
        user_id=str(user_id) if user_id is not None else None,
        user_name=row.get("userName"),
        user_email=row.get("userEmail"),
        timestamp=coerce_datetime(row.get("timestamp")),
        payload=detect_payload(row, operation),
        record_type=row.get("type"),
        raw=dict(row),
    )
