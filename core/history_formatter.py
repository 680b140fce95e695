# core/history_formatter.py

"""
Human-readable rendering of history entries for the change-log views.
Pure functions, no I/O. ``format_entry`` never raises.
"""

import json
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

import pytz

from core.config import settings
from core.errors import MalformedHistoryRecord
from core.history import unknown_user_label
from core.history_records import (
    ChangesPayload,
    HistoryEntry,
    LegacyPayload,
    MalformedPayload,
    normalize_record,
)
from core.logging_config import logger
from core.timeutils import coerce_datetime, is_date_field, is_timestamp_dict


NOT_SET = "Not set"
UNKNOWN_DATE = "Unknown date"
COMPLEX_OBJECT = "Complex object"
DETAILS_UNAVAILABLE = "History details unavailable."
OBJECT_PREVIEW_CHARS = 50
DATE_FORMAT = "%d/%m/%Y %H:%M"

OPERATION_LABELS = {
    "create": "Created",
    "update": "Updated",
    "delete": "Deleted",
}

FIELD_LABELS = {
    # Shared
    "hotelId": "Hotel",
    "categoryId": "Category",
    "impactId": "Impact",
    "statusId": "Status",
    "status": "Status",
    "description": "Description",
    "location": "Location",
    "locationId": "Location",
    "date": "Date",
    "time": "Time",
    "createdAt": "Created on",
    "updatedAt": "Updated on",
    "createdBy": "Created by",
    "updatedBy": "Updated by",
    "photoURL": "Photo",
    "photoUrl": "Photo",
    "priority": "Priority",
    "notes": "Notes",
    "attachments": "Attachments",

    # Incidents
    "receivedById": "Received by",
    "concludedBy": "Concluded by",
    "resolutionDescription": "Resolution details",
    "resolutionType": "Resolution type",
    "resolvedAt": "Resolved on",
    "clientSatisfactionId": "Guest satisfaction",
    "commercialGesture": "Commercial gesture",
    "clientName": "Guest name",
    "clientEmail": "Guest email",
    "clientPhone": "Guest phone",
    "clientRoom": "Guest room",
    "clientReservation": "Guest reservation",
    "bookingAmount": "Booking amount",
    "bookingOrigin": "Booking origin",
    "clientArrivalDate": "Guest arrival date",
    "clientDepartureDate": "Guest departure date",

    # Technical interventions
    "title": "Title",
    "interventionTypeId": "Intervention type",
    "assignedTo": "Assigned to",
    "assignedToType": "Assignment type",
    "startDate": "Start date",
    "endDate": "End date",
    "estimatedCost": "Estimated cost",
    "finalCost": "Final cost",
    "quotes": "Quotes",
    "beforePhotoUrl": "Photo before",
    "afterPhotoUrl": "Photo after",

    # Lost items
    "discoveryDate": "Discovery date",
    "discoveryTime": "Discovery time",
    "itemTypeId": "Item type",
    "foundById": "Found by",
    "storageLocation": "Storage location",
    "returnedById": "Returned by",
    "returnedDate": "Returned on",
    "returnedNotes": "Return notes",
}

# Reference fields whose names do not end in "Id"
ID_FIELDS = {"assignedTo", "createdBy", "updatedBy", "concludedBy"}


@dataclass
class FormattedChange:
    field: Optional[str]
    label: str
    old: str
    new: str


@dataclass
class FormattedEntry:
    id: Optional[str]
    operation: str
    operation_label: str
    actor: str
    timestamp: str
    changes: List[FormattedChange] = field(default_factory=list)
    message: Optional[str] = None
    raw_changes: Optional[str] = None
    malformed: bool = False


def _display_zone():
    try:
        return pytz.timezone(settings.DISPLAY_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def field_label(field_name: Optional[str], position: int = 0) -> str:
    if not field_name:
        return f"Change {position + 1}"
    return FIELD_LABELS.get(field_name, field_name)


def is_id_field(field_name: Optional[str]) -> bool:
    if not field_name:
        return False
    return field_name.endswith("Id") or field_name in ID_FIELDS


def format_timestamp(value: Any) -> str:
    if value is None:
        return NOT_SET
    moment = coerce_datetime(value)
    if moment is None:
        return str(value)
    return moment.astimezone(_display_zone()).strftime(DATE_FORMAT)


def shorten_id(value: str) -> str:
    if len(value) <= 8:
        return f"ID: {value}"
    return f"ID: {value[:8]}..."


def preview_object(value: Any) -> str:
    try:
        text = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return COMPLEX_OBJECT
    if len(text) > OBJECT_PREVIEW_CHARS:
        return f"{text[:OBJECT_PREVIEW_CHARS - 3]}..."
    return text


def format_value(field_name: Optional[str], value: Any, display_names: Optional[Mapping[str, str]] = None) -> str:
    if value is None:
        return NOT_SET

    if is_date_field(field_name) or is_timestamp_dict(value):
        return format_timestamp(value)

    if isinstance(value, bool):
        return "Yes" if value else "No"

    if is_id_field(field_name) and isinstance(value, str):
        if display_names and value in display_names:
            return display_names[value]
        return shorten_id(value)

    if isinstance(value, (list, tuple)):
        return f"{len(value)} item(s)"

    if isinstance(value, Mapping):
        return preview_object(value)

    if hasattr(value, "isoformat"):
        return format_timestamp(value)

    return str(value)


def _legacy_rows(payload: LegacyPayload, display_names) -> List[FormattedChange]:
    previous = payload.previous_state or {}
    new = payload.new_state or {}
    return [
        FormattedChange(
            field=name,
            label=field_label(name),
            old=format_value(name, previous.get(name), display_names),
            new=format_value(name, new.get(name), display_names),
        )
        for name in payload.changed_fields
    ]


def _change_rows(payload: ChangesPayload, display_names) -> List[FormattedChange]:
    return [
        FormattedChange(
            field=change.field,
            label=field_label(change.field, position),
            old=format_value(change.field or "", change.old, display_names),
            new=format_value(change.field or "", change.new, display_names),
        )
        for position, change in enumerate(payload.changes or [])
    ]


def _fill_body(result: FormattedEntry, entry: HistoryEntry, display_names):
    payload = entry.payload

    if isinstance(payload, MalformedPayload):
        raise MalformedHistoryRecord(entry.id, payload.reason)

    if isinstance(payload, ChangesPayload):
        if payload.changes is not None:
            result.changes = _change_rows(payload, display_names)
        else:
            result.message = "Changes:"
            result.raw_changes = json.dumps(payload.opaque, indent=2, ensure_ascii=False, default=str)
        return

    result.changes = _legacy_rows(payload, display_names)
    if entry.operation == "create":
        result.message = "Created with its initial values."
        if entry.record_type:
            result.message += f" Type: {entry.record_type}"
    elif entry.operation == "delete":
        result.message = "Item deleted."
    elif not result.changes:
        result.message = "No field changed."


def format_entry(
    entry: Union[HistoryEntry, Mapping[str, Any]],
    display_names: Optional[Mapping[str, str]] = None,
) -> FormattedEntry:
    """
    Header (operation, actor, date) plus one row per changed field.

    ``display_names`` maps raw ids to names the caller already resolved;
    any other id-like value is shortened.
    """
    if not isinstance(entry, HistoryEntry):
        entry = normalize_record(entry)

    operation = entry.operation or "update"
    result = FormattedEntry(
        id=entry.id,
        operation=operation,
        operation_label=OPERATION_LABELS.get(operation, "Action"),
        actor=entry.user_name or unknown_user_label(entry.user_id),
        timestamp=format_timestamp(entry.timestamp) if entry.timestamp else UNKNOWN_DATE,
    )

    try:
        _fill_body(result, entry, display_names or {})
    except MalformedHistoryRecord as e:
        logger.warning(str(e))
        result.changes = []
        result.message = DETAILS_UNAVAILABLE
        result.malformed = True
    except Exception as e:
        # A bad value must not take the whole change log down
        logger.warning(f"Could not format history entry {entry.id}: {e}", exc_info=True)
        result.changes = []
        result.message = DETAILS_UNAVAILABLE
        result.malformed = True

    return result


def format_entries(entries: List[HistoryEntry], display_names: Optional[Mapping[str, str]] = None) -> List[FormattedEntry]:
    return [format_entry(entry, display_names) for entry in entries]
