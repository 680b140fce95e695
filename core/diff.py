# core/diff.py

"""
Field-level change detection between two entity snapshots.

Snapshots are loosely typed mappings. Values are normalized into tagged
tuples before comparison so that nested containers compare by value, a
stored timestamp equals the datetime it came from, and ``True`` is never
equal to ``1``.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from core.timeutils import coerce_datetime, is_date_field, is_timestamp_dict


ID_FIELD = "id"


def normalize_value(value: Any, field_name: Optional[str] = None) -> Tuple:
    if value is None:
        return ("null",)

    if isinstance(value, Enum):
        return normalize_value(value.value, field_name)

    if isinstance(value, bool):
        return ("bool", value)

    if isinstance(value, (int, float)):
        return ("num", value)

    if isinstance(value, (datetime, date)) or is_timestamp_dict(value):
        return ("date", coerce_datetime(value))

    if isinstance(value, str):
        if is_date_field(field_name):
            moment = coerce_datetime(value)
            if moment is not None:
                return ("date", moment)
        return ("str", value)

    if isinstance(value, Mapping):
        items = sorted(
            ((str(key), normalize_value(item, str(key))) for key, item in value.items()),
            key=lambda pair: pair[0],
        )
        return ("map", tuple(items))

    if isinstance(value, (list, tuple)):
        return ("list", tuple(normalize_value(item) for item in value))

    if isinstance(value, (set, frozenset)):
        return ("list", tuple(sorted((normalize_value(item) for item in value), key=repr)))

    return ("other", repr(value))


def values_equal(left: Any, right: Any, field_name: Optional[str] = None) -> bool:
    """Structural equality of two snapshot values."""
    return normalize_value(left, field_name) == normalize_value(right, field_name)


def diff(previous: Optional[Mapping[str, Any]], next_state: Optional[Mapping[str, Any]]) -> List[str]:
    """
    Names of the fields that differ between two snapshots, ``id`` excluded.

    An empty previous snapshot reports every field of the next one (a
    creation); an empty next snapshot reports every field of the previous
    one (a deletion). Fields of ``next_state`` come first in their own
    order, followed by fields that only exist in ``previous``.
    """
    previous = previous or {}
    next_state = next_state or {}

    if not previous:
        return [key for key in next_state if key != ID_FIELD]

    if not next_state:
        return [key for key in previous if key != ID_FIELD]

    changed = []
    for key, value in next_state.items():
        if key == ID_FIELD:
            continue
        if key not in previous or not values_equal(previous[key], value, key):
            changed.append(key)

    for key in previous:
        if key != ID_FIELD and key not in next_state:
            changed.append(key)

    return changed
