# core/timeutils.py

from datetime import date, datetime, timezone
from typing import Any, Optional


def is_timestamp_dict(value: Any) -> bool:
    """Serialized document-store timestamps look like {"seconds": .., "nanoseconds": ..}."""
    return (
        isinstance(value, dict)
        and "seconds" in value
        and "nanoseconds" in value
        and isinstance(value["seconds"], (int, float))
    )


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a stored date value to an aware UTC datetime.
    Returns None for anything that is not date-like.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if is_timestamp_dict(value):
        seconds = value["seconds"] + (value.get("nanoseconds") or 0) / 1e9
        return datetime.fromtimestamp(seconds, tz=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)

    return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


DATE_FIELD_NAMES = {"date", "createdAt", "updatedAt", "resolvedAt", "timestamp"}


def is_date_field(field_name: Optional[str]) -> bool:
    if not field_name:
        return False
    return field_name in DATE_FIELD_NAMES or "Date" in field_name
