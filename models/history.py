# models/history.py

from typing import List, Optional

from pydantic import BaseModel


class HistoryChangeRead(BaseModel):
    field: Optional[str] = None
    label: str
    old: str
    new: str


class HistoryEntryRead(BaseModel):
    """One formatted change-log entry, ready for display."""

    id: Optional[str] = None
    operation: str
    operation_label: str
    actor: str
    timestamp: str
    changes: List[HistoryChangeRead] = []
    message: Optional[str] = None
    raw_changes: Optional[str] = None
    malformed: bool = False
