# models/incident.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from .base import CamelModel
from .enums import IncidentStatus, Priority


def _parse_z(v):
    if isinstance(v, str) and v.endswith("Z"):
        return v.replace("Z", "+00:00")
    return v


# -------------------------------------------------
# Shared Fields
# -------------------------------------------------
class IncidentBase(CamelModel):
    hotel_id: str
    date: datetime
    time: Optional[str] = None

    category_id: Optional[str] = None
    impact_id: Optional[str] = None
    description: str
    location: Optional[str] = None

    status_id: IncidentStatus = IncidentStatus.open
    priority: Priority = Priority.medium
    received_by_id: Optional[str] = None
    assigned_to: Optional[str] = None

    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_room: Optional[str] = None
    client_reservation: Optional[str] = None
    client_arrival_date: Optional[datetime] = None
    client_departure_date: Optional[datetime] = None
    booking_amount: Optional[float] = None
    booking_origin: Optional[str] = None

    resolution_description: Optional[str] = None
    resolution_type: Optional[str] = None
    client_satisfaction_id: Optional[str] = None
    commercial_gesture: Optional[float] = None

    photo_url: Optional[str] = Field(None, alias="photoURL")
    attachments: List[str] = Field(default_factory=list)

    @field_validator("date", "client_arrival_date", "client_departure_date", mode="before")
    def parse_dates(cls, v):
        return _parse_z(v)


# -------------------------------------------------
# Create Incident
# -------------------------------------------------
class IncidentCreate(IncidentBase):
    """
    Client sends this when creating an incident.
    The store generates the id; the backend sets audit fields.
    """
    pass


# -------------------------------------------------
# Read Incident
# -------------------------------------------------
class IncidentRead(IncidentBase):
    id: str
    location_id: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @field_validator("id", mode="before")
    def id_to_str(cls, v):
        return str(v)


# -------------------------------------------------
# Update Incident (partial)
# -------------------------------------------------
class IncidentUpdate(CamelModel):
    hotel_id: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None

    category_id: Optional[str] = None
    impact_id: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    location_id: Optional[str] = None

    status_id: Optional[IncidentStatus] = None
    priority: Optional[Priority] = None
    received_by_id: Optional[str] = None
    assigned_to: Optional[str] = None

    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_room: Optional[str] = None
    client_reservation: Optional[str] = None
    client_arrival_date: Optional[datetime] = None
    client_departure_date: Optional[datetime] = None
    booking_amount: Optional[float] = None
    booking_origin: Optional[str] = None

    resolution_description: Optional[str] = None
    resolution_type: Optional[str] = None
    client_satisfaction_id: Optional[str] = None
    commercial_gesture: Optional[float] = None

    photo_url: Optional[str] = Field(None, alias="photoURL")
    attachments: Optional[List[str]] = None

    @field_validator("date", "client_arrival_date", "client_departure_date", mode="before")
    def parse_update_dates(cls, v):
        return _parse_z(v)


class IncidentStats(CamelModel):
    total: int
    open: int
    in_progress: int
    resolved: int
    closed: int
    average_resolution_time: float
    satisfaction_score: float
