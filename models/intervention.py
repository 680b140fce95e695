# models/intervention.py

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from .base import CamelModel
from .enums import InterventionStatus, Priority


class Quote(CamelModel):
    id: Optional[str] = None
    supplier: Optional[str] = None
    amount: float = 0
    discount: float = 0
    status: str = "pending"
    file_url: Optional[str] = None


# -------------------------------------------------
# Shared Fields
# -------------------------------------------------
class InterventionBase(CamelModel):
    hotel_id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    date: datetime

    status_id: InterventionStatus = InterventionStatus.pending
    priority: Priority = Priority.medium
    intervention_type_id: Optional[str] = None

    assigned_to: Optional[str] = None
    assigned_to_type: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    estimated_cost: Optional[float] = None
    final_cost: Optional[float] = None
    has_quote: bool = False
    quotes: List[Quote] = Field(default_factory=list)

    # Blob URLs are opaque here
    before_photo_url: Optional[str] = None
    after_photo_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date", "start_date", "end_date", mode="before")
    def parse_dates(cls, v):
        if isinstance(v, str) and v.endswith("Z"):
            return v.replace("Z", "+00:00")
        return v


class InterventionCreate(InterventionBase):
    pass


class InterventionRead(InterventionBase):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @field_validator("id", mode="before")
    def id_to_str(cls, v):
        return str(v)


class InterventionUpdate(CamelModel):
    hotel_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    date: Optional[datetime] = None

    status_id: Optional[InterventionStatus] = None
    priority: Optional[Priority] = None
    intervention_type_id: Optional[str] = None

    assigned_to: Optional[str] = None
    assigned_to_type: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    estimated_cost: Optional[float] = None
    final_cost: Optional[float] = None
    has_quote: Optional[bool] = None
    quotes: Optional[List[Quote]] = None

    before_photo_url: Optional[str] = None
    after_photo_url: Optional[str] = None
    notes: Optional[str] = None


class InterventionStats(CamelModel):
    total: int
    pending: int
    in_progress: int
    completed: int
    average_completion_time: float
    total_estimated_cost: float
    total_final_cost: float
