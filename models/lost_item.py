# models/lost_item.py

from datetime import datetime
from typing import Dict, Optional

from pydantic import field_validator

from .base import CamelModel
from .enums import LostItemStatus


class LostItemBase(CamelModel):
    hotel_id: str
    discovery_date: datetime
    discovery_time: Optional[str] = None
    location_id: Optional[str] = None
    item_type_id: Optional[str] = None
    description: str
    found_by_id: Optional[str] = None
    storage_location: Optional[str] = None
    status: LostItemStatus = LostItemStatus.conserved
    photo_url: Optional[str] = None

    @field_validator("discovery_date", mode="before")
    def parse_discovery_date(cls, v):
        if isinstance(v, str) and v.endswith("Z"):
            return v.replace("Z", "+00:00")
        return v


class LostItemCreate(LostItemBase):
    pass


class LostItemRead(LostItemBase):
    id: str
    returned_by_id: Optional[str] = None
    returned_date: Optional[datetime] = None
    returned_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @field_validator("id", mode="before")
    def id_to_str(cls, v):
        return str(v)


class LostItemUpdate(CamelModel):
    hotel_id: Optional[str] = None
    discovery_date: Optional[datetime] = None
    discovery_time: Optional[str] = None
    location_id: Optional[str] = None
    item_type_id: Optional[str] = None
    description: Optional[str] = None
    found_by_id: Optional[str] = None
    storage_location: Optional[str] = None
    status: Optional[LostItemStatus] = None
    returned_by_id: Optional[str] = None
    returned_notes: Optional[str] = None
    photo_url: Optional[str] = None


class LostItemReturn(CamelModel):
    returned_by_id: Optional[str] = None
    returned_notes: Optional[str] = None


class LostItemStats(CamelModel):
    total: int
    conserved: int
    returned: int
    return_rate: int
    by_type: Dict[str, int]
    by_hotel: Dict[str, int]
