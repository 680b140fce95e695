# models/user.py

from typing import List, Optional

from pydantic import Field, field_validator

from .base import CamelModel
from .enums import UserRole


class User(CamelModel):
    """
    A back-office account as stored in the ``users`` collection.
    Provisioned by administrators; read-only here.
    """

    id: str
    email: str
    role: UserRole = UserRole.standard
    hotels: List[str] = Field(default_factory=list)

    name: Optional[str] = None
    display_name: Optional[str] = None

    @field_validator("id", mode="before")
    def id_to_str(cls, v):
        return str(v)

    @field_validator("email", mode="before")
    def normalize_email(cls, v):
        return str(v).strip().lower() if v else v

    @field_validator("role", mode="before")
    def unknown_role_is_standard(cls, v):
        # Anything other than a system admin gets the restricted path
        return v if v in UserRole.list() else UserRole.standard.value

    @field_validator("hotels", mode="before")
    def clean_hotels(cls, v):
        if not isinstance(v, list):
            return []
        seen = []
        for hotel_id in v:
            if hotel_id and str(hotel_id) not in seen:
                seen.append(str(hotel_id))
        return seen

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.system_admin.value


class AccessibleHotelsRead(CamelModel):
    all_hotels: bool
    hotels: List[str]
