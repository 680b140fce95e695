# -------------------------
# Enums
# -------------------------
from .enums import (
    EntityType,
    IncidentStatus,
    InterventionStatus,
    LostItemStatus,
    Operation,
    Priority,
    UserRole,
)

# -------------------------
# Users
# -------------------------
from .user import AccessibleHotelsRead, User

# -------------------------
# Incidents
# -------------------------
from .incident import (
    IncidentBase,
    IncidentCreate,
    IncidentRead,
    IncidentStats,
    IncidentUpdate,
)

# -------------------------
# Technical interventions
# -------------------------
from .intervention import (
    InterventionBase,
    InterventionCreate,
    InterventionRead,
    InterventionStats,
    InterventionUpdate,
    Quote,
)

# -------------------------
# Lost items
# -------------------------
from .lost_item import (
    LostItemBase,
    LostItemCreate,
    LostItemRead,
    LostItemReturn,
    LostItemStats,
    LostItemUpdate,
)

# -------------------------
# History / results
# -------------------------
from .history import HistoryChangeRead, HistoryEntryRead
from .common import MutationResult

__all__ = [
    # enums
    "EntityType",
    "IncidentStatus",
    "InterventionStatus",
    "LostItemStatus",
    "Operation",
    "Priority",
    "UserRole",

    # users
    "AccessibleHotelsRead",
    "User",

    # incidents
    "IncidentBase",
    "IncidentCreate",
    "IncidentRead",
    "IncidentStats",
    "IncidentUpdate",

    # interventions
    "InterventionBase",
    "InterventionCreate",
    "InterventionRead",
    "InterventionStats",
    "InterventionUpdate",
    "Quote",

    # lost items
    "LostItemBase",
    "LostItemCreate",
    "LostItemRead",
    "LostItemReturn",
    "LostItemStats",
    "LostItemUpdate",

    # history
    "HistoryChangeRead",
    "HistoryEntryRead",
    "MutationResult",
]
