from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# USER ROLE
# -----------------------------------------------------
class UserRole(BaseStrEnum):
    """system_admin sees every hotel regardless of its explicit list."""

    standard = "standard"
    system_admin = "system_admin"


# -----------------------------------------------------
# HISTORY
# -----------------------------------------------------
class Operation(BaseStrEnum):
    create = "create"
    update = "update"
    delete = "delete"


class EntityType(BaseStrEnum):
    incident = "incident"
    technical_intervention = "technical_intervention"
    lost_item = "lost_item"


# -----------------------------------------------------
# INCIDENT STATUS
# -----------------------------------------------------
class IncidentStatus(BaseStrEnum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"


# -----------------------------------------------------
# INTERVENTION STATUS
# -----------------------------------------------------
class InterventionStatus(BaseStrEnum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


# -----------------------------------------------------
# LOST ITEM STATUS
# -----------------------------------------------------
class LostItemStatus(BaseStrEnum):
    conserved = "conserved"
    returned = "returned"


# -----------------------------------------------------
# PRIORITY
# -----------------------------------------------------
class Priority(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"
