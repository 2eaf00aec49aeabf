"""Housekeeping domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class RoomStatus(StrEnum):
    """Room cleaning task lifecycle state."""

    DIRTY = "dirty"
    IN_PROGRESS = "in_progress"
    CLEAN = "clean"
    INSPECTED = "inspected"
    OUT_OF_ORDER = "out_of_order"


class CleaningPriority(StrEnum):
    """How soon the room must be turned around."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RoomTaskAction(StrEnum):
    """Lifecycle operations on a room cleaning task."""

    ASSIGN = "assign"
    UNASSIGN = "unassign"
    START = "start"
    COMPLETE = "complete"
    INSPECT_PASS = "inspect_pass"
    INSPECT_FAIL = "inspect_fail"
    MARK_DIRTY = "mark_dirty"
    MARK_OUT_OF_ORDER = "mark_out_of_order"


# A room in one of these states has no outstanding cleaning work
SETTLED_ROOM_STATUSES = frozenset({RoomStatus.CLEAN, RoomStatus.INSPECTED})


class RoomCleaningTask(BaseModel):
    """Room cleaning task data transfer object."""

    id: str = Field(..., description="Unique task ID (UUID)")
    room_id: str = Field(..., description="ID of the room to clean")
    room_number: str = Field(..., description="Room number shown to staff (e.g., '204')")
    floor: int = Field(..., description="Floor the room is on")
    status: RoomStatus = Field(default=RoomStatus.DIRTY, description="Current lifecycle state")
    priority: CleaningPriority = Field(default=CleaningPriority.MEDIUM, description="Priority level")
    assigned_to: str | None = Field(default=None, description="User ID of the assigned housekeeper")
    checkout_date: datetime | None = Field(default=None, description="Guest checkout time")
    checkin_date: datetime | None = Field(default=None, description="Next guest check-in time")
    notes: str | None = Field(default=None, description="Append-only notes log")
    started_at: datetime | None = Field(default=None, description="When cleaning started")
    completed_at: datetime | None = Field(default=None, description="When cleaning finished")
    inspected_by: str | None = Field(default=None, description="User ID of the inspector")
    inspected_at: datetime | None = Field(default=None, description="When the room was inspected")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
    version: int = Field(default=1, description="Optimistic lock counter, incremented on every write")


class CleaningSupply(BaseModel):
    """Stocked cleaning supply."""

    id: str = Field(..., description="Unique supply ID (UUID)")
    name: str = Field(..., description="Supply name (e.g., 'Glass cleaner')")
    quantity: int = Field(..., description="Units currently in stock")
    min_quantity: int = Field(..., description="Restock threshold")
    unit: str = Field(..., description="Unit of measure (e.g., 'bottle')")
    last_restocked: datetime | None = Field(default=None, description="When stock was last added")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
    version: int = Field(default=1, description="Optimistic lock counter, incremented on every write")

    @property
    def is_low(self) -> bool:
        """True when stock is below the restock threshold."""
        return self.quantity < self.min_quantity


class HousekeepingFilters(BaseModel):
    """Optional equality constraints for listing cleaning tasks (all are ANDed)."""

    status: RoomStatus | None = None
    priority: CleaningPriority | None = None
    floor: int | None = None
    assigned_to: str | None = None
    room_id: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
