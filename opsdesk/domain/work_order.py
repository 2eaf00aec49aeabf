"""Maintenance work order domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class WorkOrderPriority(StrEnum):
    """How urgently a work order needs attention."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class WorkOrderCategory(StrEnum):
    """Trade responsible for the work."""

    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    HVAC = "hvac"
    STRUCTURAL = "structural"
    APPLIANCE = "appliance"
    GENERAL = "general"


class WorkOrderStatus(StrEnum):
    """Work order lifecycle state."""

    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PENDING_PARTS = "pending_parts"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class WorkOrderAction(StrEnum):
    """Lifecycle operations that change a work order's status."""

    ASSIGN = "assign"
    UNASSIGN = "unassign"
    START = "start"
    SET_PENDING_PARTS = "set_pending_parts"
    COMPLETE = "complete"
    CANCEL = "cancel"
    REOPEN = "reopen"


CLOSED_WORK_ORDER_STATUSES = frozenset({WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED})


class WorkOrder(BaseModel):
    """Work order data transfer object."""

    id: str = Field(..., description="Unique work order ID (UUID)")
    title: str = Field(..., description="Short summary (e.g., 'Leaking faucet in 204')")
    description: str = Field(..., description="Detailed description of the fault")
    category: WorkOrderCategory = Field(..., description="Trade category")
    priority: WorkOrderPriority = Field(..., description="Priority level")
    status: WorkOrderStatus = Field(default=WorkOrderStatus.OPEN, description="Current lifecycle state")
    location_id: str = Field(..., description="ID of the room or area the work is in")
    location_type: str = Field(..., description="Kind of location (e.g., 'room', 'pool')")
    reported_by: str = Field(..., description="User ID of the reporter")
    assigned_to: str | None = Field(default=None, description="User ID of the assigned technician")
    scheduled_date: datetime | None = Field(default=None, description="When the work is planned")
    started_at: datetime | None = Field(default=None, description="When work first started")
    completed_at: datetime | None = Field(default=None, description="When work was completed")
    estimated_hours: float | None = Field(default=None, description="Estimated effort in hours")
    actual_hours: float | None = Field(default=None, description="Actual effort recorded at completion")
    labor_cost: float | None = Field(default=None, description="Labor cost recorded at completion")
    parts_cost: float | None = Field(default=None, description="Sum of part costs frozen at completion")
    notes: str | None = Field(default=None, description="Append-only notes log")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
    version: int = Field(default=1, description="Optimistic lock counter, incremented on every write")


class CostLine(BaseModel):
    """Part used on a work order. total_cost is fixed when the line is recorded."""

    id: str = Field(..., description="Unique cost line ID (UUID)")
    task_id: str = Field(..., description="ID of the parent work order")
    name: str = Field(..., description="Part name (e.g., 'Faucet cartridge')")
    code: str | None = Field(default=None, description="Manufacturer part number")
    quantity: int = Field(..., description="Number of units used")
    unit_cost: float = Field(..., description="Cost per unit")
    total_cost: float = Field(..., description="quantity * unit_cost")
    created_at: datetime = Field(..., description="Creation timestamp")


class WorkOrderFilters(BaseModel):
    """Optional equality constraints for listing work orders (all are ANDed)."""

    status: WorkOrderStatus | None = None
    priority: WorkOrderPriority | None = None
    category: WorkOrderCategory | None = None
    assigned_to: str | None = None
    location_id: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None
