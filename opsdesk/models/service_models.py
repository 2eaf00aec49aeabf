"""Pydantic models for service layer return types.

These models provide type safety at service boundaries for aggregated
results that do not map to a single stored record.
"""

from pydantic import BaseModel

from opsdesk.domain.housekeeping import CleaningPriority, RoomStatus
from opsdesk.domain.work_order import WorkOrderCategory, WorkOrderPriority, WorkOrderStatus


class MaintenanceStats(BaseModel):
    """Work order statistics from a full scan of the collection."""

    total_tasks: int
    by_status: dict[WorkOrderStatus, int]
    by_priority: dict[WorkOrderPriority, int]
    by_category: dict[WorkOrderCategory, int]
    avg_completion_hours: float
    total_labor_cost: float
    total_parts_cost: float


class HousekeepingStats(BaseModel):
    """Cleaning task statistics from a full scan of the collection."""

    total_tasks: int
    by_status: dict[RoomStatus, int]
    by_priority: dict[CleaningPriority, int]
    by_floor: dict[int, int]
    avg_cleaning_time_minutes: float
    low_supplies_count: int
