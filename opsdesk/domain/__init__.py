"""Domain models and DTOs."""

from opsdesk.domain.housekeeping import (
    CleaningPriority,
    CleaningSupply,
    HousekeepingFilters,
    RoomCleaningTask,
    RoomStatus,
    RoomTaskAction,
)
from opsdesk.domain.work_order import (
    CostLine,
    WorkOrder,
    WorkOrderAction,
    WorkOrderCategory,
    WorkOrderFilters,
    WorkOrderPriority,
    WorkOrderStatus,
)


__all__ = [
    "CleaningPriority",
    "CleaningSupply",
    "CostLine",
    "HousekeepingFilters",
    "RoomCleaningTask",
    "RoomStatus",
    "RoomTaskAction",
    "WorkOrder",
    "WorkOrderAction",
    "WorkOrderCategory",
    "WorkOrderFilters",
    "WorkOrderPriority",
    "WorkOrderStatus",
]
