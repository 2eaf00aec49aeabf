"""Repository contracts and implementations."""

from opsdesk.repositories.protocols import HousekeepingRepository, RecordStore, WorkOrderRepository
from opsdesk.repositories.record_store import RecordHousekeepingRepository, RecordWorkOrderRepository


__all__ = [
    "HousekeepingRepository",
    "RecordHousekeepingRepository",
    "RecordStore",
    "RecordWorkOrderRepository",
    "WorkOrderRepository",
]
