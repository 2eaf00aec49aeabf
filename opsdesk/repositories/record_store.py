"""Repositories backed by a generic record store (SQLite db_client by default)."""

from typing import Any

from pydantic import BaseModel

from opsdesk.core import db_client
from opsdesk.core.db_client import RecordNotFoundError, sanitize_param
from opsdesk.domain.housekeeping import CleaningSupply, HousekeepingFilters, RoomCleaningTask
from opsdesk.domain.work_order import CostLine, WorkOrder, WorkOrderFilters
from opsdesk.repositories.protocols import RecordStore


WORK_ORDERS = "work_orders"
WORK_ORDER_PARTS = "work_order_parts"
ROOM_CLEANING_TASKS = "room_cleaning_tasks"
CLEANING_SUPPLIES = "cleaning_supplies"

_RANGE_FIELDS = {"created_from": ("created_at", ">="), "created_to": ("created_at", "<=")}


def build_filter_query(filters: BaseModel | None) -> str:
    """Translate a filters model into the store's filter syntax (all conditions ANDed)."""
    if filters is None:
        return ""

    conditions = []
    for name, value in filters.model_dump(exclude_none=True).items():
        if name in _RANGE_FIELDS:
            column, op = _RANGE_FIELDS[name]
            conditions.append(f'{column} {op} "{sanitize_param(value.isoformat())}"')
        else:
            conditions.append(f'{name} = "{sanitize_param(value)}"')
    return " && ".join(conditions)


class RecordWorkOrderRepository:
    """WorkOrderRepository over a RecordStore."""

    def __init__(self, store: RecordStore = db_client) -> None:  # type: ignore[assignment]
        self._store = store

    async def get_by_id(self, work_order_id: str) -> WorkOrder | None:
        try:
            record = await self._store.get_record(collection=WORK_ORDERS, record_id=work_order_id)
        except RecordNotFoundError:
            return None
        return WorkOrder.model_validate(record)

    async def create(self, data: dict[str, Any]) -> WorkOrder:
        record = await self._store.create_record(collection=WORK_ORDERS, data=data)
        return WorkOrder.model_validate(record)

    async def update(
        self,
        work_order_id: str,
        data: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> WorkOrder:
        record = await self._store.update_record(
            collection=WORK_ORDERS,
            record_id=work_order_id,
            data=data,
            expected_version=expected_version,
        )
        return WorkOrder.model_validate(record)

    async def delete(self, work_order_id: str) -> None:
        for line in await self.list_cost_lines(work_order_id):
            await self._store.delete_record(collection=WORK_ORDER_PARTS, record_id=line.id)
        await self._store.delete_record(collection=WORK_ORDERS, record_id=work_order_id)

    async def list_work_orders(self, filters: WorkOrderFilters | None = None) -> list[WorkOrder]:
        records = await self._store.list_all_records(
            collection=WORK_ORDERS,
            filter_query=build_filter_query(filters),
            sort="+created_at",
        )
        return [WorkOrder.model_validate(record) for record in records]

    async def add_cost_line(self, data: dict[str, Any]) -> CostLine:
        record = await self._store.create_record(collection=WORK_ORDER_PARTS, data=data)
        return CostLine.model_validate(record)

    async def list_cost_lines(self, work_order_id: str) -> list[CostLine]:
        records = await self._store.list_all_records(
            collection=WORK_ORDER_PARTS,
            filter_query=f'task_id = "{sanitize_param(work_order_id)}"',
            sort="+created_at",
        )
        return [CostLine.model_validate(record) for record in records]

    async def remove_cost_line(self, line_id: str) -> bool:
        try:
            await self._store.delete_record(collection=WORK_ORDER_PARTS, record_id=line_id)
        except RecordNotFoundError:
            return False
        return True


class RecordHousekeepingRepository:
    """HousekeepingRepository over a RecordStore."""

    def __init__(self, store: RecordStore = db_client) -> None:  # type: ignore[assignment]
        self._store = store

    async def get_by_id(self, task_id: str) -> RoomCleaningTask | None:
        try:
            record = await self._store.get_record(collection=ROOM_CLEANING_TASKS, record_id=task_id)
        except RecordNotFoundError:
            return None
        return RoomCleaningTask.model_validate(record)

    async def get_by_room_id(self, room_id: str) -> RoomCleaningTask | None:
        record = await self._store.get_first_record(
            collection=ROOM_CLEANING_TASKS,
            filter_query=f'room_id = "{sanitize_param(room_id)}"',
            sort="-created_at",
        )
        return RoomCleaningTask.model_validate(record) if record else None

    async def create(self, data: dict[str, Any]) -> RoomCleaningTask:
        record = await self._store.create_record(collection=ROOM_CLEANING_TASKS, data=data)
        return RoomCleaningTask.model_validate(record)

    async def update(
        self,
        task_id: str,
        data: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> RoomCleaningTask:
        record = await self._store.update_record(
            collection=ROOM_CLEANING_TASKS,
            record_id=task_id,
            data=data,
            expected_version=expected_version,
        )
        return RoomCleaningTask.model_validate(record)

    async def delete(self, task_id: str) -> None:
        await self._store.delete_record(collection=ROOM_CLEANING_TASKS, record_id=task_id)

    async def list_tasks(self, filters: HousekeepingFilters | None = None) -> list[RoomCleaningTask]:
        records = await self._store.list_all_records(
            collection=ROOM_CLEANING_TASKS,
            filter_query=build_filter_query(filters),
            sort="+created_at",
        )
        return [RoomCleaningTask.model_validate(record) for record in records]

    async def get_supply(self, supply_id: str) -> CleaningSupply | None:
        try:
            record = await self._store.get_record(collection=CLEANING_SUPPLIES, record_id=supply_id)
        except RecordNotFoundError:
            return None
        return CleaningSupply.model_validate(record)

    async def create_supply(self, data: dict[str, Any]) -> CleaningSupply:
        record = await self._store.create_record(collection=CLEANING_SUPPLIES, data=data)
        return CleaningSupply.model_validate(record)

    async def update_supply(
        self,
        supply_id: str,
        data: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> CleaningSupply:
        record = await self._store.update_record(
            collection=CLEANING_SUPPLIES,
            record_id=supply_id,
            data=data,
            expected_version=expected_version,
        )
        return CleaningSupply.model_validate(record)

    async def delete_supply(self, supply_id: str) -> None:
        await self._store.delete_record(collection=CLEANING_SUPPLIES, record_id=supply_id)

    async def list_supplies(self) -> list[CleaningSupply]:
        records = await self._store.list_all_records(collection=CLEANING_SUPPLIES, sort="+name")
        return [CleaningSupply.model_validate(record) for record in records]
