"""Repository contracts consumed by the lifecycle services.

Repositories own identifier generation, persistence atomicity and the
optimistic version check. Services only call them.
"""

from typing import Any, Protocol

from opsdesk.domain.housekeeping import CleaningSupply, HousekeepingFilters, RoomCleaningTask
from opsdesk.domain.work_order import CostLine, WorkOrder, WorkOrderFilters


class RecordStore(Protocol):
    """Generic collection-oriented record store (implemented by opsdesk.core.db_client)."""

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]: ...

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]: ...

    async def update_record(
        self,
        *,
        collection: str,
        record_id: str,
        data: dict[str, Any],
        expected_version: int | None = None,
    ) -> dict[str, Any]: ...

    async def delete_record(self, *, collection: str, record_id: str) -> None: ...

    async def list_all_records(
        self, *, collection: str, filter_query: str = "", sort: str = ""
    ) -> list[dict[str, Any]]: ...

    async def get_first_record(
        self, *, collection: str, filter_query: str, sort: str = ""
    ) -> dict[str, Any] | None: ...


class WorkOrderRepository(Protocol):
    """Persistence for work orders and their cost lines."""

    async def get_by_id(self, work_order_id: str) -> WorkOrder | None:
        """Return the work order, or None if it does not exist."""
        ...

    async def create(self, data: dict[str, Any]) -> WorkOrder:
        """Persist a new work order and return it with its generated ID."""
        ...

    async def update(
        self,
        work_order_id: str,
        data: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> WorkOrder:
        """Apply a partial update; fails if expected_version no longer matches."""
        ...

    async def delete(self, work_order_id: str) -> None:
        """Delete the work order together with its cost lines."""
        ...

    async def list_work_orders(self, filters: WorkOrderFilters | None = None) -> list[WorkOrder]:
        """Return every work order matching all given filters (unpaginated)."""
        ...

    async def add_cost_line(self, data: dict[str, Any]) -> CostLine:
        """Persist a cost line."""
        ...

    async def list_cost_lines(self, work_order_id: str) -> list[CostLine]:
        """Return the cost lines currently attached to a work order."""
        ...

    async def remove_cost_line(self, line_id: str) -> bool:
        """Delete a cost line. Returns False if it does not exist."""
        ...


class HousekeepingRepository(Protocol):
    """Persistence for room cleaning tasks and cleaning supplies."""

    async def get_by_id(self, task_id: str) -> RoomCleaningTask | None:
        """Return the task, or None if it does not exist."""
        ...

    async def get_by_room_id(self, room_id: str) -> RoomCleaningTask | None:
        """Return the most recently created task for a room, or None."""
        ...

    async def create(self, data: dict[str, Any]) -> RoomCleaningTask:
        """Persist a new task and return it with its generated ID."""
        ...

    async def update(
        self,
        task_id: str,
        data: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> RoomCleaningTask:
        """Apply a partial update; fails if expected_version no longer matches."""
        ...

    async def delete(self, task_id: str) -> None:
        """Delete the task."""
        ...

    async def list_tasks(self, filters: HousekeepingFilters | None = None) -> list[RoomCleaningTask]:
        """Return every task matching all given filters (unpaginated)."""
        ...

    async def get_supply(self, supply_id: str) -> CleaningSupply | None:
        """Return the supply, or None if it does not exist."""
        ...

    async def create_supply(self, data: dict[str, Any]) -> CleaningSupply:
        """Persist a new supply."""
        ...

    async def update_supply(
        self,
        supply_id: str,
        data: dict[str, Any],
        *,
        expected_version: int | None = None,
    ) -> CleaningSupply:
        """Apply a partial update to a supply."""
        ...

    async def delete_supply(self, supply_id: str) -> None:
        """Delete the supply."""
        ...

    async def list_supplies(self) -> list[CleaningSupply]:
        """Return every supply ordered by name."""
        ...
