"""Housekeeping service: room cleaning lifecycle, inspections and supply stock."""

import logging
from datetime import UTC, datetime
from typing import Any

from opsdesk.core.config import Constants
from opsdesk.core.errors import ErrorCode, NotFoundError, StateConflictError
from opsdesk.core.logging import log_with_context, span
from opsdesk.core.validation import (
    validate_enum,
    validate_id,
    validate_non_negative_integer,
    validate_positive_integer,
    validate_required_text,
)
from opsdesk.domain.housekeeping import (
    SETTLED_ROOM_STATUSES,
    CleaningPriority,
    CleaningSupply,
    HousekeepingFilters,
    RoomCleaningTask,
    RoomStatus,
    RoomTaskAction,
)
from opsdesk.domain.lifecycles import ROOM_TASK_LIFECYCLE
from opsdesk.models.service_models import HousekeepingStats
from opsdesk.repositories.protocols import HousekeepingRepository
from opsdesk.services.lifecycle import LifecycleService, append_note


_PENDING_ROOM_STATUSES = frozenset({RoomStatus.DIRTY, RoomStatus.IN_PROGRESS})


def _validate_priority(priority: object) -> None:
    validate_enum(priority, CleaningPriority, ErrorCode.INVALID_PRIORITY, "priority")


class HousekeepingService(LifecycleService[RoomCleaningTask, RoomStatus, RoomTaskAction]):
    """Room cleaning task and cleaning supply operations on top of a HousekeepingRepository."""

    entity_label = "Cleaning task"
    id_field = "task"

    def __init__(self, *, repository: HousekeepingRepository, logger: logging.Logger | None = None) -> None:
        super().__init__(
            store=repository,
            machine=ROOM_TASK_LIFECYCLE,
            logger=logger or logging.getLogger(__name__),
        )
        self._repository = repository

    # Task CRUD

    async def create_task(
        self,
        *,
        room_id: str,
        room_number: str,
        floor: int,
        priority: CleaningPriority | str = CleaningPriority.MEDIUM,
        checkout_date: datetime | None = None,
        checkin_date: datetime | None = None,
        notes: str | None = None,
    ) -> RoomCleaningTask:
        """Open a cleaning task for a room in the dirty state.

        Raises:
            ValidationError: If any field is malformed
            StateConflictError: TASK_ALREADY_EXISTS if the room already has
                outstanding cleaning work
        """
        with span("housekeeping_service.create_task"):
            validate_id(room_id, "room")
            validate_required_text(room_number, ErrorCode.INVALID_ROOM_NUMBER, "Room number")
            validate_non_negative_integer(floor, ErrorCode.INVALID_FLOOR, "Floor")
            _validate_priority(priority)

            existing = await self._repository.get_by_room_id(room_id)
            if existing is not None and existing.status not in SETTLED_ROOM_STATUSES:
                raise StateConflictError(
                    f"Room {existing.room_number} already has a cleaning task",
                    ErrorCode.TASK_ALREADY_EXISTS,
                )

            task = await self._repository.create(
                {
                    "room_id": room_id,
                    "room_number": room_number.strip(),
                    "floor": floor,
                    "status": RoomStatus.DIRTY,
                    "priority": CleaningPriority(priority),
                    "assigned_to": None,
                    "checkout_date": checkout_date,
                    "checkin_date": checkin_date,
                    "notes": (notes.strip() or None) if notes else None,
                    "started_at": None,
                    "completed_at": None,
                    "inspected_by": None,
                    "inspected_at": None,
                }
            )

            self._logger.info("Cleaning task created", extra={"task_id": task.id, "room_id": room_id})
            return task

    async def get_task(self, task_id: str) -> RoomCleaningTask | None:
        """Return the task, or None if it does not exist."""
        validate_id(task_id, self.id_field)
        return await self._repository.get_by_id(task_id)

    async def get_task_by_room(self, room_id: str) -> RoomCleaningTask | None:
        """Return the most recent task for a room, or None."""
        validate_id(room_id, "room")
        return await self._repository.get_by_room_id(room_id)

    async def update_task(
        self,
        task_id: str,
        *,
        priority: CleaningPriority | str | None = None,
        checkout_date: datetime | None = None,
        checkin_date: datetime | None = None,
        notes: str | None = None,
    ) -> RoomCleaningTask:
        """Edit scheduling fields of a task. Arguments left as None are not changed."""
        with span("housekeeping_service.update_task"):
            task = await self._load(task_id)

            changes: dict[str, Any] = {}
            if priority is not None:
                _validate_priority(priority)
                changes["priority"] = CleaningPriority(priority)
            if checkout_date is not None:
                changes["checkout_date"] = checkout_date
            if checkin_date is not None:
                changes["checkin_date"] = checkin_date
            if notes is not None and notes.strip():
                changes["notes"] = append_note(task.notes, notes.strip())

            if not changes:
                return task

            updated = await self._repository.update(task.id, changes, expected_version=task.version)
            self._logger.info("Cleaning task updated", extra={"task_id": task.id, "fields": sorted(changes)})
            return updated

    async def delete_task(self, task_id: str) -> None:
        with span("housekeeping_service.delete_task"):
            task = await self._load(task_id)
            await self._repository.delete(task.id)
            self._logger.info("Cleaning task deleted", extra={"task_id": task.id})

    async def list_tasks(self, filters: HousekeepingFilters | None = None) -> list[RoomCleaningTask]:
        """List tasks matching all given filters."""
        with span("housekeeping_service.list_tasks"):
            return await self._repository.list_tasks(filters)

    # Workflow

    async def assign(self, task_id: str, assigned_to: str) -> RoomCleaningTask:
        """Assign a housekeeper. The room status does not change."""
        with span("housekeeping_service.assign"):
            validate_id(task_id, self.id_field)
            validate_id(assigned_to, "assignee")
            task = await self._load(task_id)
            return await self._apply(task, RoomTaskAction.ASSIGN, {"assigned_to": assigned_to})

    async def unassign(self, task_id: str) -> RoomCleaningTask:
        """Remove the housekeeper. Not allowed while cleaning is under way."""
        with span("housekeeping_service.unassign"):
            task = await self._load(task_id)
            if not task.assigned_to:
                raise StateConflictError("Cleaning task is not assigned", ErrorCode.NOT_ASSIGNED)
            return await self._apply(task, RoomTaskAction.UNASSIGN, {"assigned_to": None})

    async def start(self, task_id: str) -> RoomCleaningTask:
        with span("housekeeping_service.start"):
            task = await self._load(task_id)
            self._machine.ensure_allowed(RoomTaskAction.START, task.status)
            started_at = task.started_at or datetime.now(UTC)
            return await self._apply(task, RoomTaskAction.START, {"started_at": started_at})

    async def complete(self, task_id: str, notes: str | None = None) -> RoomCleaningTask:
        """Finish cleaning; the room becomes clean and waits for inspection."""
        with span("housekeeping_service.complete"):
            task = await self._load(task_id)
            self._machine.ensure_allowed(RoomTaskAction.COMPLETE, task.status)

            changes: dict[str, Any] = {"completed_at": datetime.now(UTC)}
            if notes and notes.strip():
                changes["notes"] = append_note(task.notes, notes.strip())
            return await self._apply(task, RoomTaskAction.COMPLETE, changes)

    async def inspect(
        self,
        task_id: str,
        *,
        inspector_id: str,
        passed: bool,
        notes: str | None = None,
    ) -> RoomCleaningTask:
        """Record an inspection of a clean room.

        A pass moves the room to inspected. A fail sends it back to dirty and
        clears the cleaning timestamps so the next pass is timed from scratch.
        """
        with span("housekeeping_service.inspect"):
            validate_id(task_id, self.id_field)
            validate_id(inspector_id, "inspector")
            task = await self._load(task_id)

            changes: dict[str, Any] = {
                "inspected_by": inspector_id,
                "inspected_at": datetime.now(UTC),
            }
            if passed:
                action = RoomTaskAction.INSPECT_PASS
            else:
                action = RoomTaskAction.INSPECT_FAIL
                changes["started_at"] = None
                changes["completed_at"] = None
            if notes and notes.strip():
                changes["notes"] = append_note(task.notes, notes.strip())

            return await self._apply(task, action, changes)

    async def mark_dirty(self, task_id: str) -> RoomCleaningTask:
        """Send a room back to dirty from any state, clearing cleaning and inspection stamps."""
        with span("housekeeping_service.mark_dirty"):
            task = await self._load(task_id)
            return await self._mark_dirty(task)

    async def mark_room_dirty(self, room_id: str) -> RoomCleaningTask:
        """Mark the latest task of a room dirty (e.g. after guest checkout)."""
        with span("housekeeping_service.mark_room_dirty"):
            validate_id(room_id, "room")
            task = await self._repository.get_by_room_id(room_id)
            if task is None:
                raise NotFoundError("No cleaning task found for room", ErrorCode.TASK_NOT_FOUND)
            return await self._mark_dirty(task)

    async def _mark_dirty(self, task: RoomCleaningTask) -> RoomCleaningTask:
        return await self._apply(
            task,
            RoomTaskAction.MARK_DIRTY,
            {"started_at": None, "completed_at": None, "inspected_by": None, "inspected_at": None},
        )

    async def mark_out_of_order(self, task_id: str, reason: str) -> RoomCleaningTask:
        """Take a room out of service. The reason is appended to the notes."""
        with span("housekeeping_service.mark_out_of_order"):
            task = await self._load(task_id)

            changes: dict[str, Any] = {}
            if reason and reason.strip():
                changes["notes"] = append_note(
                    task.notes,
                    f"{Constants.OUT_OF_ORDER_NOTE_PREFIX}{reason.strip()}",
                    separator=Constants.NOTES_SECTION_SEPARATOR,
                )
            return await self._apply(task, RoomTaskAction.MARK_OUT_OF_ORDER, changes)

    # Supplies

    async def _load_supply(self, supply_id: str) -> CleaningSupply:
        validate_id(supply_id, "supply")
        supply = await self._repository.get_supply(supply_id)
        if supply is None:
            raise NotFoundError("Supply not found", ErrorCode.SUPPLY_NOT_FOUND)
        return supply

    async def create_supply(self, *, name: str, quantity: int, min_quantity: int, unit: str) -> CleaningSupply:
        with span("housekeeping_service.create_supply"):
            validate_required_text(name, ErrorCode.INVALID_SUPPLY_NAME, "Supply name")
            validate_non_negative_integer(quantity, ErrorCode.INVALID_QUANTITY, "Quantity")
            validate_non_negative_integer(min_quantity, ErrorCode.INVALID_QUANTITY, "Minimum quantity")
            validate_required_text(unit, ErrorCode.INVALID_UNIT, "Unit")

            supply = await self._repository.create_supply(
                {
                    "name": name.strip(),
                    "quantity": quantity,
                    "min_quantity": min_quantity,
                    "unit": unit.strip(),
                    "last_restocked": None,
                }
            )
            self._logger.info("Supply created", extra={"supply_id": supply.id, "supply_name": supply.name})
            return supply

    async def get_supply(self, supply_id: str) -> CleaningSupply | None:
        validate_id(supply_id, "supply")
        return await self._repository.get_supply(supply_id)

    async def update_supply(
        self,
        supply_id: str,
        *,
        name: str | None = None,
        min_quantity: int | None = None,
        unit: str | None = None,
    ) -> CleaningSupply:
        """Edit a supply's descriptive fields. Stock changes go through restock and use."""
        with span("housekeeping_service.update_supply"):
            supply = await self._load_supply(supply_id)

            changes: dict[str, Any] = {}
            if name is not None:
                validate_required_text(name, ErrorCode.INVALID_SUPPLY_NAME, "Supply name")
                changes["name"] = name.strip()
            if min_quantity is not None:
                validate_non_negative_integer(min_quantity, ErrorCode.INVALID_QUANTITY, "Minimum quantity")
                changes["min_quantity"] = min_quantity
            if unit is not None:
                validate_required_text(unit, ErrorCode.INVALID_UNIT, "Unit")
                changes["unit"] = unit.strip()

            if not changes:
                return supply

            return await self._repository.update_supply(supply.id, changes, expected_version=supply.version)

    async def delete_supply(self, supply_id: str) -> None:
        with span("housekeeping_service.delete_supply"):
            supply = await self._load_supply(supply_id)
            await self._repository.delete_supply(supply.id)
            self._logger.info("Supply deleted", extra={"supply_id": supply.id})

    async def list_supplies(self) -> list[CleaningSupply]:
        return await self._repository.list_supplies()

    async def restock(self, supply_id: str, amount: int) -> CleaningSupply:
        """Add stock and stamp last_restocked."""
        with span("housekeeping_service.restock"):
            validate_positive_integer(amount, ErrorCode.INVALID_QUANTITY, "Amount")
            supply = await self._load_supply(supply_id)

            updated = await self._repository.update_supply(
                supply.id,
                {"quantity": supply.quantity + amount, "last_restocked": datetime.now(UTC)},
                expected_version=supply.version,
            )
            self._logger.info("Supply restocked", extra={"supply_id": supply.id, "quantity": updated.quantity})
            return updated

    async def use(self, supply_id: str, amount: int) -> CleaningSupply:
        """Consume stock. Stock never goes negative."""
        with span("housekeeping_service.use"):
            validate_positive_integer(amount, ErrorCode.INVALID_QUANTITY, "Amount")
            supply = await self._load_supply(supply_id)

            if supply.quantity < amount:
                raise StateConflictError(
                    f"Insufficient {supply.name}: {supply.quantity} {supply.unit} in stock",
                    ErrorCode.INSUFFICIENT_QUANTITY,
                )

            updated = await self._repository.update_supply(
                supply.id,
                {"quantity": supply.quantity - amount},
                expected_version=supply.version,
            )
            if updated.is_low:
                log_with_context(
                    self._logger,
                    "warning",
                    "Supply below minimum",
                    supply_id=supply.id,
                    quantity=updated.quantity,
                    min_quantity=updated.min_quantity,
                )
            return updated

    async def list_low_supplies(self) -> list[CleaningSupply]:
        """Supplies whose stock is below their restock threshold."""
        supplies = await self._repository.list_supplies()
        return [supply for supply in supplies if supply.is_low]

    # Reporting

    async def get_by_assignee(self, assignee_id: str) -> list[RoomCleaningTask]:
        validate_id(assignee_id, "assignee")
        return await self._repository.list_tasks(HousekeepingFilters(assigned_to=assignee_id))

    async def get_by_floor(self, floor: int) -> list[RoomCleaningTask]:
        validate_non_negative_integer(floor, ErrorCode.INVALID_FLOOR, "Floor")
        return await self._repository.list_tasks(HousekeepingFilters(floor=floor))

    async def get_pending_tasks(self) -> list[RoomCleaningTask]:
        """Tasks that are dirty or being cleaned."""
        tasks = await self._repository.list_tasks()
        return [task for task in tasks if task.status in _PENDING_ROOM_STATUSES]

    async def get_urgent_tasks(self) -> list[RoomCleaningTask]:
        """Urgent tasks whose room is not yet clean or inspected."""
        tasks = await self._repository.list_tasks(HousekeepingFilters(priority=CleaningPriority.URGENT))
        return [task for task in tasks if task.status not in SETTLED_ROOM_STATUSES]

    async def get_stats(self) -> HousekeepingStats:
        """Aggregate counts, average cleaning time and low stock over all tasks and supplies."""
        with span("housekeeping_service.get_stats"):
            tasks = await self._repository.list_tasks()
            supplies = await self._repository.list_supplies()

            by_status = dict.fromkeys(RoomStatus, 0)
            by_priority = dict.fromkeys(CleaningPriority, 0)
            by_floor: dict[int, int] = {}

            total_minutes = 0.0
            timed_count = 0

            for task in tasks:
                by_status[task.status] += 1
                by_priority[task.priority] += 1
                by_floor[task.floor] = by_floor.get(task.floor, 0) + 1

                if task.started_at and task.completed_at:
                    total_minutes += (task.completed_at - task.started_at).total_seconds() / 60
                    timed_count += 1

            return HousekeepingStats(
                total_tasks=len(tasks),
                by_status=by_status,
                by_priority=by_priority,
                by_floor=dict(sorted(by_floor.items())),
                avg_cleaning_time_minutes=total_minutes / timed_count if timed_count > 0 else 0.0,
                low_supplies_count=sum(1 for supply in supplies if supply.is_low),
            )

    # Utility

    def get_room_statuses(self) -> list[RoomStatus]:
        return list(RoomStatus)

    def get_priorities(self) -> list[CleaningPriority]:
        return list(CleaningPriority)
