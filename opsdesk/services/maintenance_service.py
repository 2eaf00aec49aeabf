"""Maintenance service: work order lifecycle, parts accrual and statistics.

Work orders move open -> assigned -> in_progress (-> pending_parts -> in_progress)
-> completed, and may be cancelled and reopened along the way. Completion
freezes the parts cost rollup: the sum of the cost lines attached at that
moment is stored on the work order and is never recomputed afterwards.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from opsdesk.core.config import Constants
from opsdesk.core.errors import ErrorCode, NotFoundError, StateConflictError
from opsdesk.core.logging import span
from opsdesk.core.validation import (
    validate_enum,
    validate_id,
    validate_non_negative_number,
    validate_positive_integer,
    validate_required_text,
)
from opsdesk.domain.lifecycles import WORK_ORDER_LIFECYCLE
from opsdesk.domain.work_order import (
    CLOSED_WORK_ORDER_STATUSES,
    CostLine,
    WorkOrder,
    WorkOrderAction,
    WorkOrderCategory,
    WorkOrderFilters,
    WorkOrderPriority,
    WorkOrderStatus,
)
from opsdesk.models.service_models import MaintenanceStats
from opsdesk.repositories.protocols import WorkOrderRepository
from opsdesk.services.lifecycle import LifecycleService, append_note


def _validate_title(title: object) -> None:
    validate_required_text(title, ErrorCode.INVALID_TITLE, "Title", min_length=Constants.MIN_TITLE_LENGTH)


def _validate_priority(priority: object) -> None:
    validate_enum(priority, WorkOrderPriority, ErrorCode.INVALID_PRIORITY, "priority")


def _strip_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class MaintenanceService(LifecycleService[WorkOrder, WorkOrderStatus, WorkOrderAction]):
    """Work order operations on top of a WorkOrderRepository."""

    entity_label = "Work order"
    id_field = "work_order"

    def __init__(self, *, repository: WorkOrderRepository, logger: logging.Logger | None = None) -> None:
        super().__init__(
            store=repository,
            machine=WORK_ORDER_LIFECYCLE,
            logger=logger or logging.getLogger(__name__),
        )
        self._repository = repository

    # Work order CRUD

    async def create_work_order(
        self,
        *,
        title: str,
        description: str,
        category: WorkOrderCategory | str,
        priority: WorkOrderPriority | str,
        location_id: str,
        location_type: str,
        reported_by: str,
        scheduled_date: datetime | None = None,
        estimated_hours: float | None = None,
        notes: str | None = None,
    ) -> WorkOrder:
        """Report a new work order in the open state.

        Raises:
            ValidationError: If any field is malformed
        """
        with span("maintenance_service.create_work_order"):
            _validate_title(title)
            validate_required_text(description, ErrorCode.INVALID_DESCRIPTION, "Description")
            validate_enum(category, WorkOrderCategory, ErrorCode.INVALID_CATEGORY, "category")
            _validate_priority(priority)
            validate_id(location_id, "location")
            validate_required_text(location_type, ErrorCode.INVALID_LOCATION_TYPE, "Location type")
            validate_id(reported_by, "reporter")
            if estimated_hours is not None:
                validate_non_negative_number(estimated_hours, ErrorCode.INVALID_HOURS, "Estimated hours")

            work_order = await self._repository.create(
                {
                    "title": title.strip(),
                    "description": description.strip(),
                    "category": WorkOrderCategory(category),
                    "priority": WorkOrderPriority(priority),
                    "status": WorkOrderStatus.OPEN,
                    "location_id": location_id,
                    "location_type": location_type.strip(),
                    "reported_by": reported_by,
                    "assigned_to": None,
                    "scheduled_date": scheduled_date,
                    "started_at": None,
                    "completed_at": None,
                    "estimated_hours": estimated_hours,
                    "actual_hours": None,
                    "labor_cost": None,
                    "parts_cost": None,
                    "notes": _strip_or_none(notes),
                }
            )

            self._logger.info("Work order created", extra={"task_id": work_order.id, "title": work_order.title})
            return work_order

    async def get_work_order(self, work_order_id: str) -> WorkOrder | None:
        """Return the work order, or None if it does not exist."""
        validate_id(work_order_id, self.id_field)
        return await self._repository.get_by_id(work_order_id)

    async def update_work_order(
        self,
        work_order_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        priority: WorkOrderPriority | str | None = None,
        scheduled_date: datetime | None = None,
        estimated_hours: float | None = None,
        notes: str | None = None,
    ) -> WorkOrder:
        """Edit descriptive fields of a work order that is not completed or cancelled.

        Arguments left as None are not changed. Notes are appended to the log.
        """
        with span("maintenance_service.update_work_order"):
            order = await self._load(work_order_id)

            if order.status in CLOSED_WORK_ORDER_STATUSES:
                raise StateConflictError("Cannot update finalized work order", ErrorCode.TASK_FINALIZED)

            changes: dict[str, Any] = {}
            if title is not None:
                _validate_title(title)
                changes["title"] = title.strip()
            if description is not None:
                validate_required_text(description, ErrorCode.INVALID_DESCRIPTION, "Description")
                changes["description"] = description.strip()
            if priority is not None:
                _validate_priority(priority)
                changes["priority"] = WorkOrderPriority(priority)
            if scheduled_date is not None:
                changes["scheduled_date"] = scheduled_date
            if estimated_hours is not None:
                validate_non_negative_number(estimated_hours, ErrorCode.INVALID_HOURS, "Estimated hours")
                changes["estimated_hours"] = estimated_hours
            if notes is not None and notes.strip():
                changes["notes"] = append_note(order.notes, notes.strip())

            if not changes:
                return order

            updated = await self._repository.update(order.id, changes, expected_version=order.version)
            self._logger.info("Work order updated", extra={"task_id": order.id, "fields": sorted(changes)})
            return updated

    async def delete_work_order(self, work_order_id: str) -> None:
        """Delete a work order and its cost lines."""
        with span("maintenance_service.delete_work_order"):
            order = await self._load(work_order_id)
            await self._repository.delete(order.id)
            self._logger.info("Work order deleted", extra={"task_id": order.id})

    async def list_work_orders(self, filters: WorkOrderFilters | None = None) -> list[WorkOrder]:
        """List work orders matching all given filters."""
        with span("maintenance_service.list_work_orders"):
            return await self._repository.list_work_orders(filters)

    # Workflow

    async def assign(self, work_order_id: str, assigned_to: str) -> WorkOrder:
        """Assign (or re-assign) a technician. Allowed from open and assigned."""
        with span("maintenance_service.assign"):
            validate_id(work_order_id, self.id_field)
            validate_id(assigned_to, "assignee")
            order = await self._load(work_order_id)
            return await self._apply(order, WorkOrderAction.ASSIGN, {"assigned_to": assigned_to})

    async def unassign(self, work_order_id: str) -> WorkOrder:
        """Return an assigned work order to the open pool."""
        with span("maintenance_service.unassign"):
            order = await self._load(work_order_id)
            self._machine.ensure_allowed(WorkOrderAction.UNASSIGN, order.status)
            if not order.assigned_to:
                raise StateConflictError("Work order is not assigned", ErrorCode.NOT_ASSIGNED)
            return await self._apply(order, WorkOrderAction.UNASSIGN, {"assigned_to": None})

    async def start(self, work_order_id: str) -> WorkOrder:
        """Begin (or resume after waiting for parts) work on an assigned order."""
        with span("maintenance_service.start"):
            order = await self._load(work_order_id)
            self._machine.ensure_allowed(WorkOrderAction.START, order.status)
            started_at = order.started_at or datetime.now(UTC)
            return await self._apply(order, WorkOrderAction.START, {"started_at": started_at})

    async def set_pending_parts(self, work_order_id: str) -> WorkOrder:
        """Park a work order until parts arrive."""
        with span("maintenance_service.set_pending_parts"):
            order = await self._load(work_order_id)
            return await self._apply(order, WorkOrderAction.SET_PENDING_PARTS)

    async def complete(
        self,
        work_order_id: str,
        *,
        actual_hours: float,
        labor_cost: float | None = None,
        notes: str | None = None,
    ) -> WorkOrder:
        """Complete an in-progress work order and freeze its parts cost.

        Args:
            work_order_id: Work order to complete
            actual_hours: Hours actually spent (>= 0)
            labor_cost: Optional labor cost (>= 0)
            notes: Optional completion notes, appended to the log

        Returns:
            The completed work order, with parts_cost equal to the sum of the
            cost lines attached at this moment
        """
        with span("maintenance_service.complete"):
            validate_id(work_order_id, self.id_field)
            validate_non_negative_number(actual_hours, ErrorCode.INVALID_HOURS, "Actual hours")
            if labor_cost is not None:
                validate_non_negative_number(labor_cost, ErrorCode.INVALID_LABOR_COST, "Labor cost")

            order = await self._load(work_order_id)
            self._machine.ensure_allowed(WorkOrderAction.COMPLETE, order.status)

            lines = await self._repository.list_cost_lines(order.id)
            parts_cost = float(sum(line.total_cost for line in lines))

            changes: dict[str, Any] = {
                "completed_at": datetime.now(UTC),
                "actual_hours": actual_hours,
                "labor_cost": labor_cost,
                "parts_cost": parts_cost,
            }
            if notes and notes.strip():
                changes["notes"] = append_note(order.notes, notes.strip())

            completed = await self._apply(order, WorkOrderAction.COMPLETE, changes)
            self._logger.info(
                "Work order costs recorded",
                extra={"task_id": order.id, "actual_hours": actual_hours, "parts_cost": parts_cost},
            )
            return completed

    async def cancel(self, work_order_id: str, reason: str | None = None) -> WorkOrder:
        """Cancel a work order that is not completed. The reason is appended to the notes."""
        with span("maintenance_service.cancel"):
            order = await self._load(work_order_id)

            if order.status == WorkOrderStatus.CANCELLED:
                raise StateConflictError("Work order is already cancelled", ErrorCode.ALREADY_CANCELLED)
            self._machine.ensure_allowed(WorkOrderAction.CANCEL, order.status)

            changes: dict[str, Any] = {}
            if reason and reason.strip():
                changes["notes"] = append_note(
                    order.notes,
                    f"{Constants.CANCELLATION_NOTE_PREFIX}{reason.strip()}",
                    separator=Constants.NOTES_SECTION_SEPARATOR,
                )
            return await self._apply(order, WorkOrderAction.CANCEL, changes)

    async def reopen(self, work_order_id: str) -> WorkOrder:
        """Reopen a cancelled work order as open and unassigned."""
        with span("maintenance_service.reopen"):
            order = await self._load(work_order_id)
            return await self._apply(order, WorkOrderAction.REOPEN, {"assigned_to": None})

    # Parts

    async def add_cost_line(
        self,
        work_order_id: str,
        *,
        name: str,
        quantity: int,
        unit_cost: float,
        code: str | None = None,
    ) -> CostLine:
        """Record a part used on a work order. total_cost is quantity * unit_cost."""
        with span("maintenance_service.add_cost_line"):
            order = await self._load(work_order_id)

            validate_required_text(name, ErrorCode.INVALID_PART_NAME, "Part name")
            validate_positive_integer(quantity, ErrorCode.INVALID_QUANTITY, "Quantity")
            validate_non_negative_number(unit_cost, ErrorCode.INVALID_UNIT_COST, "Unit cost")

            line = await self._repository.add_cost_line(
                {
                    "task_id": order.id,
                    "name": name.strip(),
                    "code": _strip_or_none(code),
                    "quantity": quantity,
                    "unit_cost": unit_cost,
                    "total_cost": float(quantity * unit_cost),
                }
            )

            self._logger.info(
                "Part added to work order",
                extra={"task_id": order.id, "line_id": line.id, "total_cost": line.total_cost},
            )
            return line

    async def list_cost_lines(self, work_order_id: str) -> list[CostLine]:
        """Return the parts currently attached to a work order."""
        with span("maintenance_service.list_cost_lines"):
            order = await self._load(work_order_id)
            return await self._repository.list_cost_lines(order.id)

    async def remove_cost_line(self, line_id: str) -> None:
        """Remove a part. A completed order's frozen parts_cost is not adjusted."""
        with span("maintenance_service.remove_cost_line"):
            validate_id(line_id, "part")
            if not await self._repository.remove_cost_line(line_id):
                raise NotFoundError("Part not found", ErrorCode.PART_NOT_FOUND)
            self._logger.info("Part removed from work order", extra={"line_id": line_id})

    # Reporting

    async def get_by_location(self, location_id: str) -> list[WorkOrder]:
        """Work orders for one room or area."""
        validate_id(location_id, "location")
        return await self._repository.list_work_orders(WorkOrderFilters(location_id=location_id))

    async def get_by_assignee(self, assignee_id: str) -> list[WorkOrder]:
        """Work orders assigned to one technician."""
        validate_id(assignee_id, "assignee")
        return await self._repository.list_work_orders(WorkOrderFilters(assigned_to=assignee_id))

    async def get_open_work_orders(self) -> list[WorkOrder]:
        """Work orders that are neither completed nor cancelled."""
        orders = await self._repository.list_work_orders()
        return [order for order in orders if order.status not in CLOSED_WORK_ORDER_STATUSES]

    async def get_critical_work_orders(self) -> list[WorkOrder]:
        """Critical work orders that are still open."""
        orders = await self._repository.list_work_orders(WorkOrderFilters(priority=WorkOrderPriority.CRITICAL))
        return [order for order in orders if order.status not in CLOSED_WORK_ORDER_STATUSES]

    async def get_stats(self) -> MaintenanceStats:
        """Aggregate counts, average completion hours and cost totals over all work orders.

        Orders without actual_hours are left out of the average entirely; the
        average is 0 when no order has hours recorded.
        """
        with span("maintenance_service.get_stats"):
            orders = await self._repository.list_work_orders()

            by_status = dict.fromkeys(WorkOrderStatus, 0)
            by_priority = dict.fromkeys(WorkOrderPriority, 0)
            by_category = dict.fromkeys(WorkOrderCategory, 0)

            total_hours = 0.0
            hours_count = 0
            total_labor_cost = 0.0
            total_parts_cost = 0.0

            for order in orders:
                by_status[order.status] += 1
                by_priority[order.priority] += 1
                by_category[order.category] += 1

                if order.actual_hours is not None:
                    total_hours += order.actual_hours
                    hours_count += 1
                if order.labor_cost is not None:
                    total_labor_cost += order.labor_cost
                if order.parts_cost is not None:
                    total_parts_cost += order.parts_cost

            return MaintenanceStats(
                total_tasks=len(orders),
                by_status=by_status,
                by_priority=by_priority,
                by_category=by_category,
                avg_completion_hours=total_hours / hours_count if hours_count > 0 else 0.0,
                total_labor_cost=total_labor_cost,
                total_parts_cost=total_parts_cost,
            )

    # Utility

    def get_priorities(self) -> list[WorkOrderPriority]:
        return list(WorkOrderPriority)

    def get_statuses(self) -> list[WorkOrderStatus]:
        return list(WorkOrderStatus)

    def get_categories(self) -> list[WorkOrderCategory]:
        return list(WorkOrderCategory)
