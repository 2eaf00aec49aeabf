"""Unit tests for the record-store backed repositories."""

import uuid
from datetime import UTC, datetime

import pytest

from opsdesk.core.db_client import parse_filter
from opsdesk.domain.housekeeping import HousekeepingFilters, RoomStatus
from opsdesk.domain.work_order import WorkOrderFilters, WorkOrderPriority, WorkOrderStatus
from opsdesk.repositories.record_store import WORK_ORDER_PARTS, build_filter_query


def _order_data(**overrides):
    data = {
        "title": "Noisy fan",
        "description": "Bathroom fan rattles",
        "category": "hvac",
        "priority": "low",
        "status": "open",
        "location_id": str(uuid.uuid4()),
        "location_type": "room",
        "reported_by": str(uuid.uuid4()),
    }
    data.update(overrides)
    return data


@pytest.mark.unit
class TestBuildFilterQuery:
    """Tests for build_filter_query."""

    def test_none_and_empty(self):
        assert build_filter_query(None) == ""
        assert build_filter_query(WorkOrderFilters()) == ""

    def test_equality_conditions_are_anded(self):
        query = build_filter_query(
            WorkOrderFilters(status=WorkOrderStatus.ASSIGNED, priority=WorkOrderPriority.HIGH)
        )

        assert query == 'status = "assigned" && priority = "high"'

    def test_created_range(self):
        start = datetime(2026, 1, 1, tzinfo=UTC)

        query = build_filter_query(HousekeepingFilters(floor=3, created_from=start))

        assert query == 'floor = "3" && created_at >= "2026-01-01T00:00:00+00:00"'

    def test_values_are_sanitized(self):
        query = build_filter_query(HousekeepingFilters(room_id='x" || id != "'))

        assert query == 'room_id = "x\\" || id != \\""'
        assert parse_filter(query) == ("room_id = ?", ['x" || id != "'])


@pytest.mark.unit
class TestRecordWorkOrderRepository:
    """Tests for RecordWorkOrderRepository."""

    async def test_get_missing_returns_none(self, work_order_repository):
        assert await work_order_repository.get_by_id(str(uuid.uuid4())) is None

    async def test_create_and_update(self, work_order_repository):
        order = await work_order_repository.create(_order_data())

        updated = await work_order_repository.update(
            order.id, {"status": WorkOrderStatus.CANCELLED}, expected_version=order.version
        )

        assert updated.status == WorkOrderStatus.CANCELLED
        assert updated.version == order.version + 1

    async def test_cost_lines(self, work_order_repository, in_memory_db):
        order = await work_order_repository.create(_order_data())
        other = await work_order_repository.create(_order_data())
        line = await work_order_repository.add_cost_line(
            {"task_id": order.id, "name": "Fan motor", "quantity": 1, "unit_cost": 80.0, "total_cost": 80.0}
        )
        await work_order_repository.add_cost_line(
            {"task_id": other.id, "name": "Screw", "quantity": 4, "unit_cost": 0.5, "total_cost": 2.0}
        )

        assert [cost_line.id for cost_line in await work_order_repository.list_cost_lines(order.id)] == [line.id]
        assert await work_order_repository.remove_cost_line(line.id) is True
        assert await work_order_repository.remove_cost_line(line.id) is False

        await work_order_repository.delete(other.id)
        assert await in_memory_db.list_all_records(collection=WORK_ORDER_PARTS) == []


@pytest.mark.unit
class TestRecordHousekeepingRepository:
    """Tests for RecordHousekeepingRepository."""

    async def test_get_by_room_id_returns_latest(self, housekeeping_repository):
        room_id = str(uuid.uuid4())
        data = {"room_id": room_id, "room_number": "110", "floor": 1, "status": RoomStatus.INSPECTED}
        await housekeeping_repository.create(data)
        latest = await housekeeping_repository.create({**data, "status": RoomStatus.DIRTY})

        found = await housekeeping_repository.get_by_room_id(room_id)

        assert found.id == latest.id
        assert await housekeeping_repository.get_by_room_id(str(uuid.uuid4())) is None

    async def test_supplies_sorted_by_name(self, housekeeping_repository):
        for name, quantity, unit in (("Towels", 5, "pack"), ("Bleach", 1, "jug")):
            await housekeeping_repository.create_supply(
                {"name": name, "quantity": quantity, "min_quantity": 2, "unit": unit}
            )

        supplies = await housekeeping_repository.list_supplies()

        assert [s.name for s in supplies] == ["Bleach", "Towels"]
        assert supplies[0].is_low
