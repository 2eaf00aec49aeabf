"""Pytest configuration and fixtures for unit tests."""

import uuid

import pytest

from opsdesk.repositories.record_store import RecordHousekeepingRepository, RecordWorkOrderRepository
from opsdesk.services.housekeeping_service import HousekeepingService
from opsdesk.services.maintenance_service import MaintenanceService
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def work_order_repository(in_memory_db):
    return RecordWorkOrderRepository(store=in_memory_db)


@pytest.fixture
def housekeeping_repository(in_memory_db):
    return RecordHousekeepingRepository(store=in_memory_db)


@pytest.fixture
def maintenance_service(work_order_repository):
    return MaintenanceService(repository=work_order_repository)


@pytest.fixture
def housekeeping_service(housekeeping_repository):
    return HousekeepingService(repository=housekeeping_repository)


@pytest.fixture
def location_id():
    return str(uuid.uuid4())


@pytest.fixture
def reporter_id():
    return str(uuid.uuid4())


@pytest.fixture
def technician_id():
    return str(uuid.uuid4())


@pytest.fixture
def room_id():
    return str(uuid.uuid4())


@pytest.fixture
def housekeeper_id():
    return str(uuid.uuid4())


@pytest.fixture
def inspector_id():
    return str(uuid.uuid4())


@pytest.fixture
def work_order_factory(maintenance_service, location_id, reporter_id):
    """Create work orders with sensible defaults."""

    async def _create(**overrides):
        fields = {
            "title": "Leaking faucet",
            "description": "Bathroom sink faucet drips constantly",
            "category": "plumbing",
            "priority": "medium",
            "location_id": location_id,
            "location_type": "room",
            "reported_by": reporter_id,
        }
        fields.update(overrides)
        return await maintenance_service.create_work_order(**fields)

    return _create


@pytest.fixture
def room_task_factory(housekeeping_service):
    """Create room cleaning tasks, each for a new room unless room_id is given."""

    async def _create(**overrides):
        fields = {
            "room_id": str(uuid.uuid4()),
            "room_number": "204",
            "floor": 2,
        }
        fields.update(overrides)
        return await housekeeping_service.create_task(**fields)

    return _create
