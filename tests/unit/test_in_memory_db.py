"""Tests for InMemoryDBClient implementation."""

import asyncio

import pytest

from opsdesk.core.db_client import DatabaseError, RecordNotFoundError, VersionConflictError, sanitize_param


@pytest.mark.unit
class TestInMemoryDBClient:
    """Test suite for InMemoryDBClient."""

    async def test_create_record(self, in_memory_db):
        record = await in_memory_db.create_record(collection="items", data={"name": "Mop"})

        assert record["name"] == "Mop"
        assert record["version"] == 1
        assert "created_at" in record

    async def test_create_record_invalid_data(self, in_memory_db):
        with pytest.raises(DatabaseError):
            await in_memory_db.create_record(collection="items", data="not a dict")

    async def test_update_version_check(self, in_memory_db):
        record = await in_memory_db.create_record(collection="items", data={"name": "Mop"})

        updated = await in_memory_db.update_record(
            collection="items", record_id=record["id"], data={"name": "Broom"}, expected_version=1
        )

        assert updated["version"] == 2
        with pytest.raises(VersionConflictError):
            await in_memory_db.update_record(
                collection="items", record_id=record["id"], data={"name": "Bucket"}, expected_version=1
            )

    async def test_concurrent_updates_conflict(self, in_memory_db):
        record = await in_memory_db.create_record(collection="items", data={"name": "Mop"})

        results = await asyncio.gather(
            in_memory_db.update_record(collection="items", record_id=record["id"], data={"n": 1}, expected_version=1),
            in_memory_db.update_record(collection="items", record_id=record["id"], data={"n": 2}, expected_version=1),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, VersionConflictError)) == 1

    async def test_missing_records(self, in_memory_db):
        with pytest.raises(RecordNotFoundError):
            await in_memory_db.get_record(collection="items", record_id="missing")
        with pytest.raises(RecordNotFoundError):
            await in_memory_db.delete_record(collection="items", record_id="missing")

    async def test_filter_and_sort(self, in_memory_db):
        for name, floor in (("b", 1), ("a", 2), ('c "quoted"', 1)):
            await in_memory_db.create_record(collection="items", data={"name": name, "floor": floor})

        first_floor = await in_memory_db.list_all_records(collection="items", filter_query='floor = "1"', sort="-name")
        from_b = await in_memory_db.list_records(collection="items", filter_query='name >= "b" && floor <= "1"')
        escaped = sanitize_param('c "quoted"')
        quoted = await in_memory_db.get_first_record(collection="items", filter_query=f'name = "{escaped}"')

        assert [r["name"] for r in first_floor] == ['c "quoted"', "b"]
        assert len(from_b) == 2
        assert quoted["floor"] == 1

    async def test_invalid_filter(self, in_memory_db):
        await in_memory_db.create_record(collection="items", data={"name": "Mop"})

        with pytest.raises(DatabaseError):
            await in_memory_db.list_records(collection="items", filter_query="name Mop")
        with pytest.raises(DatabaseError):
            await in_memory_db.list_records(collection="items", filter_query='name != "Mop"')
