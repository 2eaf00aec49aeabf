"""SQLite record store with CRUD operations and optimistic version checks."""

import asyncio
import json
import logging
import re
import threading
import uuid
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite

from opsdesk.core.config import Constants, settings


logger = logging.getLogger(__name__)

# Columns managed by the store itself; callers cannot write them directly
_MANAGED_COLUMNS = frozenset({"id", "created_at", "updated_at", "version"})


class DatabaseError(RuntimeError):
    """Storage operation failed."""


class RecordNotFoundError(KeyError):
    """No record with the requested ID exists."""


class VersionConflictError(DatabaseError):
    """Record was modified since it was read (optimistic lock failure)."""


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in filter queries via json.dumps."""
    return json.dumps(str(value))[1:-1]


def utc_now() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


def _serialize_value(value: Any) -> Any:
    """Convert a Python value to something SQLite can store."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict | list):
        return json.dumps(value)
    return value


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


# One condition: field, operator and a double-quoted value using JSON string escapes
_CONDITION_PATTERN = re.compile(r'\s*(\w+)\s*(>=|<=|=)\s*"((?:[^"\\]|\\.)*)"\s*')


def _parse_value(raw: str) -> str | int | float:
    """Unescape a quoted filter value and convert numeric text for SQLite."""
    try:
        value = json.loads(f'"{raw}"')
    except json.JSONDecodeError as e:
        msg = f"Invalid filter value: {raw}"
        raise ValueError(msg) from e

    if value.isdigit():
        return int(value)
    if value.replace(".", "", 1).isdigit():
        return float(value)
    return value


def parse_filter(filter_query: str) -> tuple[str, list[str | int | float]]:
    """Parse filter syntax into a SQL WHERE clause and parameter list.

    Syntax: field = "value", field >= "value" or field <= "value", joined with &&.
    Values are escaped with sanitize_param.
    """
    if not filter_query:
        return "", []

    conditions = []
    params: list[str | int | float] = []
    pos = 0

    while True:
        match = _CONDITION_PATTERN.match(filter_query, pos)
        if not match:
            msg = f"Invalid filter syntax: {filter_query}"
            raise ValueError(msg)

        field, op, raw_value = match.groups()
        conditions.append(f"{field} {op} ?")
        params.append(_parse_value(raw_value))

        pos = match.end()
        if pos == len(filter_query):
            return " AND ".join(conditions), params
        if not filter_query.startswith("&&", pos):
            msg = f"Invalid filter syntax: {filter_query}"
            raise ValueError(msg)
        pos += 2


def _parse_sort(sort: str) -> str:
    """Convert "+field" / "-field" into a safe ORDER BY clause.

    Ties are broken by insertion order (rowid) in the same direction.
    """
    default = "created_at ASC, rowid ASC"
    if not sort:
        return default

    prefixed = re.match(r"^([+-]?)([A-Za-z_][A-Za-z0-9_]*)$", sort.strip())
    if not prefixed:
        logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
        return default

    direction = "DESC" if prefixed.group(1) == "-" else "ASC"
    return f"{prefixed.group(2)} {direction}, rowid {direction}"


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    async with _db_lock:
        conn = _db_connections.pop(cache_key, None)
        if conn is None:
            return
        await conn.close()

    logger.info(
        "Closed SQLite connection",
        extra={"thread_id": thread_id, "loop_id": loop_id, "db_path": str(path)},
    )


def _row_to_record(cursor: aiosqlite.Cursor, row: Any) -> dict[str, Any]:
    columns = [description[0] for description in cursor.description]
    return dict(zip(columns, row, strict=True))


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record and return it with its generated id, timestamps and version."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        now = utc_now()
        record = {key: value for key, value in data.items() if key not in _MANAGED_COLUMNS}
        record.update({"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, "version": 1})

        columns = list(record.keys())
        columns_str = ", ".join(columns)
        placeholders_str = ", ".join("?" for _ in columns)
        values = [_serialize_value(record[key]) for key in columns]

        query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
        await conn.execute(query, values)
        await conn.commit()

        logger.info("Created record", extra={"collection": collection, "record_id": record["id"]})
        return await get_record(collection=collection, record_id=record["id"])
    except Exception as e:
        if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
            msg = f"Table '{collection}' does not exist. Call init_db() first."
            logger.error("Table not found", extra={"collection": collection})
            raise DatabaseError(msg) from e
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single record by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (record_id,))
        row = await cursor.fetchone()

        if row is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.debug("Retrieved record", extra={"collection": collection, "record_id": record_id})
        return _row_to_record(cursor, row)
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def update_record(
    *,
    collection: str,
    record_id: str,
    data: dict[str, Any],
    expected_version: int | None = None,
) -> dict[str, Any]:
    """Update a record by ID and return the updated record.

    When expected_version is given the write only succeeds if the stored
    version still matches; otherwise VersionConflictError is raised.
    """
    payload = {key: value for key, value in data.items() if key not in _MANAGED_COLUMNS}
    if not payload:
        msg = "Empty update payload"
        raise ValueError(msg)

    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        set_clause = ", ".join(f"{key} = ?" for key in payload)
        values = [_serialize_value(val) for val in payload.values()]
        values.extend([utc_now(), record_id])

        query = f"UPDATE {collection} SET {set_clause}, updated_at = ?, version = version + 1 WHERE id = ?"  # noqa: S608 - collection is validated
        if expected_version is not None:
            query += " AND version = ?"
            values.append(expected_version)

        cursor = await conn.execute(query, values)
        await conn.commit()

        if cursor.rowcount == 0:
            # Distinguish a missing record from a stale version
            current = await get_record(collection=collection, record_id=record_id)
            msg = (
                f"Record {record_id} in {collection} was modified concurrently "
                f"(expected version {expected_version}, found {current['version']})"
            )
            raise VersionConflictError(msg)

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return await get_record(collection=collection, record_id=record_id)
    except (RecordNotFoundError, VersionConflictError):
        raise
    except Exception as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a record by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (record_id,))
        await conn.commit()

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})
    except RecordNotFoundError:
        raise
    except Exception as e:
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def list_records(
    *,
    collection: str,
    page: int = 1,
    per_page: int = Constants.DEFAULT_PER_PAGE_LIMIT,
    filter_query: str = "",
    sort: str = "",
) -> list[dict[str, Any]]:
    """List records with optional filtering, sorting, and pagination."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        where_clause = ""
        params: list[Any] = []
        if filter_query:
            where_clause, params = parse_filter(filter_query)
            where_clause = f"WHERE {where_clause}"

        order_by = _parse_sort(sort)
        offset = (page - 1) * per_page

        query = f"SELECT * FROM {collection} {where_clause} ORDER BY {order_by} LIMIT ? OFFSET ?"  # noqa: S608 - collection is validated
        params.extend([per_page, offset])

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
        records = [_row_to_record(cursor, row) for row in rows]

        logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
        return records
    except Exception as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e


async def list_all_records(*, collection: str, filter_query: str = "", sort: str = "") -> list[dict[str, Any]]:
    """Return every record matching the filter by walking all pages."""
    records: list[dict[str, Any]] = []
    page = 1
    per_page = Constants.MAX_PER_PAGE_LIMIT

    while True:
        batch = await list_records(
            collection=collection,
            page=page,
            per_page=per_page,
            filter_query=filter_query,
            sort=sort,
        )
        records.extend(batch)
        if len(batch) < per_page:
            return records
        page += 1


async def get_first_record(*, collection: str, filter_query: str, sort: str = "") -> dict[str, Any] | None:
    """Return the first record matching the filter, or None."""
    records = await list_records(collection=collection, per_page=1, filter_query=filter_query, sort=sort)
    return records[0] if records else None
