"""SQLite schema for the task lifecycle collections (code-first approach)."""

import logging

from opsdesk.core.db_client import get_connection


logger = logging.getLogger(__name__)


TABLE_SCHEMAS: dict[str, str] = {
    "work_orders": """CREATE TABLE IF NOT EXISTS work_orders (
        id TEXT PRIMARY KEY,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        version INTEGER NOT NULL DEFAULT 1,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        category TEXT NOT NULL
            CHECK (category IN ('electrical', 'plumbing', 'hvac', 'structural', 'appliance', 'general')),
        priority TEXT NOT NULL CHECK (priority IN ('low', 'medium', 'high', 'critical')),
        status TEXT NOT NULL DEFAULT 'open'
            CHECK (status IN ('open', 'assigned', 'in_progress', 'pending_parts', 'completed', 'cancelled')),
        location_id TEXT NOT NULL,
        location_type TEXT NOT NULL,
        reported_by TEXT NOT NULL,
        assigned_to TEXT,
        scheduled_date TEXT,
        started_at TEXT,
        completed_at TEXT,
        estimated_hours REAL CHECK (estimated_hours IS NULL OR estimated_hours >= 0),
        actual_hours REAL CHECK (actual_hours IS NULL OR actual_hours >= 0),
        labor_cost REAL CHECK (labor_cost IS NULL OR labor_cost >= 0),
        parts_cost REAL CHECK (parts_cost IS NULL OR parts_cost >= 0),
        notes TEXT
    )""",
    "work_order_parts": """CREATE TABLE IF NOT EXISTS work_order_parts (
        id TEXT PRIMARY KEY,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        version INTEGER NOT NULL DEFAULT 1,
        task_id TEXT NOT NULL REFERENCES work_orders(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        code TEXT,
        quantity INTEGER NOT NULL CHECK (quantity >= 1),
        unit_cost REAL NOT NULL CHECK (unit_cost >= 0),
        total_cost REAL NOT NULL
    )""",
    "room_cleaning_tasks": """CREATE TABLE IF NOT EXISTS room_cleaning_tasks (
        id TEXT PRIMARY KEY,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        version INTEGER NOT NULL DEFAULT 1,
        room_id TEXT NOT NULL,
        room_number TEXT NOT NULL,
        floor INTEGER NOT NULL CHECK (floor >= 0),
        status TEXT NOT NULL DEFAULT 'dirty'
            CHECK (status IN ('dirty', 'in_progress', 'clean', 'inspected', 'out_of_order')),
        priority TEXT NOT NULL DEFAULT 'medium' CHECK (priority IN ('low', 'medium', 'high', 'urgent')),
        assigned_to TEXT,
        checkout_date TEXT,
        checkin_date TEXT,
        notes TEXT,
        started_at TEXT,
        completed_at TEXT,
        inspected_by TEXT,
        inspected_at TEXT
    )""",
    "cleaning_supplies": """CREATE TABLE IF NOT EXISTS cleaning_supplies (
        id TEXT PRIMARY KEY,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        version INTEGER NOT NULL DEFAULT 1,
        name TEXT NOT NULL,
        quantity INTEGER NOT NULL CHECK (quantity >= 0),
        min_quantity INTEGER NOT NULL CHECK (min_quantity >= 0),
        unit TEXT NOT NULL,
        last_restocked TEXT
    )""",
}

INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_work_orders_status ON work_orders (status)",
    "CREATE INDEX IF NOT EXISTS idx_work_orders_assigned ON work_orders (assigned_to)",
    "CREATE INDEX IF NOT EXISTS idx_work_orders_location ON work_orders (location_id)",
    "CREATE INDEX IF NOT EXISTS idx_work_order_parts_task ON work_order_parts (task_id)",
    "CREATE INDEX IF NOT EXISTS idx_room_cleaning_tasks_room ON room_cleaning_tasks (room_id)",
    "CREATE INDEX IF NOT EXISTS idx_room_cleaning_tasks_status ON room_cleaning_tasks (status)",
    "CREATE INDEX IF NOT EXISTS idx_room_cleaning_tasks_assigned ON room_cleaning_tasks (assigned_to)",
]

COLLECTIONS = list(TABLE_SCHEMAS)


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist."""
    conn = await get_connection(db_path=db_path)

    for table_name, ddl in TABLE_SCHEMAS.items():
        await conn.execute(ddl)
        logger.debug("Ensured table exists", extra={"table": table_name})

    for index_sql in INDEXES:
        await conn.execute(index_sql)

    await conn.commit()
    logger.info("Database schema initialized", extra={"tables": COLLECTIONS})
