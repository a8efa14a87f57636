"""SQLite schema for the planner document store (code-first approach)."""

import logging

from planner.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "products",
    "members",
    "week_ranges",
    "objectives",
    "tasks",
]

# Every collection carries a text primary key plus created/updated timestamps
_COMMON_COLUMNS = (
    "id TEXT PRIMARY KEY NOT NULL",
    "created TEXT NOT NULL",
    "updated TEXT NOT NULL",
)

_COLLECTION_COLUMNS: dict[str, tuple[str, ...]] = {
    "products": ("name TEXT NOT NULL",),
    "members": (
        "name TEXT NOT NULL",
        "role TEXT NOT NULL DEFAULT ''",
        "avatar TEXT NOT NULL DEFAULT ''",
        "initials TEXT NOT NULL DEFAULT ''",
    ),
    "week_ranges": (
        "start_date TEXT NOT NULL",
        "end_date TEXT NOT NULL",
        "label TEXT NOT NULL DEFAULT ''",
    ),
    "objectives": (
        "product_id TEXT NOT NULL",
        "week_id TEXT NOT NULL",
        "title TEXT NOT NULL",
        "progress INTEGER NOT NULL DEFAULT 0",
        "position INTEGER NOT NULL DEFAULT 0",
        "is_urgent INTEGER",
        "is_important INTEGER",
        "category TEXT",
        "complexity TEXT",
        "criticality TEXT",
        "assignees TEXT",  # JSON list of member ids
        "target_completion_date TEXT",
        "flag TEXT",  # JSON object {is_flagged, description}
    ),
    "tasks": (
        "objective_id TEXT NOT NULL",
        "title TEXT NOT NULL",
        "assignee TEXT",
        "complexity TEXT",
        "criticality TEXT",
        "completed INTEGER NOT NULL DEFAULT 0",
        "position INTEGER NOT NULL DEFAULT 0",
    ),
}

_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_objectives_product_week ON objectives (product_id, week_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_objective ON tasks (objective_id)",
    "CREATE INDEX IF NOT EXISTS idx_week_ranges_start ON week_ranges (start_date)",
]


def get_create_statement(collection: str) -> str:
    """Build the CREATE TABLE statement for a collection."""
    columns = ", ".join((*_COMMON_COLUMNS, *_COLLECTION_COLUMNS[collection]))
    return f"CREATE TABLE IF NOT EXISTS {collection} ({columns})"


async def init_db(*, db_path: str | None = None) -> None:
    """Create every collection table and index if missing."""
    conn = await db_client.get_connection(db_path=db_path)

    for collection in COLLECTIONS:
        await conn.execute(get_create_statement(collection))
    for statement in _INDEXES:
        await conn.execute(statement)
    await conn.commit()

    logger.info("Schema initialized", extra={"collections": COLLECTIONS})
