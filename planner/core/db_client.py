"""SQLite document store client with CRUD operations."""

import asyncio
import json
import logging
import re
import threading
import uuid
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from planner.core.config import constants, settings
from planner.core.errors import DatabaseError, PartialWriteError, RecordNotFoundError


logger = logging.getLogger(__name__)

__all__ = [
    "DatabaseError",
    "PartialWriteError",
    "RecordNotFoundError",
    "close_connection",
    "create_record",
    "delete_record",
    "delete_records",
    "get_connection",
    "get_first_record",
    "get_record",
    "init_db",
    "list_all_records",
    "list_records",
    "parse_filter",
    "sanitize_param",
    "update_record",
]

# Columns stored as JSON text and decoded on read
_JSON_FIELDS = {"assignees", "flag"}


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in filter queries via json.dumps."""
    return json.dumps(str(value))[1:-1]


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _encode_value(val: Any) -> Any:
    """Convert a Python value to its SQLite storage form."""
    if isinstance(val, datetime | date):
        return val.isoformat()
    if isinstance(val, dict | list):
        return json.dumps(val)
    return val


def _decode_record(record: dict[str, Any]) -> dict[str, Any]:
    """Decode JSON columns back into Python structures."""
    decoded = record.copy()
    for key in _JSON_FIELDS:
        value = decoded.get(key)
        if isinstance(value, str) and value:
            decoded[key] = json.loads(value)
    return decoded


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


_COMPARISON = re.compile(r"""^(\w+)\s*(!=|=)\s*"((?:[^"\\]|\\.)*)"$""")


def parse_filter(filter_query: str) -> tuple[str, list[str]]:
    """Translate 'field = "value" && other != "value"' into a WHERE clause and parameters.

    Values are expected to be escaped with sanitize_param().
    """
    if not filter_query:
        return "", []

    conditions = []
    params = []
    for raw_part in filter_query.split("&&"):
        part = raw_part.strip()
        match = _COMPARISON.match(part)
        if not match:
            msg = f"Invalid filter syntax: {part}"
            raise ValueError(msg)

        field, op, value = match.groups()
        conditions.append(f"{field} {op} ?")
        params.append(json.loads(f'"{value}"'))

    return " AND ".join(conditions), params


def _parse_sort(sort: str) -> str:
    """Translate a "-field" / "+field" / "field DESC" sort into an ORDER BY clause."""
    default = "created ASC"
    if not sort:
        return default

    sort = sort.strip()
    if sort[0] in "+-":
        direction = "DESC" if sort[0] == "-" else "ASC"
        sort = f"{sort[1:]} {direction}"

    # Only allow: column_name [ASC|DESC]
    if re.match(r"^[A-Za-z_][A-Za-z0-9_]*\s*(ASC|DESC)?$", sort, re.IGNORECASE):
        return sort

    logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
    return default


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

        conn = await aiosqlite.connect(str(path), timeout=settings.store_timeout_seconds)
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

    if cache_key not in _db_connections:
        return

    try:
        async with _db_lock:
            conn = _db_connections.pop(cache_key, None)
            if conn is not None:
                await conn.close()
                logger.info("Closed SQLite connection", extra={"db_path": str(path)})
    except aiosqlite.Error as e:
        logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": str(path)})


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema by delegating to schema.init_db()."""
    from planner.core import schema

    await schema.init_db(db_path=db_path)


async def create_record(
    *,
    collection: str,
    data: dict[str, Any],
    record_id: str | None = None,
) -> dict[str, Any]:
    """Insert a new document and return it.

    When record_id is omitted a random id is generated. Inserting an id that
    already exists raises DatabaseError.
    """
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        now = _now()
        row = {**data, "id": record_id or uuid.uuid4().hex, "created": now, "updated": now}

        columns = list(row.keys())
        columns_str = ", ".join(columns)
        placeholders_str = ", ".join("?" for _ in columns)
        values = [_encode_value(row[key]) for key in columns]

        query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
        await conn.execute(query, values)
        await conn.commit()

        logger.info("Created record", extra={"collection": collection, "record_id": row["id"]})
        return await get_record(collection=collection, record_id=row["id"])
    except (DatabaseError, ValueError):
        raise
    except Exception as e:
        if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
            logger.error("Table not found", extra={"collection": collection})
            msg = f"Table '{collection}' does not exist. Call init_db() first."
            raise DatabaseError(msg) from e
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single document by ID, raising RecordNotFoundError if not found."""
    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (record_id,))
        row = await cursor.fetchone()

        if row is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        columns = [description[0] for description in cursor.description]
        record = dict(zip(columns, row, strict=True))

        logger.debug("Retrieved record", extra={"collection": collection, "record_id": record_id})
        return _decode_record(record)
    except (DatabaseError, ValueError):
        raise
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a document by ID in a single statement and return the updated document.

    An "id" key in data re-keys the document.
    """
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        payload = {**data, "updated": _now()}
        set_clause = ", ".join(f"{key} = ?" for key in payload)
        values = [_encode_value(val) for val in payload.values()]
        values.append(record_id)

        query = f"UPDATE {collection} SET {set_clause} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, values)
        await conn.commit()

        if cursor.rowcount == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return await get_record(collection=collection, record_id=data.get("id", record_id))
    except (DatabaseError, ValueError):
        raise
    except Exception as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a document by ID, raising RecordNotFoundError if not found."""
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
    except (DatabaseError, ValueError):
        raise
    except Exception as e:
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e


async def list_records(
    *,
    collection: str,
    page: int = 1,
    per_page: int = 50,
    filter_query: str = "",
    sort: str = "",
) -> list[dict[str, Any]]:
    """List documents with optional filtering, sorting, and pagination."""
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

        # id breaks ties so consecutive pages never overlap
        query = f"SELECT * FROM {collection} {where_clause} ORDER BY {order_by}, id ASC LIMIT ? OFFSET ?"  # noqa: S608 - collection is validated
        params.extend([per_page, offset])

        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()

        columns = [description[0] for description in cursor.description]
        records = [_decode_record(dict(zip(columns, row, strict=True))) for row in rows]

        logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
        return records
    except (DatabaseError, ValueError):
        raise
    except Exception as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e


async def get_first_record(*, collection: str, filter_query: str) -> dict[str, Any] | None:
    """Return the first document matching the filter, or None."""
    records = await list_records(collection=collection, filter_query=filter_query, per_page=1)
    return records[0] if records else None


async def list_all_records(*, collection: str, filter_query: str = "", sort: str = "") -> list[dict[str, Any]]:
    """List every matching document, reading DEFAULT_PER_PAGE_LIMIT rows per page until a short page."""
    records: list[dict[str, Any]] = []
    page = 1
    while True:
        batch = await list_records(
            collection=collection,
            page=page,
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
            filter_query=filter_query,
            sort=sort,
        )
        records.extend(batch)
        if len(batch) < constants.DEFAULT_PER_PAGE_LIMIT:
            return records
        page += 1


async def delete_records(*, collection: str, filter_query: str) -> int:
    """Delete every document matching the filter in one statement and return how many went.

    An empty filter is rejected so a collection is never wiped by accident.
    """
    if not filter_query:
        msg = "Refusing to delete without a filter"
        raise ValueError(msg)

    try:
        _validate_collection_name(collection)
        conn = await get_connection()

        where_clause, params = parse_filter(filter_query)
        query = f"DELETE FROM {collection} WHERE {where_clause}"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, params)
        await conn.commit()

        logger.info("Deleted records", extra={"collection": collection, "count": cursor.rowcount})
        return cursor.rowcount
    except (DatabaseError, ValueError):
        raise
    except Exception as e:
        logger.error("delete_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to delete records from {collection}: {e}"
        raise DatabaseError(msg) from e
