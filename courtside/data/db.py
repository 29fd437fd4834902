"""
Courtside — SQLite record store.

Implements the RecordStore port on top of SQLite. The sqlite3 driver is
synchronous, so every call runs in a worker thread via asyncio.to_thread.
The UNIQUE constraints on `availability` are what the commit coordinator
relies on when two captains write the same cell concurrently.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Iterator

from courtside.ports.record_store import (
    ConflictError,
    Eq,
    In,
    Or,
    OrderBy,
    Predicate,
    Range,
    StoreError,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS teams (
    id               TEXT PRIMARY KEY,
    name             TEXT NOT NULL,
    captain_id       TEXT,
    co_captain_id    TEXT,
    total_lines      INTEGER,
    line_match_types TEXT
);

CREATE TABLE IF NOT EXISTS roster_members (
    id         TEXT PRIMARY KEY,
    team_id    TEXT NOT NULL REFERENCES teams(id),
    full_name  TEXT NOT NULL DEFAULT '',
    user_id    TEXT,
    role       TEXT NOT NULL DEFAULT 'player',
    is_active  INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS matches (
    id                   TEXT PRIMARY KEY,
    team_id              TEXT REFERENCES teams(id),
    date                 TEXT NOT NULL,
    time                 TEXT NOT NULL DEFAULT '00:00',
    opponent_name        TEXT,
    venue                TEXT,
    is_home              INTEGER,
    recurrence_series_id TEXT
);

CREATE TABLE IF NOT EXISTS events (
    id                   TEXT PRIMARY KEY,
    kind                 TEXT NOT NULL DEFAULT 'event'
                         CHECK (kind IN ('event', 'personal_activity')),
    team_id              TEXT REFERENCES teams(id),
    date                 TEXT NOT NULL,
    time                 TEXT NOT NULL DEFAULT '00:00',
    title                TEXT,
    event_type           TEXT,
    activity_type        TEXT,
    location             TEXT,
    creator_id           TEXT,
    max_attendees        INTEGER,
    recurrence_series_id TEXT
);

CREATE TABLE IF NOT EXISTS availability (
    id               TEXT PRIMARY KEY,
    roster_member_id TEXT NOT NULL REFERENCES roster_members(id),
    match_id         TEXT REFERENCES matches(id),
    event_id         TEXT REFERENCES events(id),
    status           TEXT NOT NULL
                     CHECK (status IN ('available', 'unavailable', 'maybe', 'last_resort')),
    CHECK ((match_id IS NULL) <> (event_id IS NULL)),
    UNIQUE (roster_member_id, match_id),
    UNIQUE (roster_member_id, event_id)
);
"""


def _to_db_value(value: Any) -> Any:
    """Convert Python values to something sqlite3 stores natively."""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple, frozenset, set)):
        return ",".join(str(v) for v in value)
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value  # str-valued Enum
    return value


class SqliteRecordStore:
    """SQLite-backed implementation of the RecordStore port."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from courtside.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._columns: dict[str, set[str]] = {}
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Create the tables if they don't exist and cache their columns."""
        with self._connect() as conn:
            conn.executescript(_SCHEMA)
            tables = [
                row["name"]
                for row in conn.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table'"
                ).fetchall()
            ]
            for table in tables:
                self._columns[table] = {
                    row[1]
                    for row in conn.execute(f"PRAGMA table_info({table})").fetchall()
                }
        logger.debug("Record store initialized at %s", self._db_path)

    # ------------------------------------------------------------------
    # SQL building
    # ------------------------------------------------------------------

    def _check_column(self, table: str, column: str) -> str:
        if table not in self._columns:
            raise StoreError(f"Unknown table: {table!r}")
        if column not in self._columns[table]:
            raise StoreError(f"Unknown column {column!r} on {table!r}")
        return column

    def _predicate_sql(
        self, table: str, predicate: Predicate
    ) -> tuple[str, list]:
        if isinstance(predicate, Eq):
            col = self._check_column(table, predicate.column)
            if predicate.value is None:
                return f"{col} IS NULL", []
            return f"{col} = ?", [_to_db_value(predicate.value)]

        if isinstance(predicate, In):
            col = self._check_column(table, predicate.column)
            if not predicate.values:
                return "0", []
            marks = ", ".join("?" for _ in predicate.values)
            return f"{col} IN ({marks})", [_to_db_value(v) for v in predicate.values]

        if isinstance(predicate, Range):
            col = self._check_column(table, predicate.column)
            parts: list[str] = []
            params: list = []
            if predicate.low is not None:
                parts.append(f"{col} >= ?")
                params.append(_to_db_value(predicate.low))
            if predicate.high is not None:
                parts.append(f"{col} <= ?")
                params.append(_to_db_value(predicate.high))
            return (" AND ".join(parts) or "1"), params

        if isinstance(predicate, Or):
            if not predicate.predicates:
                return "0", []
            parts = []
            params = []
            for sub in predicate.predicates:
                sql, sub_params = self._predicate_sql(table, sub)
                parts.append(f"({sql})")
                params.extend(sub_params)
            return " OR ".join(parts), params

        raise StoreError(f"Unsupported predicate: {predicate!r}")

    def _where_sql(
        self, table: str, where: list[Predicate] | None
    ) -> tuple[str, list]:
        if not where:
            return "", []
        parts: list[str] = []
        params: list = []
        for predicate in where:
            sql, pred_params = self._predicate_sql(table, predicate)
            parts.append(f"({sql})")
            params.extend(pred_params)
        return " WHERE " + " AND ".join(parts), params

    # ------------------------------------------------------------------
    # Sync operations (run in worker threads)
    # ------------------------------------------------------------------

    def _select_sync(
        self,
        table: str,
        where: list[Predicate] | None,
        order_by: list[OrderBy] | None,
        limit: int | None,
    ) -> list[dict]:
        where_sql, params = self._where_sql(table, where)
        query = f"SELECT * FROM {table}{where_sql}"
        if order_by:
            terms = [
                f"{self._check_column(table, o.column)} {'DESC' if o.descending else 'ASC'}"
                for o in order_by
            ]
            query += " ORDER BY " + ", ".join(terms)
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        try:
            with self._connect() as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("Select on %s failed: %s", table, exc)
            raise StoreError(f"Failed to read {table}: {exc}") from exc
        return [dict(r) for r in rows]

    def _insert_sync(self, table: str, values: dict) -> dict:
        row = dict(values)
        row.setdefault("id", uuid.uuid4().hex)
        cols = [self._check_column(table, c) for c in row]
        marks = ", ".join("?" for _ in cols)
        query = f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({marks})"
        try:
            with self._connect() as conn:
                conn.execute(query, [_to_db_value(v) for v in row.values()])
                created = conn.execute(
                    f"SELECT * FROM {table} WHERE id = ?", (row["id"],)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc) or "PRIMARY KEY" in str(exc):
                raise ConflictError(f"Duplicate row in {table}: {exc}") from exc
            raise StoreError(f"Failed to insert into {table}: {exc}") from exc
        except sqlite3.Error as exc:
            logger.error("Insert into %s failed: %s", table, exc)
            raise StoreError(f"Failed to insert into {table}: {exc}") from exc
        logger.info("Inserted %s row %s", table, row["id"])
        return dict(created)

    def _update_sync(self, table: str, row_id: str, values: dict) -> dict:
        if not values:
            raise StoreError("Nothing to update")
        assignments = ", ".join(
            f"{self._check_column(table, c)} = ?" for c in values
        )
        params = [_to_db_value(v) for v in values.values()] + [row_id]
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    f"UPDATE {table} SET {assignments} WHERE id = ?", params
                )
                if cursor.rowcount == 0:
                    raise StoreError(f"No {table} row with id {row_id!r}")
                updated = conn.execute(
                    f"SELECT * FROM {table} WHERE id = ?", (row_id,)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc) or "PRIMARY KEY" in str(exc):
                raise ConflictError(f"Update of {table} {row_id} conflicts: {exc}") from exc
            raise StoreError(f"Failed to update {table} {row_id}: {exc}") from exc
        except sqlite3.Error as exc:
            logger.error("Update of %s %s failed: %s", table, row_id, exc)
            raise StoreError(f"Failed to update {table}: {exc}") from exc
        logger.info("Updated %s row %s", table, row_id)
        return dict(updated)

    def _delete_sync(self, table: str, where: list[Predicate]) -> int:
        if not where:
            raise StoreError("Refusing to delete without a predicate")
        where_sql, params = self._where_sql(table, where)
        try:
            with self._connect() as conn:
                cursor = conn.execute(f"DELETE FROM {table}{where_sql}", params)
        except sqlite3.Error as exc:
            logger.error("Delete from %s failed: %s", table, exc)
            raise StoreError(f"Failed to delete from {table}: {exc}") from exc
        if cursor.rowcount:
            logger.info("Deleted %d %s row(s)", cursor.rowcount, table)
        return cursor.rowcount

    # ------------------------------------------------------------------
    # RecordStore port
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        where: list[Predicate] | None = None,
        order_by: list[OrderBy] | None = None,
        limit: int | None = None,
    ) -> list[dict]:
        return await asyncio.to_thread(
            self._select_sync, table, where, order_by, limit
        )

    async def select_one(
        self, table: str, where: list[Predicate]
    ) -> dict | None:
        """Return the single matching row, None if there is none.

        Raises:
            StoreError: More than one row matches.
        """
        rows = await asyncio.to_thread(self._select_sync, table, where, None, 2)
        if len(rows) > 1:
            raise StoreError(f"Expected at most one {table} row, found several")
        return rows[0] if rows else None

    async def insert(self, table: str, values: dict) -> dict:
        return await asyncio.to_thread(self._insert_sync, table, values)

    async def update(self, table: str, row_id: str, values: dict) -> dict:
        return await asyncio.to_thread(self._update_sync, table, row_id, values)

    async def delete(self, table: str, where: list[Predicate]) -> int:
        return await asyncio.to_thread(self._delete_sync, table, where)
