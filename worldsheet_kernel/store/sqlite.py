"""
SQLite Worksheet Store — persistent implementation of the store contract.

One row per worksheet; the form payload is stored as JSON text and is
opaque to the store. Queryable by id and by (world, tool-type).
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from worldsheet_kernel.models.worksheet import Worksheet
from worldsheet_kernel.store.base import WorksheetNotFound

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqliteWorksheetStore:
    """
    Worksheet store over SQLite.
    Prototype default is an in-memory database; pass a path to persist.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the worksheets table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS worksheets (
                id TEXT PRIMARY KEY,
                world_id TEXT NOT NULL,
                tool_type TEXT NOT NULL,
                title TEXT,
                data_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_worksheets_world_tool
            ON worksheets(world_id, tool_type)
        """)
        self._conn.commit()

    def _deserialize(self, row: sqlite3.Row) -> Worksheet:
        return Worksheet.model_validate({
            "id": row["id"],
            "world_id": row["world_id"],
            "tool_type": row["tool_type"],
            "title": row["title"],
            "data": json.loads(row["data_json"]),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        })

    def fetch_by_id(self, worksheet_id: str) -> Optional[Worksheet]:
        row = self._conn.execute(
            "SELECT * FROM worksheets WHERE id = ?", (worksheet_id,)
        ).fetchone()
        return self._deserialize(row) if row else None

    def fetch_by_world_and_tool(self, world_id: str, tool_type: str) -> List[Worksheet]:
        """Worksheets of one tool in one world, most recently updated first."""
        rows = self._conn.execute(
            "SELECT * FROM worksheets WHERE world_id = ? AND tool_type = ? "
            "ORDER BY updated_at DESC, rowid DESC",
            (world_id, tool_type),
        ).fetchall()
        return [self._deserialize(r) for r in rows]

    def create(
        self,
        world_id: str,
        tool_type: str,
        title: Optional[str] = None,
        data: Optional[dict] = None,
        worksheet_id: Optional[str] = None,
    ) -> Worksheet:
        now = _utcnow().isoformat(timespec="microseconds")
        worksheet_id = worksheet_id or str(uuid4())
        self._conn.execute(
            """
            INSERT INTO worksheets (
                id, world_id, tool_type, title, data_json, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                worksheet_id,
                world_id,
                tool_type,
                title,
                json.dumps(data or {}),
                now,
                now,
            ),
        )
        self._conn.commit()
        logger.debug("Created %s worksheet %s", tool_type, worksheet_id)
        return self.fetch_by_id(worksheet_id)

    def update(
        self,
        worksheet_id: str,
        title: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Worksheet:
        current = self.fetch_by_id(worksheet_id)
        if current is None:
            raise WorksheetNotFound(worksheet_id)

        self._conn.execute(
            "UPDATE worksheets SET title = ?, data_json = ?, updated_at = ? WHERE id = ?",
            (
                title if title is not None else current.title,
                json.dumps(data if data is not None else current.data),
                max(_utcnow(), current.updated_at).isoformat(timespec="microseconds"),
                worksheet_id,
            ),
        )
        self._conn.commit()
        return self.fetch_by_id(worksheet_id)

    def delete(self, worksheet_id: str) -> None:
        cursor = self._conn.execute(
            "DELETE FROM worksheets WHERE id = ?", (worksheet_id,)
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            raise WorksheetNotFound(worksheet_id)
        logger.debug("Deleted worksheet %s", worksheet_id)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
