"""Audit log of successful searches."""

import json

from resume_search.db.backend import Database
from resume_search.db.queries import now_iso, row_to_query_log
from resume_search.models.learning import QueryLogEntry


class QueryLogStore:
    """Append-only query log."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def add(self, entry: QueryLogEntry) -> int:
        """Append a log record and return its id."""
        cursor = await self.db.execute(
            """INSERT INTO query_log
            (query, rewritten_query, results, user_id, confidence, result_count,
             query_features, total_found, after_filtering, duration_ms, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                entry.query,
                entry.rewritten_query,
                json.dumps(entry.results),
                entry.user_id,
                entry.confidence,
                entry.result_count,
                entry.query_features.model_dump_json(),
                entry.total_found,
                entry.after_filtering,
                entry.duration_ms,
                entry.timestamp.isoformat() if entry.timestamp else now_iso(),
            ),
        )
        await self.db.commit()
        return cursor.lastrowid or 0

    async def recent(self, user_id: str | None = None, limit: int = 20) -> list[QueryLogEntry]:
        """Most recent log records, optionally for one user."""
        if user_id is None:
            cursor = await self.db.execute(
                "SELECT * FROM query_log ORDER BY timestamp DESC, id DESC LIMIT ?", (limit,)
            )
        else:
            cursor = await self.db.execute(
                """SELECT * FROM query_log WHERE user_id = ?
                ORDER BY timestamp DESC, id DESC LIMIT ?""",
                (user_id, limit),
            )
        rows = await cursor.fetchall()
        return [row_to_query_log(row) for row in rows]
