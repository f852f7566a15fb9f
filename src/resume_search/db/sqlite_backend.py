"""SQLite implementation of the Database protocol."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import aiosqlite

    from resume_search.db.backend import Cursor, Row

logger = logging.getLogger(__name__)


class SQLiteCursor:
    """Wraps aiosqlite.Cursor to satisfy the Cursor protocol."""

    def __init__(self, cursor: aiosqlite.Cursor) -> None:
        """Initialize with an aiosqlite cursor."""
        self._cursor = cursor

    @property
    def rowcount(self) -> int:
        """Rows affected by the statement, or -1."""
        rc = self._cursor.rowcount
        return rc if rc is not None else -1

    @property
    def lastrowid(self) -> int | None:
        """Rowid of the last inserted row."""
        return self._cursor.lastrowid

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        return await self._cursor.fetchone()

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        return list(await self._cursor.fetchall())


class SQLiteBackend:
    """Pass-through wrapper around a single aiosqlite connection.

    One connection is shared by every store in the process; aiosqlite runs
    statements on its own thread in submission order, so concurrent requests
    interleave at statement granularity without a lock held across I/O.
    """

    def __init__(self, conn: aiosqlite.Connection, *, vec_loaded: bool = False) -> None:
        """Initialize with an aiosqlite connection."""
        self._conn = conn
        self._vec_loaded = vec_loaded
        self._vec_ready = False

    @property
    def has_vector_support(self) -> bool:
        """True when the sqlite-vec extension is loaded and the vec0 table exists."""
        return self._vec_ready

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single statement and return a cursor."""
        cursor = await self._conn.execute(sql, params)
        return SQLiteCursor(cursor)

    async def executemany(self, sql: str, params_seq: list[tuple[Any, ...] | list[Any]]) -> None:
        """Execute a statement once per parameter set."""
        await self._conn.executemany(sql, params_seq)

    async def executescript(self, sql: str) -> None:
        """Execute a multi-statement script (DDL, VACUUM)."""
        await self._conn.executescript(sql)

    async def commit(self) -> None:
        """Commit the current transaction."""
        await self._conn.commit()

    async def close(self) -> None:
        """Close the connection."""
        await self._conn.close()

    async def apply_schema(self, *, embedding_dim: int = 1024) -> None:
        """Create the learning-store tables and, if possible, the vector table."""
        from resume_search.db.schema import apply_schema, apply_vec_schema

        await apply_schema(self)

        if not self._vec_loaded:
            logger.warning("sqlite-vec not loaded, local vector index disabled")
            return
        try:
            await apply_vec_schema(self, dim=embedding_dim)
            self._vec_ready = True
        except Exception:
            logger.warning("sqlite-vec schema not applied, local vector index disabled")
