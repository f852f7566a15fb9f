"""Database protocol shared by every store.

Stores talk to this protocol rather than to aiosqlite directly, so tests can
hand them an in-memory connection and the service can hand them a file-backed
one without either side knowing.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Row(Protocol):
    """A result row addressable by column name or position."""

    def __getitem__(self, key: str | int) -> Any:
        """Get a column value by name or position."""
        ...

    def keys(self) -> Any:
        """Return column names."""
        ...


@runtime_checkable
class Cursor(Protocol):
    """Async cursor returned by Database.execute()."""

    @property
    def rowcount(self) -> int:
        """Rows affected by the statement, or -1."""
        ...

    @property
    def lastrowid(self) -> int | None:
        """Rowid of the last inserted row."""
        ...

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        ...

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        ...


@runtime_checkable
class Database(Protocol):
    """Async connection used by the knowledge base, pattern, feedback and log stores.

    SQL is SQLite-flavoured with ``?`` placeholders.
    """

    @property
    def has_vector_support(self) -> bool:
        """True when the sqlite-vec extension is loaded and the vec0 table exists."""
        ...

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Execute a single statement and return a cursor."""
        ...

    async def executemany(self, sql: str, params_seq: list[tuple[Any, ...] | list[Any]]) -> None:
        """Execute a statement once per parameter set."""
        ...

    async def executescript(self, sql: str) -> None:
        """Execute a multi-statement script (DDL, VACUUM)."""
        ...

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def close(self) -> None:
        """Close the connection."""
        ...
