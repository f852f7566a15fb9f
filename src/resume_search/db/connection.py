"""Database connection setup with sqlite-vec."""

import logging
from pathlib import Path

import aiosqlite
import sqlite_vec

from resume_search.config import get_db_path
from resume_search.db.sqlite_backend import SQLiteBackend

logger = logging.getLogger(__name__)


async def create_connection(
    db_path: Path | str | None = None, *, embedding_dim: int = 1024
) -> SQLiteBackend:
    """Open the database, load sqlite-vec and apply the schema.

    Pass ":memory:" for an in-memory database (used by tests).
    """
    db_path = str(db_path or get_db_path())
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row

    # WAL lets cache scans read while background learning writes land
    await conn.execute("PRAGMA journal_mode=WAL")

    vec_loaded = False
    try:

        def _load_vec() -> None:
            conn._conn.enable_load_extension(True)
            sqlite_vec.load(conn._conn)
            conn._conn.enable_load_extension(False)

        await conn._execute(_load_vec)  # type: ignore[no-untyped-call]
        vec_loaded = True
        logger.debug("sqlite-vec extension loaded")
    except Exception:
        logger.warning("sqlite-vec extension not available", exc_info=True)

    db = SQLiteBackend(conn, vec_loaded=vec_loaded)
    await db.apply_schema(embedding_dim=embedding_dim)
    logger.info("Opened database at %s", db_path)
    return db
