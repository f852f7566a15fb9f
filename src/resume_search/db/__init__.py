"""Database connection and schema management."""

from resume_search.db.backend import Cursor, Database, Row
from resume_search.db.connection import create_connection
from resume_search.db.sqlite_backend import SQLiteBackend

__all__ = ["Cursor", "Database", "Row", "SQLiteBackend", "create_connection"]
