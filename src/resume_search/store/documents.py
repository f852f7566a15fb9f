"""Document records used to rebuild references on a cache hit."""

import logging
from collections.abc import Sequence

from resume_search.db.backend import Database
from resume_search.db.queries import now_iso, row_to_document
from resume_search.models.search import DocumentRecord

logger = logging.getLogger(__name__)


class DocumentStore:
    """Documents keyed by id and resolvable by display name."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def upsert(self, record: DocumentRecord) -> None:
        """Insert or replace a document."""
        processed = record.metadata.timestamp
        await self.db.execute(
            """INSERT INTO documents (id, name, content, metadata, processed_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                content = excluded.content,
                metadata = excluded.metadata,
                processed_at = excluded.processed_at""",
            (
                record.id,
                record.name,
                record.content,
                record.metadata.model_dump_json(by_alias=True, exclude_none=True),
                processed.isoformat() if processed else now_iso(),
            ),
        )
        await self.db.commit()

    async def get_many(self, ids: Sequence[str]) -> dict[str, DocumentRecord]:
        """Fetch documents by id. Missing ids are absent from the result."""
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        cursor = await self.db.execute(
            f"SELECT * FROM documents WHERE id IN ({placeholders})",  # noqa: S608
            tuple(ids),
        )
        rows = await cursor.fetchall()
        return {row["id"]: row_to_document(row) for row in rows}

    async def lookup(self, ids: Sequence[str]) -> list[DocumentRecord]:
        """Resolve reference identifiers, matching document id or name.

        Results follow the order of ``ids``; unknown identifiers are skipped
        and a document matched by several identifiers appears once.
        """
        if not ids:
            return []
        placeholders = ",".join("?" for _ in ids)
        cursor = await self.db.execute(
            f"SELECT * FROM documents WHERE id IN ({placeholders})"  # noqa: S608
            f" OR name IN ({placeholders})",
            tuple(ids) + tuple(ids),
        )
        rows = await cursor.fetchall()
        by_key: dict[str, DocumentRecord] = {}
        for row in rows:
            record = row_to_document(row)
            by_key.setdefault(record.id, record)
            by_key.setdefault(record.name, record)

        found: list[DocumentRecord] = []
        seen: set[str] = set()
        for ident in ids:
            record = by_key.get(ident)
            if record is None or record.id in seen:
                continue
            seen.add(record.id)
            found.append(record)
        logger.debug("Resolved %d of %d references", len(found), len(ids))
        return found

    async def count(self) -> int:
        """Number of stored documents."""
        cursor = await self.db.execute("SELECT COUNT(*) AS cnt FROM documents")
        row = await cursor.fetchone()
        return row["cnt"] if row else 0
