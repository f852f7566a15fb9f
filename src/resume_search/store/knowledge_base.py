"""Knowledge-base store backing the semantic cache."""

import json
import logging
from datetime import UTC, datetime, timedelta

from resume_search.db.backend import Database
from resume_search.db.queries import now_iso, row_to_kb_entry
from resume_search.models.learning import KnowledgeBaseEntry

logger = logging.getLogger(__name__)


class KnowledgeBaseStore:
    """Append-mostly store of answered queries keyed by embedding."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def add(self, entry: KnowledgeBaseEntry) -> int:
        """Insert an entry and return its id."""
        created = entry.created_at.isoformat() if entry.created_at else now_iso()
        cursor = await self.db.execute(
            """INSERT INTO knowledge_base
            (question, embedding, embedding_dim, answer, refs, confidence,
             query_features, usage_count, created_at, last_used)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                entry.question,
                json.dumps(entry.embedding),
                len(entry.embedding),
                entry.answer,
                json.dumps(entry.references),
                entry.confidence,
                entry.query_features.model_dump_json(),
                entry.usage_count,
                created,
                entry.last_used.isoformat() if entry.last_used else None,
            ),
        )
        await self.db.commit()
        entry_id = cursor.lastrowid or 0
        logger.debug("Stored knowledge-base entry %d for %r", entry_id, entry.question)
        return entry_id

    async def scan(self, embedding_dim: int) -> list[KnowledgeBaseEntry]:
        """All entries whose embedding has the given length."""
        cursor = await self.db.execute(
            "SELECT * FROM knowledge_base WHERE embedding_dim = ? ORDER BY id",
            (embedding_dim,),
        )
        rows = await cursor.fetchall()
        return [row_to_kb_entry(row) for row in rows]

    async def get(self, entry_id: int) -> KnowledgeBaseEntry | None:
        """Fetch a single entry by id."""
        cursor = await self.db.execute("SELECT * FROM knowledge_base WHERE id = ?", (entry_id,))
        row = await cursor.fetchone()
        return row_to_kb_entry(row) if row else None

    async def record_usage(self, entry_id: int) -> None:
        """Bump usage_count and last_used for a served entry."""
        await self.db.execute(
            "UPDATE knowledge_base SET usage_count = usage_count + 1, last_used = ? WHERE id = ?",
            (now_iso(), entry_id),
        )
        await self.db.commit()

    async def prune_unused(self, older_than_days: int) -> int:
        """Delete never-served entries created more than N days ago. Returns count."""
        cutoff = (datetime.now(UTC) - timedelta(days=older_than_days)).isoformat()
        cursor = await self.db.execute(
            "DELETE FROM knowledge_base WHERE usage_count = 0 AND created_at < ?",
            (cutoff,),
        )
        await self.db.commit()
        return max(cursor.rowcount, 0)
