"""Query pattern store: rewrite history per original query."""

import logging

from resume_search.db.backend import Database
from resume_search.db.queries import now_iso, row_to_pattern
from resume_search.models.learning import QueryPattern
from resume_search.models.query import QueryFeatures, QueryType

logger = logging.getLogger(__name__)


class QueryPatternStore:
    """Upserted once per distinct original query."""

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def record_use(
        self,
        original_query: str,
        rewritten_query: str,
        query_type: QueryType,
        features: QueryFeatures,
        *,
        success: bool,
    ) -> None:
        """Count one use of a query, successful or not, and refresh its latest rewrite."""
        now = now_iso()
        hit = 1 if success else 0
        await self.db.execute(
            """INSERT INTO query_patterns
            (original_query, rewritten_query, query_type, total_uses, success_count,
             success_rate, extracted_features, last_used, created_at)
            VALUES (?, ?, ?, 1, ?, ?, ?, ?, ?)
            ON CONFLICT(original_query) DO UPDATE SET
                rewritten_query = excluded.rewritten_query,
                query_type = excluded.query_type,
                total_uses = total_uses + 1,
                success_count = success_count + excluded.success_count,
                success_rate = MIN(1.0, MAX(0.0,
                    CAST(success_count + excluded.success_count AS REAL) / (total_uses + 1))),
                extracted_features = excluded.extracted_features,
                last_used = excluded.last_used""",
            (
                original_query,
                rewritten_query,
                query_type.value,
                hit,
                float(hit),
                features.model_dump_json(),
                now,
                now,
            ),
        )
        await self.db.commit()

    async def get(self, original_query: str) -> QueryPattern | None:
        """Fetch the pattern for an original query."""
        cursor = await self.db.execute(
            "SELECT * FROM query_patterns WHERE original_query = ?", (original_query,)
        )
        row = await cursor.fetchone()
        return row_to_pattern(row) if row else None

    async def top_successful(self, limit: int = 3) -> list[QueryPattern]:
        """Patterns with at least one success, highest success rate first."""
        cursor = await self.db.execute(
            """SELECT * FROM query_patterns
            WHERE success_count > 0
            ORDER BY success_rate DESC, total_uses DESC, last_used DESC
            LIMIT ?""",
            (limit,),
        )
        rows = await cursor.fetchall()
        return [row_to_pattern(row) for row in rows]
