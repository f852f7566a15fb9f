"""Row conversion and cross-store query helpers."""

import json
from datetime import UTC, datetime
from typing import Any

from resume_search.db.backend import Database, Row
from resume_search.models.candidate import CandidateMetadata
from resume_search.models.learning import (
    FeedbackEntry,
    Interaction,
    KnowledgeBaseEntry,
    QueryLogEntry,
    QueryPattern,
)
from resume_search.models.query import QueryFeatures, QueryType
from resume_search.models.search import DocumentRecord


def row_to_kb_entry(row: Row) -> KnowledgeBaseEntry:
    """Convert a knowledge_base row."""
    return KnowledgeBaseEntry(
        id=row["id"],
        question=row["question"],
        embedding=json.loads(row["embedding"]),
        answer=row["answer"],
        references=json.loads(row["refs"]),
        confidence=row["confidence"],
        query_features=_parse_features(row["query_features"]),
        usage_count=row["usage_count"],
        created_at=_parse_ts(row["created_at"]),
        last_used=_parse_ts(row["last_used"]),
    )


def row_to_pattern(row: Row) -> QueryPattern:
    """Convert a query_patterns row."""
    return QueryPattern(
        original_query=row["original_query"],
        rewritten_query=row["rewritten_query"],
        query_type=_parse_query_type(row["query_type"]),
        total_uses=row["total_uses"],
        success_count=row["success_count"],
        success_rate=row["success_rate"],
        extracted_features=_parse_features(row["extracted_features"]),
        last_used=_parse_ts(row["last_used"]),
        created_at=_parse_ts(row["created_at"]),
    )


def row_to_feedback(row: Row) -> FeedbackEntry:
    """Convert a search_feedback row."""
    return FeedbackEntry(
        id=row["id"],
        user_id=row["user_id"],
        query=row["query"],
        result_id=row["result_id"],
        rating=row["rating"],
        interaction=Interaction(row["interaction"]),
        timestamp=_parse_ts(row["timestamp"]),
    )


def row_to_query_log(row: Row) -> QueryLogEntry:
    """Convert a query_log row."""
    return QueryLogEntry(
        id=row["id"],
        query=row["query"],
        rewritten_query=row["rewritten_query"],
        results=json.loads(row["results"]),
        user_id=row["user_id"],
        confidence=row["confidence"],
        result_count=row["result_count"],
        query_features=_parse_features(row["query_features"]),
        total_found=row["total_found"],
        after_filtering=row["after_filtering"],
        duration_ms=row["duration_ms"],
        timestamp=_parse_ts(row["timestamp"]),
    )


def row_to_document(row: Row) -> DocumentRecord:
    """Convert a documents row."""
    metadata = CandidateMetadata.model_validate(json.loads(row["metadata"]))
    if metadata.processed_at is None:
        metadata = metadata.model_copy(update={"processed_at": _parse_ts(row["processed_at"])})
    return DocumentRecord(
        id=row["id"],
        name=row["name"],
        content=row["content"],
        metadata=metadata,
    )


async def get_db_stats(db: Database) -> dict[str, Any]:
    """Record counts per store."""
    stats: dict[str, Any] = {}
    for table in ("knowledge_base", "query_patterns", "search_feedback", "query_log", "documents"):
        cursor = await db.execute(f"SELECT COUNT(*) AS cnt FROM {table}")  # noqa: S608
        row = await cursor.fetchone()
        stats[table] = row["cnt"] if row else 0

    cursor = await db.execute(
        "SELECT COALESCE(SUM(usage_count), 0) AS served,"
        " SUM(CASE WHEN usage_count = 0 THEN 1 ELSE 0 END) AS never_served"
        " FROM knowledge_base"
    )
    row = await cursor.fetchone()
    stats["cache_serves"] = row["served"] if row else 0
    stats["cache_never_served"] = (row["never_served"] or 0) if row else 0

    cursor = await db.execute("SELECT AVG(rating) AS avg_rating FROM search_feedback")
    row = await cursor.fetchone()
    stats["avg_rating"] = round(row["avg_rating"], 2) if row and row["avg_rating"] else None
    return stats


def _parse_features(raw: str | None) -> QueryFeatures:
    if not raw:
        return QueryFeatures()
    return QueryFeatures.model_validate_json(raw)


def _parse_query_type(raw: str) -> QueryType:
    try:
        return QueryType(raw)
    except ValueError:
        return QueryType.GENERAL


def _parse_ts(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def now_iso() -> str:
    """Current UTC time in ISO format."""
    return datetime.now(UTC).isoformat()
