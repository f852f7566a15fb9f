"""Learning writes: knowledge base, query log, patterns and feedback.

Every write goes through the LearningQueue; callers never wait on storage.
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from resume_search.errors import InvalidRequest
from resume_search.learning.queue import LearningQueue
from resume_search.models.candidate import RankedResult
from resume_search.models.learning import (
    FeedbackEntry,
    Interaction,
    KnowledgeBaseEntry,
    QueryLogEntry,
)
from resume_search.models.query import QueryAnalysis
from resume_search.models.search import SearchStats
from resume_search.search.embeddings import Embedder, embed_one
from resume_search.store.feedback import FeedbackStore
from resume_search.store.knowledge_base import KnowledgeBaseStore
from resume_search.store.patterns import QueryPatternStore
from resume_search.store.query_log import QueryLogStore

logger = logging.getLogger(__name__)


def _validate_text(field: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{field} is required")
    return value


def _validate_rating(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequest("rating is required and must be an integer from 1 to 5")
    if not 1 <= value <= 5:
        raise InvalidRequest("rating must be between 1 and 5")
    return value


def _validate_interaction(value: object) -> Interaction:
    if value is None:
        return Interaction.VIEW
    try:
        return Interaction(value)
    except ValueError as exc:
        allowed = ", ".join(i.value for i in Interaction)
        raise InvalidRequest(f"interaction must be one of: {allowed}") from exc


class LearningSink:
    """Schedules best-effort writes that feed the cache, analyzer and reranker."""

    def __init__(
        self,
        queue: LearningQueue,
        embedder: Embedder,
        knowledge_base: KnowledgeBaseStore,
        query_log: QueryLogStore,
        patterns: QueryPatternStore,
        feedback: FeedbackStore,
    ):
        """Initialize with the write queue, an embedder and the stores."""
        self.queue = queue
        self.embedder = embedder
        self.knowledge_base = knowledge_base
        self.query_log = query_log
        self.patterns = patterns
        self.feedback = feedback

    def learn(
        self,
        raw_query: str,
        analysis: QueryAnalysis,
        answer: str,
        results: Sequence[RankedResult],
        user_id: str,
        stats: SearchStats,
        duration_ms: float | None = None,
    ) -> None:
        """Record a successful, non-cached search."""
        references = [r.reference_id for r in results]

        async def write_knowledge_base() -> None:
            embedding = await embed_one(self.embedder, raw_query)
            await self.knowledge_base.add(
                KnowledgeBaseEntry(
                    question=raw_query,
                    embedding=embedding,
                    answer=answer,
                    references=references,
                    confidence=analysis.confidence,
                    query_features=analysis.features,
                )
            )

        async def write_query_log() -> None:
            await self.query_log.add(
                QueryLogEntry(
                    query=raw_query,
                    rewritten_query=analysis.rewritten_query,
                    results=references,
                    user_id=user_id,
                    confidence=analysis.confidence,
                    result_count=len(results),
                    query_features=analysis.features,
                    total_found=stats.total_found,
                    after_filtering=stats.after_filtering,
                    duration_ms=duration_ms,
                )
            )

        self.queue.submit("knowledge_base", write_knowledge_base)
        self.queue.submit("query_log", write_query_log)
        self._submit_pattern(raw_query, analysis, success=True)

    def record_no_results(self, raw_query: str, analysis: QueryAnalysis) -> None:
        """Count an unsuccessful use of the query's rewrite."""
        self._submit_pattern(raw_query, analysis, success=False)

    def record_cache_use(self, entry_id: int | None) -> None:
        """Bump usage bookkeeping for a served cache entry."""
        if entry_id is None:
            return

        async def write_usage() -> None:
            await self.knowledge_base.record_usage(entry_id)

        self.queue.submit("cache_usage", write_usage)

    def record_feedback(
        self,
        user_id: str,
        query: object,
        result_id: object,
        rating: object,
        interaction: object = None,
    ) -> FeedbackEntry:
        """Validate and schedule a feedback record.

        Raises InvalidRequest synchronously; the write itself is queued.
        """
        entry = FeedbackEntry(
            user_id=user_id,
            query=_validate_text("query", query),
            result_id=_validate_text("resultId", result_id),
            rating=_validate_rating(rating),
            interaction=_validate_interaction(interaction),
            timestamp=datetime.now(UTC),
        )

        async def write_feedback() -> None:
            await self.feedback.add(entry)

        self.queue.submit("feedback", write_feedback)
        logger.debug("Queued feedback from %s on %s: %d", user_id, entry.result_id, entry.rating)
        return entry

    def _submit_pattern(self, raw_query: str, analysis: QueryAnalysis, *, success: bool) -> None:
        async def write_pattern() -> None:
            await self.patterns.record_use(
                raw_query,
                analysis.rewritten_query,
                analysis.features.query_type,
                analysis.features,
                success=success,
            )

        self.queue.submit("query_pattern", write_pattern)
