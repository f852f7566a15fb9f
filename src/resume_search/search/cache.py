"""Semantic cache over the knowledge base.

A linear scan of stored answers, accepting the closest one only when its
cosine similarity strictly exceeds the threshold. Entries whose embedding
length differs from the query's are skipped, not scored.
"""

import logging
from dataclasses import dataclass

from resume_search.config import get_cache_threshold
from resume_search.errors import EmbeddingUnavailable
from resume_search.models.learning import KnowledgeBaseEntry
from resume_search.models.query import QueryAnalysis
from resume_search.search.embeddings import Embedder, embed_one
from resume_search.search.similarity import comparable, cosine_similarity
from resume_search.store.knowledge_base import KnowledgeBaseStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheHit:
    """A served knowledge-base entry and how close it was."""

    entry: KnowledgeBaseEntry
    similarity: float


class SemanticCache:
    """Short-circuits the pipeline when a close-enough question was answered before."""

    def __init__(
        self,
        store: KnowledgeBaseStore,
        embedder: Embedder,
        *,
        threshold: float | None = None,
    ):
        """Initialize with the knowledge-base store and an embedder."""
        self.store = store
        self.embedder = embedder
        self.threshold = threshold if threshold is not None else get_cache_threshold()

    async def lookup(self, analysis: QueryAnalysis, raw_query: str) -> CacheHit | None:
        """Return the best entry above the threshold, or None on a miss.

        Embedding or store failures are treated as a miss.
        """
        text = analysis.rewritten_query or raw_query
        try:
            query_vec = await embed_one(self.embedder, text)
        except EmbeddingUnavailable:
            logger.warning("Cache check skipped, embedding unavailable", exc_info=True)
            return None

        try:
            entries = await self.store.scan(len(query_vec))
        except Exception:
            logger.warning("Cache check skipped, knowledge base unreadable", exc_info=True)
            return None

        best: KnowledgeBaseEntry | None = None
        best_score = self.threshold
        for entry in entries:
            if not comparable(entry.embedding, query_vec):
                continue
            score = cosine_similarity(query_vec, entry.embedding)
            if score > best_score:
                best_score = score
                best = entry

        if best is None:
            logger.debug("Cache miss for %r (%d entries scanned)", text, len(entries))
            return None
        logger.info("Cache hit for %r: entry %s, similarity %.3f", text, best.id, best_score)
        return CacheHit(entry=best, similarity=best_score)
