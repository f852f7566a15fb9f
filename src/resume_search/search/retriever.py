"""Candidate retrieval: one KNN query, a relevance floor, and keyword overlap."""

import logging
from dataclasses import dataclass, field

from resume_search.config import get_relevance_floor, get_retrieval_top_k
from resume_search.errors import EmbeddingUnavailable, IndexUnavailable
from resume_search.models.candidate import SearchCandidate
from resume_search.models.query import QueryAnalysis
from resume_search.models.search import SearchStats
from resume_search.search.embeddings import Embedder, embed_one
from resume_search.search.index import VectorIndex

logger = logging.getLogger(__name__)


@dataclass
class Retrieval:
    """Surviving candidates and the counts at each filtering stage."""

    candidates: list[SearchCandidate] = field(default_factory=list)
    stats: SearchStats = field(default_factory=SearchStats)


def keyword_overlap(candidate: SearchCandidate, terms: tuple[str, ...]) -> bool:
    """True if the candidate's serialized metadata mentions any term."""
    text = candidate.metadata.serialized()
    return any(term.lower() in text for term in terms)


class Retriever:
    """Turns a query analysis into filtered index candidates."""

    def __init__(
        self,
        embedder: Embedder,
        index: VectorIndex,
        *,
        top_k: int | None = None,
        relevance_floor: float | None = None,
    ):
        """Initialize with an embedder and a vector index."""
        self.embedder = embedder
        self.index = index
        self.top_k = top_k if top_k is not None else get_retrieval_top_k()
        self.relevance_floor = (
            relevance_floor if relevance_floor is not None else get_relevance_floor()
        )

    async def retrieve(self, analysis: QueryAnalysis) -> Retrieval:
        """Embed the rewritten query and filter the nearest matches.

        Embedding or index failure yields no candidates and zeroed counts.
        """
        stats = SearchStats(confidence=analysis.confidence)
        try:
            vector = await embed_one(self.embedder, analysis.rewritten_query)
            matches = await self.index.query(vector, self.top_k)
        except (EmbeddingUnavailable, IndexUnavailable):
            logger.warning("Retrieval failed, returning no candidates", exc_info=True)
            return Retrieval(stats=stats)

        stats.total_found = len(matches)
        candidates = [m for m in matches if m.raw_score > self.relevance_floor]
        stats.after_filtering = len(candidates)

        terms = analysis.features.filter_terms
        if terms:
            candidates = [c for c in candidates if keyword_overlap(c, terms)]
        stats.final_results = len(candidates)

        logger.info(
            "Retrieved %d matches, %d above floor, %d after keyword filter",
            stats.total_found,
            stats.after_filtering,
            stats.final_results,
        )
        return Retrieval(candidates=candidates, stats=stats)
