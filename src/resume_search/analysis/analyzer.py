"""Query analysis: features, rewrite and confidence in one pass."""

import logging

from resume_search.analysis.confidence import score_confidence
from resume_search.analysis.features import extract_features
from resume_search.analysis.rewriter import QueryRewriter, fallback_rewrite
from resume_search.models.query import QueryAnalysis, QueryFeatures

logger = logging.getLogger(__name__)


class QueryAnalyzer:
    """Produces the QueryAnalysis consumed by every later stage."""

    def __init__(self, rewriter: QueryRewriter):
        """Initialize with a query rewriter."""
        self.rewriter = rewriter

    async def analyze(self, query: str, user_id: str) -> QueryAnalysis:
        """Analyze a raw query. Never raises."""
        try:
            features = extract_features(query)
        except Exception:
            logger.warning("Feature extraction failed for %r", query, exc_info=True)
            features = QueryFeatures(word_count=len(query.split()))

        try:
            rewritten = await self.rewriter.rewrite(query)
        except Exception:
            logger.warning("Rewrite raised for %r, using fallback", query, exc_info=True)
            rewritten = fallback_rewrite(query)

        analysis = QueryAnalysis(
            features=features,
            rewritten_query=rewritten or query,
            confidence=score_confidence(features),
        )
        logger.debug(
            "Analyzed %r for %s: type=%s confidence=%.2f rewrite=%r",
            query,
            user_id,
            features.query_type,
            analysis.confidence,
            analysis.rewritten_query,
        )
        return analysis
