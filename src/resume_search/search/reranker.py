"""Multi-signal reranking of retrieved candidates.

final = 0.5 * raw + 0.2 * feedback + 0.2 * query + 0.1 * recency
"""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from resume_search.config import get_feedback_window, get_recency_horizon_days
from resume_search.models.base import clamp_unit
from resume_search.models.candidate import RankedResult, SearchCandidate
from resume_search.models.learning import FeedbackEntry
from resume_search.models.query import QueryAnalysis
from resume_search.store.feedback import FeedbackStore

logger = logging.getLogger(__name__)

RAW_WEIGHT = 0.5
FEEDBACK_WEIGHT = 0.2
QUERY_WEIGHT = 0.2
RECENCY_WEIGHT = 0.1

NEUTRAL_FEEDBACK = 0.5


def feedback_score(candidate: SearchCandidate, feedback: Sequence[FeedbackEntry]) -> float:
    """Mean rating / 5 over feedback naming this candidate; 0.5 if none."""
    ids = candidate.identifiers
    ratings = [f.rating for f in feedback if f.result_id in ids]
    if not ratings:
        return NEUTRAL_FEEDBACK
    return (sum(ratings) / len(ratings)) / 5


def query_score(candidate: SearchCandidate, analysis: QueryAnalysis) -> float:
    """0.5 base, plus up to 0.3 for skill matches and 0.2 for role matches."""
    score = 0.5
    text = candidate.metadata.serialized()
    skills = analysis.features.skills
    roles = analysis.features.roles
    if skills:
        matched = sum(1 for s in skills if s.lower() in text)
        score += 0.3 * (matched / len(skills))
    if roles:
        matched = sum(1 for r in roles if r.lower() in text)
        score += 0.2 * (matched / len(roles))
    return min(score, 1.0)


def recency_score(
    candidate: SearchCandidate,
    now: datetime | None = None,
    horizon_days: float = 180,
) -> float:
    """Linear decay from 1 to 0 over the horizon. Undated documents score 1."""
    now = now or datetime.now(UTC)
    stamp = candidate.metadata.timestamp
    if stamp is None:
        return 1.0
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=UTC)
    days = (now - stamp).total_seconds() / 86400
    return clamp_unit(1 - days / horizon_days)


def combine(raw: float, feedback: float, query: float, recency: float) -> float:
    """Weighted sum of the four signals."""
    return (
        RAW_WEIGHT * raw
        + FEEDBACK_WEIGHT * feedback
        + QUERY_WEIGHT * query
        + RECENCY_WEIGHT * recency
    )


class Reranker:
    """Reorders candidates by combined score. Never raises."""

    def __init__(
        self,
        feedback: FeedbackStore,
        *,
        feedback_window: int | None = None,
        horizon_days: float | None = None,
    ):
        """Initialize with the feedback store."""
        self.feedback = feedback
        self.feedback_window = (
            feedback_window if feedback_window is not None else get_feedback_window()
        )
        self.horizon_days = (
            horizon_days if horizon_days is not None else get_recency_horizon_days()
        )

    async def rerank(
        self,
        candidates: Sequence[SearchCandidate],
        raw_query: str,
        user_id: str,
        analysis: QueryAnalysis,
    ) -> list[RankedResult]:
        """Score and sort candidates, best first; ties keep retrieval order.

        On any failure the candidates come back in retrieval order with
        final_score equal to the raw score.
        """
        try:
            history = await self.feedback.recent_for_user(user_id, self.feedback_window)
            now = datetime.now(UTC)
            ranked: list[RankedResult] = []
            for candidate in candidates:
                fb = feedback_score(candidate, history)
                qs = query_score(candidate, analysis)
                rs = recency_score(candidate, now, self.horizon_days)
                ranked.append(
                    RankedResult(
                        id=candidate.id,
                        raw_score=candidate.raw_score,
                        metadata=candidate.metadata,
                        feedback_score=fb,
                        query_score=qs,
                        recency_score=rs,
                        final_score=combine(candidate.raw_score, fb, qs, rs),
                    )
                )
        except Exception:
            logger.warning(
                "Reranking failed for %r, keeping retrieval order", raw_query, exc_info=True
            )
            return [
                RankedResult(
                    id=c.id, raw_score=c.raw_score, metadata=c.metadata, final_score=c.raw_score
                )
                for c in candidates
            ]

        # sorted() is stable, so equal scores keep retrieval order
        return sorted(ranked, key=lambda r: r.final_score, reverse=True)
