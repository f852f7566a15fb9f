"""Search orchestration as an explicit state machine.

ANALYZE -> CACHE_CHECK -> RESPOND_CACHED
                       -> RETRIEVE -> FILTER -> RERANK -> GENERATE_ANSWER -> LEARN -> RESPOND
                                           -> NO_RESULTS

Every run ends in exactly one terminal state and returns one SearchResponse.
Collaborator failures are absorbed by the stage that calls them; anything
that still escapes is turned into an empty response with zero confidence.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from resume_search.analysis.analyzer import QueryAnalyzer
from resume_search.config import get_result_limit
from resume_search.errors import InvalidRequest
from resume_search.learning.sink import LearningSink
from resume_search.llm.provider import LLMProvider
from resume_search.models.candidate import RankedResult, SearchCandidate
from resume_search.models.learning import FeedbackEntry
from resume_search.models.query import QueryAnalysis, QueryFeatures
from resume_search.models.search import FeedbackRequest, Reference, SearchResponse, SearchStats
from resume_search.pipeline.answer import (
    DEFAULT_SUGGESTIONS,
    NO_RESULTS_ANSWER,
    cached_references,
    compose_answer,
    result_references,
    suggest_alternatives,
)
from resume_search.search.cache import CacheHit, SemanticCache
from resume_search.search.retriever import Retriever
from resume_search.search.reranker import Reranker
from resume_search.store.documents import DocumentStore

logger = logging.getLogger(__name__)

ERROR_ANSWER = "Error processing search query. Please try again."


class SearchState(StrEnum):
    """Pipeline states."""

    ANALYZE = "analyze"
    CACHE_CHECK = "cache_check"
    RESPOND_CACHED = "respond_cached"
    RETRIEVE = "retrieve"
    FILTER = "filter"
    RERANK = "rerank"
    GENERATE_ANSWER = "generate_answer"
    LEARN = "learn"
    RESPOND = "respond"
    NO_RESULTS = "no_results"


TERMINAL_STATES = frozenset(
    {SearchState.RESPOND_CACHED, SearchState.RESPOND, SearchState.NO_RESULTS}
)


@dataclass
class SearchRun:
    """Per-request working state. Never shared between requests."""

    query: str
    user_id: str
    state: SearchState = SearchState.ANALYZE
    started: float = field(default_factory=time.perf_counter)
    analysis: QueryAnalysis | None = None
    hit: CacheHit | None = None
    candidates: list[SearchCandidate] = field(default_factory=list)
    ranked: list[RankedResult] = field(default_factory=list)
    stats: SearchStats = field(default_factory=SearchStats)
    answer: str = ""
    response: SearchResponse | None = None
    trail: list[SearchState] = field(default_factory=list)

    def require_analysis(self) -> QueryAnalysis:
        """The analysis from the ANALYZE state. Raises RuntimeError before it ran."""
        if self.analysis is None:
            raise RuntimeError(f"No query analysis in state {self.state}")
        return self.analysis

    @property
    def duration_ms(self) -> float:
        """Milliseconds since the run started."""
        return (time.perf_counter() - self.started) * 1000


def empty_analysis(query: str, confidence: float = 0.0) -> QueryAnalysis:
    """Analysis used when the real one is unavailable."""
    return QueryAnalysis(
        features=QueryFeatures(word_count=len(query.split())),
        rewritten_query=query,
        confidence=confidence,
    )


class SearchOrchestrator:
    """Sequences analysis, cache, retrieval, reranking, answering and learning."""

    def __init__(
        self,
        analyzer: QueryAnalyzer,
        cache: SemanticCache,
        retriever: Retriever,
        reranker: Reranker,
        sink: LearningSink,
        documents: DocumentStore,
        llm: LLMProvider | None = None,
        *,
        result_limit: int | None = None,
    ):
        """Initialize with every pipeline stage."""
        self.analyzer = analyzer
        self.cache = cache
        self.retriever = retriever
        self.reranker = reranker
        self.sink = sink
        self.documents = documents
        self.llm = llm
        self.result_limit = result_limit if result_limit is not None else get_result_limit()
        self._handlers: dict[SearchState, Callable[[SearchRun], Awaitable[SearchState]]] = {
            SearchState.ANALYZE: self._analyze,
            SearchState.CACHE_CHECK: self._cache_check,
            SearchState.RESPOND_CACHED: self._respond_cached,
            SearchState.RETRIEVE: self._retrieve,
            SearchState.FILTER: self._filter,
            SearchState.RERANK: self._rerank,
            SearchState.GENERATE_ANSWER: self._generate_answer,
            SearchState.LEARN: self._learn,
            SearchState.RESPOND: self._respond,
            SearchState.NO_RESULTS: self._no_results,
        }

    async def search(
        self,
        query: object,
        user_id: str,
        feedback: FeedbackRequest | dict[str, Any] | None = None,
    ) -> SearchResponse:
        """Run one search. Raises only InvalidRequest."""
        if not isinstance(query, str) or not query:
            raise InvalidRequest("Valid query string is required")

        if feedback is not None:
            self._record_inline_feedback(user_id, feedback)

        run = SearchRun(query=query, user_id=user_id)
        try:
            return await self._execute(run)
        except Exception:
            logger.exception("Search failed in state %s for %r", run.state, query)
            return SearchResponse(
                answer=ERROR_ANSWER,
                query_analysis=empty_analysis(query),
                search_stats=SearchStats(confidence=0.0),
                suggestions=list(DEFAULT_SUGGESTIONS),
            )

    def record_feedback(
        self,
        user_id: str,
        query: object,
        result_id: object,
        rating: object,
        interaction: object = None,
    ) -> FeedbackEntry:
        """Validate and queue explicit feedback. Raises InvalidRequest."""
        return self.sink.record_feedback(user_id, query, result_id, rating, interaction)

    async def health(self) -> dict[str, Any]:
        """Generation provider availability and learning queue state."""
        available = False
        if self.llm is not None:
            available = await self.llm.is_available()
        queue = self.sink.queue
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat(),
            "generation": {
                "available": available,
                "provider": getattr(self.llm, "provider", "none"),
                "model": getattr(self.llm, "model", "unknown"),
                "baseUrl": getattr(self.llm, "base_url", "unknown"),
            },
            "learningQueue": {
                "running": queue.running,
                "pending": queue.pending,
                "failed": queue.failed,
                "dropped": queue.dropped,
            },
        }

    async def _execute(self, run: SearchRun) -> SearchResponse:
        while True:
            run.trail.append(run.state)
            next_state = await self._handlers[run.state](run)
            if run.state in TERMINAL_STATES:
                break
            logger.debug("%s -> %s", run.state, next_state)
            run.state = next_state

        if run.response is None:
            raise RuntimeError(f"Terminal state {run.state} produced no response")
        logger.info(
            "Search %r for %s finished in %s after %.0fms (%d references)",
            run.query,
            run.user_id,
            run.state,
            run.duration_ms,
            len(run.response.references),
        )
        return run.response

    def _record_inline_feedback(
        self, user_id: str, feedback: FeedbackRequest | dict[str, Any]
    ) -> None:
        if isinstance(feedback, FeedbackRequest):
            fields = feedback.model_dump()
        else:
            fields = {
                "query": feedback.get("query"),
                "result_id": feedback.get("resultId", feedback.get("result_id")),
                "rating": feedback.get("rating"),
                "interaction": feedback.get("interaction"),
            }
        try:
            self.sink.record_feedback(user_id, **fields)
        except InvalidRequest as exc:
            logger.warning("Ignoring invalid feedback attached to search: %s", exc)

    # -- states -------------------------------------------------------------

    async def _analyze(self, run: SearchRun) -> SearchState:
        try:
            run.analysis = await self.analyzer.analyze(run.query, run.user_id)
        except Exception:
            logger.warning("Analysis failed for %r", run.query, exc_info=True)
            run.analysis = empty_analysis(run.query, confidence=0.5)
        run.stats = SearchStats(confidence=run.analysis.confidence)
        return SearchState.CACHE_CHECK

    async def _cache_check(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        run.hit = await self.cache.lookup(analysis, run.query)
        return SearchState.RESPOND_CACHED if run.hit else SearchState.RETRIEVE

    async def _respond_cached(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        hit = run.hit
        if hit is None:
            raise RuntimeError("Cached response requested without a cache hit")
        entry = hit.entry
        references: list[Reference] = []
        if entry.references:
            try:
                records = await self.documents.lookup(entry.references)
                references = cached_references(records, hit.similarity)
            except Exception:
                logger.warning("Could not rebuild cached references", exc_info=True)

        count = len(references)
        run.response = SearchResponse(
            answer=entry.answer,
            references=references,
            cached=True,
            query_analysis=analysis,
            search_stats=SearchStats(
                total_found=count,
                after_filtering=count,
                final_results=count,
                confidence=hit.similarity,
            ),
            suggestions=[],
        )
        self.sink.record_cache_use(entry.id)
        return SearchState.RESPOND_CACHED

    async def _retrieve(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        retrieval = await self.retriever.retrieve(analysis)
        run.candidates = retrieval.candidates
        run.stats = retrieval.stats
        return SearchState.FILTER

    async def _filter(self, run: SearchRun) -> SearchState:
        return SearchState.RERANK if run.candidates else SearchState.NO_RESULTS

    async def _rerank(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        ranked = await self.reranker.rerank(run.candidates, run.query, run.user_id, analysis)
        run.ranked = ranked[: self.result_limit]
        run.stats.final_results = len(run.ranked)
        return SearchState.GENERATE_ANSWER if run.ranked else SearchState.NO_RESULTS

    async def _generate_answer(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        run.answer = await compose_answer(self.llm, run.query, analysis, run.ranked)
        return SearchState.LEARN

    async def _learn(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        try:
            self.sink.learn(
                run.query,
                analysis,
                run.answer,
                run.ranked,
                run.user_id,
                run.stats,
                duration_ms=run.duration_ms,
            )
        except Exception:
            logger.warning("Could not schedule learning writes", exc_info=True)
        return SearchState.RESPOND

    async def _respond(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        run.response = SearchResponse(
            answer=run.answer,
            references=result_references(run.ranked),
            cached=False,
            query_analysis=analysis,
            search_stats=run.stats,
            suggestions=[],
        )
        return SearchState.RESPOND

    async def _no_results(self, run: SearchRun) -> SearchState:
        analysis = run.require_analysis()
        suggestions = await suggest_alternatives(self.llm, run.query)
        try:
            self.sink.record_no_results(run.query, analysis)
        except Exception:
            logger.warning("Could not schedule pattern bookkeeping", exc_info=True)
        run.response = SearchResponse(
            answer=NO_RESULTS_ANSWER,
            references=[],
            cached=False,
            query_analysis=analysis,
            search_stats=run.stats,
            suggestions=suggestions,
        )
        return SearchState.NO_RESULTS
