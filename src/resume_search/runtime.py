"""Process-scoped runtime: connections, stores, pipeline and learning queue.

Both surfaces build one SearchRuntime at start-up and close it at shutdown.
"""

import logging
import sys
from dataclasses import dataclass

from resume_search.analysis.analyzer import QueryAnalyzer
from resume_search.analysis.rewriter import QueryRewriter
from resume_search.config import get_db_path, get_embedding_dim, get_llm_provider, get_log_level
from resume_search.db.backend import Database
from resume_search.db.connection import create_connection
from resume_search.learning.queue import LearningQueue
from resume_search.learning.sink import LearningSink
from resume_search.llm import AnthropicLLMClient, OllamaLLMClient
from resume_search.llm.provider import LLMProvider
from resume_search.pipeline.orchestrator import SearchOrchestrator
from resume_search.search.cache import SemanticCache
from resume_search.search.embeddings import Embedder, EmbeddingClient
from resume_search.search.index import SqliteVectorIndex, VectorIndex
from resume_search.search.reranker import Reranker
from resume_search.search.retriever import Retriever
from resume_search.store.documents import DocumentStore
from resume_search.store.feedback import FeedbackStore
from resume_search.store.knowledge_base import KnowledgeBaseStore
from resume_search.store.patterns import QueryPatternStore
from resume_search.store.query_log import QueryLogStore

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Log to stderr (stdout is the MCP stdio transport)."""
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def create_llm(provider: str) -> LLMProvider | None:
    """Create a generation client for the given provider name."""
    if provider == "anthropic":
        return AnthropicLLMClient()
    if provider == "ollama":
        return OllamaLLMClient()
    return None


@dataclass
class SearchRuntime:
    """Everything a surface needs to serve searches."""

    db: Database
    embedder: Embedder
    index: VectorIndex
    llm: LLMProvider | None
    documents: DocumentStore
    knowledge_base: KnowledgeBaseStore
    patterns: QueryPatternStore
    feedback: FeedbackStore
    query_log: QueryLogStore
    queue: LearningQueue
    orchestrator: SearchOrchestrator

    async def start(self) -> None:
        """Start the background learning worker."""
        self.queue.start()

    async def close(self, drain_timeout: float = 5.0) -> None:
        """Drain pending learning writes and release every resource."""
        await self.queue.stop(drain_timeout)
        if self.llm is not None:
            await self.llm.close()
        await self.embedder.close()
        await self.db.close()
        logger.info("Search runtime closed")


def build_runtime(
    db: Database,
    embedder: Embedder,
    llm: LLMProvider | None,
    *,
    index: VectorIndex | None = None,
    queue: LearningQueue | None = None,
    cache_threshold: float | None = None,
    relevance_floor: float | None = None,
    top_k: int | None = None,
    result_limit: int | None = None,
) -> SearchRuntime:
    """Wire the pipeline around already-open collaborators."""
    documents = DocumentStore(db)
    knowledge_base = KnowledgeBaseStore(db)
    patterns = QueryPatternStore(db)
    feedback = FeedbackStore(db)
    query_log = QueryLogStore(db)
    index = index if index is not None else SqliteVectorIndex(db, documents)
    queue = queue if queue is not None else LearningQueue()

    sink = LearningSink(queue, embedder, knowledge_base, query_log, patterns, feedback)
    orchestrator = SearchOrchestrator(
        analyzer=QueryAnalyzer(QueryRewriter(llm, patterns)),
        cache=SemanticCache(knowledge_base, embedder, threshold=cache_threshold),
        retriever=Retriever(embedder, index, top_k=top_k, relevance_floor=relevance_floor),
        reranker=Reranker(feedback),
        sink=sink,
        documents=documents,
        llm=llm,
        result_limit=result_limit,
    )
    return SearchRuntime(
        db=db,
        embedder=embedder,
        index=index,
        llm=llm,
        documents=documents,
        knowledge_base=knowledge_base,
        patterns=patterns,
        feedback=feedback,
        query_log=query_log,
        queue=queue,
        orchestrator=orchestrator,
    )


async def create_runtime() -> SearchRuntime:
    """Open the configured database and providers and start the learning worker."""
    db_path = get_db_path()
    db = await create_connection(db_path, embedding_dim=get_embedding_dim())
    embedder = EmbeddingClient()

    provider = get_llm_provider()
    llm = create_llm(provider)

    if await embedder.is_available():
        logger.info("Embedding provider available")
    else:
        logger.warning("Embedding provider unavailable, cache and retrieval will degrade")

    if llm is not None:
        logger.info("Generation provider: %s", provider)
    else:
        logger.warning("No generation provider (%s), using deterministic fallbacks", provider)

    runtime = build_runtime(db, embedder, llm)
    await runtime.start()
    return runtime
