"""Shared test fixtures."""

import hashlib
from collections.abc import Callable, Sequence

import pytest_asyncio

from resume_search.db.connection import create_connection
from resume_search.errors import EmbeddingUnavailable, IndexUnavailable
from resume_search.learning.queue import LearningQueue
from resume_search.models.candidate import CandidateMetadata, SearchCandidate
from resume_search.runtime import build_runtime
from resume_search.store.documents import DocumentStore
from resume_search.store.feedback import FeedbackStore
from resume_search.store.knowledge_base import KnowledgeBaseStore
from resume_search.store.patterns import QueryPatternStore
from resume_search.store.query_log import QueryLogStore

EMBED_DIM = 32


@pytest_asyncio.fixture
async def db():
    """In-memory database with full schema and, when available, sqlite-vec."""
    conn = await create_connection(":memory:", embedding_dim=EMBED_DIM)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def kb_store(db):
    """Knowledge-base store backed by in-memory DB."""
    return KnowledgeBaseStore(db)


@pytest_asyncio.fixture
async def pattern_store(db):
    """Query pattern store backed by in-memory DB."""
    return QueryPatternStore(db)


@pytest_asyncio.fixture
async def feedback_store(db):
    """Feedback store backed by in-memory DB."""
    return FeedbackStore(db)


@pytest_asyncio.fixture
async def log_store(db):
    """Query log store backed by in-memory DB."""
    return QueryLogStore(db)


@pytest_asyncio.fixture
async def document_store(db):
    """Document store backed by in-memory DB."""
    return DocumentStore(db)


def hash_vector(text: str, dim: int = EMBED_DIM) -> list[float]:
    """Deterministic unit vector derived from the text's SHA-256."""
    vec: list[float] = []
    counter = 0
    while len(vec) < dim:
        digest = hashlib.sha256(f"{counter}:{text}".encode()).digest()
        vec.extend(b / 127.5 - 1 for b in digest)
        counter += 1
    vec = vec[:dim]
    norm = sum(v * v for v in vec) ** 0.5
    return [v / norm for v in vec]


class FakeEmbedder:
    """Deterministic fake embedder for testing.

    Identical texts always get identical vectors. Individual texts can be
    pinned to a chosen vector to script similarities.
    """

    def __init__(self, dim: int = EMBED_DIM):
        self.dim = dim
        self.fixed: dict[str, list[float]] = {}
        self.fail = False
        self.calls: list[list[str]] = []

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail:
            raise EmbeddingUnavailable("fake embedder offline")
        return [self.fixed.get(t) or hash_vector(t, self.dim) for t in texts]

    async def close(self) -> None:
        pass


class FakeIndex:
    """Vector index returning scripted matches."""

    def __init__(self, matches: list[SearchCandidate] | None = None):
        self.matches = matches or []
        self.fail = False
        self.queries: list[tuple[list[float], int]] = []

    async def query(self, vector, top_k, filter=None) -> list[SearchCandidate]:
        self.queries.append((list(vector), top_k))
        if self.fail:
            raise IndexUnavailable("fake index offline")
        return self.matches[:top_k]


class FakeLLM:
    """Controllable fake LLM for testing."""

    def __init__(
        self,
        response: str | None = "ok",
        available: bool = True,
        responder: Callable[[str], str | None] | None = None,
    ):
        self.response = response
        self.responder = responder
        self._available = available
        self.last_prompt: str | None = None
        self.last_system: str | None = None
        self.generate_count = 0
        self.provider = "fake"
        self.model = "fake-model"
        self.base_url = "http://fake"

    async def is_available(self) -> bool:
        return self._available

    async def generate(self, prompt: str, *, system: str | None = None) -> str | None:
        self.last_prompt = prompt
        self.last_system = system
        self.generate_count += 1
        if not self._available:
            return None
        if self.responder is not None:
            return self.responder(prompt)
        return self.response

    async def close(self) -> None:
        pass


def candidate(
    doc_id: str,
    score: float,
    name: str | None = None,
    **metadata,
) -> SearchCandidate:
    """Build a SearchCandidate with metadata fields."""
    return SearchCandidate(
        id=doc_id,
        raw_score=score,
        metadata=CandidateMetadata(id=doc_id, name=name or doc_id, **metadata),
    )


@pytest_asyncio.fixture
async def fake_embedder():
    """Fake embedding client for tests."""
    return FakeEmbedder()


@pytest_asyncio.fixture
async def fake_index():
    """Fake vector index with no matches."""
    return FakeIndex()


@pytest_asyncio.fixture
async def fake_llm():
    """Controllable fake LLM client."""
    return FakeLLM()


@pytest_asyncio.fixture
async def learning_queue():
    """Started learning queue without retry delays."""
    queue = LearningQueue(maxsize=64, max_attempts=2, retry_delay=0)
    queue.start()
    yield queue
    await queue.stop(drain_timeout=1.0)


@pytest_asyncio.fixture
async def runtime(db, fake_embedder, fake_index, learning_queue):
    """Search runtime over fakes with no generation provider."""
    return build_runtime(db, fake_embedder, None, index=fake_index, queue=learning_queue)
