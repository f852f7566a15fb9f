"""Tests for the semantic cache."""

import pytest

from resume_search.models.learning import KnowledgeBaseEntry
from resume_search.models.query import QueryAnalysis, QueryFeatures
from resume_search.search.cache import SemanticCache

QUERY_VEC = [1.0, 0.0, 0.0, 0.0, 0.0]
# Norm is exactly 20, so cosine with QUERY_VEC is exactly 17 / 20 = 0.85
AT_THRESHOLD_VEC = [17.0, 10.0, 3.0, 1.0, 1.0]


def _analysis(rewritten: str) -> QueryAnalysis:
    return QueryAnalysis(features=QueryFeatures(), rewritten_query=rewritten, confidence=0.5)


def _entry(question: str, embedding: list[float], answer: str = "cached answer"):
    return KnowledgeBaseEntry(
        question=question, embedding=embedding, answer=answer, references=["Ada"]
    )


@pytest.mark.asyncio
async def test_empty_knowledge_base_misses(kb_store, fake_embedder):
    cache = SemanticCache(kb_store, fake_embedder, threshold=0.85)
    assert await cache.lookup(_analysis("react developer"), "react developer") is None


@pytest.mark.asyncio
async def test_identical_question_hits(kb_store, fake_embedder):
    fake_embedder.fixed["react developer"] = QUERY_VEC
    await kb_store.add(_entry("react developer", QUERY_VEC))

    cache = SemanticCache(kb_store, fake_embedder, threshold=0.85)
    hit = await cache.lookup(_analysis("react developer"), "react developer")
    assert hit is not None
    assert hit.similarity == pytest.approx(1.0)
    assert hit.entry.answer == "cached answer"
    assert hit.entry.references == ["Ada"]


@pytest.mark.asyncio
async def test_similarity_exactly_at_threshold_is_a_miss(kb_store, fake_embedder):
    fake_embedder.fixed["q"] = QUERY_VEC
    await kb_store.add(_entry("other", AT_THRESHOLD_VEC))

    cache = SemanticCache(kb_store, fake_embedder, threshold=0.85)
    assert await cache.lookup(_analysis("q"), "q") is None


@pytest.mark.asyncio
async def test_similarity_just_above_threshold_hits(kb_store, fake_embedder):
    fake_embedder.fixed["q"] = QUERY_VEC
    await kb_store.add(_entry("other", AT_THRESHOLD_VEC))

    cache = SemanticCache(kb_store, fake_embedder, threshold=0.849)
    hit = await cache.lookup(_analysis("q"), "q")
    assert hit is not None
    assert hit.similarity == 0.85


@pytest.mark.asyncio
async def test_best_entry_wins(kb_store, fake_embedder):
    fake_embedder.fixed["q"] = QUERY_VEC
    await kb_store.add(_entry("close", [0.95, 0.05, 0.0, 0.0, 0.0], answer="close"))
    await kb_store.add(_entry("exact", QUERY_VEC, answer="exact"))
    await kb_store.add(_entry("far", [0.0, 1.0, 0.0, 0.0, 0.0], answer="far"))

    cache = SemanticCache(kb_store, fake_embedder, threshold=0.85)
    hit = await cache.lookup(_analysis("q"), "q")
    assert hit is not None
    assert hit.entry.answer == "exact"


@pytest.mark.asyncio
async def test_mismatched_length_entries_are_skipped(kb_store, fake_embedder):
    fake_embedder.fixed["q"] = QUERY_VEC
    await kb_store.add(_entry("longer", QUERY_VEC + [0.0]))

    cache = SemanticCache(kb_store, fake_embedder, threshold=0.5)
    assert await cache.lookup(_analysis("q"), "q") is None


@pytest.mark.asyncio
async def test_embeds_rewritten_query(kb_store, fake_embedder):
    cache = SemanticCache(kb_store, fake_embedder, threshold=0.85)
    await cache.lookup(_analysis("python developer"), "python")
    assert fake_embedder.calls == [["python developer"]]


@pytest.mark.asyncio
async def test_falls_back_to_raw_query_without_rewrite(kb_store, fake_embedder):
    cache = SemanticCache(kb_store, fake_embedder, threshold=0.85)
    await cache.lookup(_analysis(""), "python")
    assert fake_embedder.calls == [["python"]]


@pytest.mark.asyncio
async def test_embedding_failure_is_a_miss(kb_store, fake_embedder):
    fake_embedder.fixed["q"] = QUERY_VEC
    await kb_store.add(_entry("q", QUERY_VEC))
    fake_embedder.fail = True

    cache = SemanticCache(kb_store, fake_embedder, threshold=0.85)
    assert await cache.lookup(_analysis("q"), "q") is None


def test_threshold_defaults_from_env(monkeypatch):
    monkeypatch.setenv("RS_CACHE_THRESHOLD", "0.9")
    cache = SemanticCache(None, None)  # type: ignore[arg-type]
    assert cache.threshold == 0.9
