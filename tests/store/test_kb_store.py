"""Tests for the knowledge-base store."""

from datetime import UTC, datetime, timedelta

import pytest

from resume_search.models.learning import KnowledgeBaseEntry
from resume_search.models.query import QueryFeatures, QueryType


def _entry(question="python developer", embedding=None, **kwargs):
    return KnowledgeBaseEntry(
        question=question,
        embedding=embedding or [0.1, 0.2, 0.3],
        answer=f"answer for {question}",
        **kwargs,
    )


@pytest.mark.asyncio
async def test_add_and_get(kb_store):
    features = QueryFeatures(skills=("python",), word_count=2, query_type=QueryType.GENERAL)
    entry_id = await kb_store.add(
        _entry(references=["alice.pdf", "bob.pdf"], confidence=0.7, query_features=features)
    )
    assert entry_id > 0

    entry = await kb_store.get(entry_id)
    assert entry.question == "python developer"
    assert entry.embedding == pytest.approx([0.1, 0.2, 0.3])
    assert entry.references == ["alice.pdf", "bob.pdf"]
    assert entry.confidence == pytest.approx(0.7)
    assert entry.query_features == features
    assert entry.usage_count == 0
    assert entry.created_at is not None
    assert entry.last_used is None


@pytest.mark.asyncio
async def test_get_missing(kb_store):
    assert await kb_store.get(999) is None


@pytest.mark.asyncio
async def test_scan_filters_by_dimension(kb_store):
    await kb_store.add(_entry("a", [1.0, 0.0, 0.0]))
    await kb_store.add(_entry("b", [1.0, 0.0]))
    await kb_store.add(_entry("c", [0.0, 1.0, 0.0]))

    entries = await kb_store.scan(3)
    assert [e.question for e in entries] == ["a", "c"]
    assert [e.question for e in await kb_store.scan(2)] == ["b"]
    assert await kb_store.scan(5) == []


@pytest.mark.asyncio
async def test_record_usage(kb_store):
    entry_id = await kb_store.add(_entry())
    await kb_store.record_usage(entry_id)
    await kb_store.record_usage(entry_id)
    entry = await kb_store.get(entry_id)
    assert entry.usage_count == 2
    assert entry.last_used is not None


@pytest.mark.asyncio
async def test_prune_unused(kb_store):
    old = datetime.now(UTC) - timedelta(days=60)
    stale = await kb_store.add(_entry("stale", created_at=old))
    served = await kb_store.add(_entry("served", created_at=old))
    fresh = await kb_store.add(_entry("fresh"))
    await kb_store.record_usage(served)

    assert await kb_store.prune_unused(30) == 1
    assert await kb_store.get(stale) is None
    assert await kb_store.get(served) is not None
    assert await kb_store.get(fresh) is not None
