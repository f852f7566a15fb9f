"""Tests for row conversion and store statistics."""

from datetime import UTC, datetime

import pytest

from resume_search.db.queries import get_db_stats, row_to_document
from resume_search.models.candidate import CandidateMetadata
from resume_search.models.learning import FeedbackEntry, KnowledgeBaseEntry
from resume_search.models.search import DocumentRecord


@pytest.mark.asyncio
async def test_stats_on_empty_db(db):
    stats = await get_db_stats(db)
    assert stats["knowledge_base"] == 0
    assert stats["documents"] == 0
    assert stats["cache_serves"] == 0
    assert stats["cache_never_served"] == 0
    assert stats["avg_rating"] is None


@pytest.mark.asyncio
async def test_stats_counts(db, kb_store, feedback_store):
    served = await kb_store.add(KnowledgeBaseEntry(question="a", embedding=[1.0], answer="x"))
    await kb_store.add(KnowledgeBaseEntry(question="b", embedding=[1.0], answer="y"))
    await kb_store.record_usage(served)
    await kb_store.record_usage(served)
    for rating in (4, 5):
        entry = FeedbackEntry(user_id="u", query="q", result_id="r", rating=rating)
        await feedback_store.add(entry)

    stats = await get_db_stats(db)
    assert stats["knowledge_base"] == 2
    assert stats["cache_serves"] == 2
    assert stats["cache_never_served"] == 1
    assert stats["search_feedback"] == 2
    assert stats["avg_rating"] == 4.5


@pytest.mark.asyncio
async def test_document_row_falls_back_to_processed_at(db, document_store):
    await document_store.upsert(DocumentRecord(id="d1", name="alice.pdf"))
    cursor = await db.execute("SELECT * FROM documents WHERE id = 'd1'")
    record = row_to_document(await cursor.fetchone())
    assert record.metadata.processed_at is not None


@pytest.mark.asyncio
async def test_document_row_keeps_metadata_timestamp(db, document_store):
    stamp = datetime(2024, 3, 1, tzinfo=UTC)
    await document_store.upsert(
        DocumentRecord(id="d1", name="alice.pdf", metadata=CandidateMetadata(processed_at=stamp))
    )
    cursor = await db.execute("SELECT * FROM documents WHERE id = 'd1'")
    record = row_to_document(await cursor.fetchone())
    assert record.metadata.processed_at == stamp
