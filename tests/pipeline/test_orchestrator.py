"""End-to-end tests for the search state machine over fakes."""

import pytest

from resume_search.errors import InvalidRequest
from resume_search.models.candidate import CandidateMetadata
from resume_search.models.search import DocumentRecord, FeedbackRequest
from resume_search.pipeline.answer import DEFAULT_SUGGESTIONS, NO_RESULTS_ANSWER
from resume_search.pipeline.orchestrator import ERROR_ANSWER, SearchRun, SearchState
from resume_search.runtime import build_runtime
from tests.conftest import EMBED_DIM, FakeLLM, candidate


def _responder(prompt: str) -> str:
    if "Rewrite this query" in prompt:
        return "python software engineer"
    if "Top candidates" in prompt:
        return "Alice is a strong Python match."
    return "1. django developer\n2. data engineer"


@pytest.fixture
def matches(fake_index):
    fake_index.matches = [
        candidate("d1", 0.9, name="alice.pdf", skills=["python"], role="developer"),
        candidate("d2", 0.8, name="bob.pdf", skills=["java"], role="manager"),
        candidate("d3", 0.2, name="carol.pdf", skills=["python"]),
    ]
    return fake_index.matches


@pytest.mark.asyncio
async def test_no_results_response(runtime):
    response = await runtime.orchestrator.search("Python developer", "u1")

    assert response.references == []
    assert response.answer == NO_RESULTS_ANSWER
    assert response.suggestions == list(DEFAULT_SUGGESTIONS)
    assert response.cached is False
    assert response.search_stats.total_found == 0


@pytest.mark.asyncio
async def test_results_response(runtime, matches):
    response = await runtime.orchestrator.search("python developer", "u1")

    assert [r.name for r in response.references] == ["alice.pdf"]
    assert response.answer == 'Found 1 candidates matching your search for "python developer".'
    assert response.cached is False
    assert response.suggestions == []
    stats = response.search_stats
    assert (stats.total_found, stats.after_filtering, stats.final_results) == (3, 2, 1)
    assert stats.confidence == pytest.approx(response.query_analysis.confidence)
    ref = response.references[0]
    assert ref.original_score == pytest.approx(0.9)
    assert 0.0 <= ref.score <= 1.0


@pytest.mark.asyncio
async def test_state_trails(runtime, matches):
    run = SearchRun(query="python developer", user_id="u1")
    await runtime.orchestrator._execute(run)
    assert run.trail == [
        SearchState.ANALYZE,
        SearchState.CACHE_CHECK,
        SearchState.RETRIEVE,
        SearchState.FILTER,
        SearchState.RERANK,
        SearchState.GENERATE_ANSWER,
        SearchState.LEARN,
        SearchState.RESPOND,
    ]

    miss = SearchRun(query="cobol mainframe", user_id="u1")
    await runtime.orchestrator._execute(miss)
    assert miss.trail[-2:] == [SearchState.FILTER, SearchState.NO_RESULTS]


@pytest.mark.asyncio
async def test_repeat_query_is_served_from_cache(runtime, matches, learning_queue):
    await runtime.documents.upsert(
        DocumentRecord(
            id="d1",
            name="alice.pdf",
            content="Alice, Python developer",
            metadata=CandidateMetadata(skills=["python"], role="developer"),
        )
    )
    first = await runtime.orchestrator.search("python developer", "u1")
    await learning_queue.join()

    second = await runtime.orchestrator.search("python developer", "u2")
    await learning_queue.join()

    assert second.cached is True
    assert second.answer == first.answer
    assert [r.name for r in second.references] == ["alice.pdf"]
    assert second.references[0].content == "Alice, Python developer"
    assert second.search_stats.confidence > 0.85
    assert second.search_stats.final_results == 1

    entries = await runtime.knowledge_base.scan(EMBED_DIM)
    assert len(entries) == 1
    assert entries[0].usage_count == 1
    assert len(await runtime.query_log.recent()) == 1


@pytest.mark.asyncio
async def test_cached_hit_with_unknown_references(runtime, matches, learning_queue):
    await runtime.orchestrator.search("python developer", "u1")
    await learning_queue.join()
    second = await runtime.orchestrator.search("python developer", "u1")
    assert second.cached is True
    assert second.references == []
    assert second.search_stats.total_found == 0


@pytest.mark.asyncio
async def test_result_limit(runtime, fake_index):
    fake_index.matches = [
        candidate(f"d{i}", 0.95 - i * 0.01, name=f"dev{i}.pdf", skills=["python"])
        for i in range(12)
    ]
    response = await runtime.orchestrator.search("python", "u1")
    assert len(response.references) == 10
    assert response.search_stats.total_found == 12
    assert response.search_stats.final_results == 10


@pytest.mark.asyncio
async def test_learning_writes_after_success(runtime, matches, learning_queue):
    await runtime.orchestrator.search("python developer", "u1")
    await learning_queue.join()

    pattern = await runtime.patterns.get("python developer")
    assert pattern.success_count == 1
    logs = await runtime.query_log.recent("u1")
    assert logs[0].results == ["alice.pdf"]


@pytest.mark.asyncio
async def test_no_results_only_counts_pattern_use(runtime, learning_queue):
    await runtime.orchestrator.search("cobol mainframe", "u1")
    await learning_queue.join()

    pattern = await runtime.patterns.get("cobol mainframe")
    assert pattern.total_uses == 1
    assert pattern.success_count == 0
    assert await runtime.knowledge_base.scan(EMBED_DIM) == []
    assert await runtime.query_log.recent() == []


@pytest.mark.parametrize("query", ["", None, 42])
@pytest.mark.asyncio
async def test_invalid_query_raises(runtime, query):
    with pytest.raises(InvalidRequest):
        await runtime.orchestrator.search(query, "u1")


@pytest.mark.asyncio
async def test_whitespace_query_is_searched(runtime):
    response = await runtime.orchestrator.search("   ", "u1")
    assert response.answer == NO_RESULTS_ANSWER
    assert response.references == []


@pytest.mark.asyncio
async def test_unexpected_failure_returns_error_response(runtime, matches):
    async def boom(analysis):
        raise RuntimeError("index corrupted")

    runtime.orchestrator.retriever.retrieve = boom
    response = await runtime.orchestrator.search("python developer", "u1")

    assert response.answer == ERROR_ANSWER
    assert response.references == []
    assert response.search_stats.confidence == 0.0
    assert response.suggestions == list(DEFAULT_SUGGESTIONS)


def test_run_requires_analysis():
    run = SearchRun(query="python", user_id="u1", state=SearchState.RETRIEVE)
    with pytest.raises(RuntimeError, match="retrieve"):
        run.require_analysis()


@pytest.mark.asyncio
async def test_cached_state_without_hit_raises(runtime):
    run = SearchRun(query="python", user_id="u1")
    await runtime.orchestrator._analyze(run)
    with pytest.raises(RuntimeError, match="cache hit"):
        await runtime.orchestrator._respond_cached(run)


@pytest.mark.asyncio
async def test_embedding_outage_degrades_to_no_results(runtime, matches, fake_embedder):
    fake_embedder.fail = True
    response = await runtime.orchestrator.search("python developer", "u1")
    assert response.answer == NO_RESULTS_ANSWER
    assert response.references == []


@pytest.mark.asyncio
async def test_attached_feedback_is_recorded(runtime, learning_queue):
    await runtime.orchestrator.search(
        "python developer",
        "u1",
        feedback={"query": "python developer", "resultId": "alice.pdf", "rating": 5},
    )
    await runtime.orchestrator.search(
        "python developer",
        "u1",
        feedback=FeedbackRequest(query="java", result_id="bob.pdf", rating=2),
    )
    await learning_queue.join()

    stored = await runtime.feedback.recent_for_user("u1")
    assert sorted(f.result_id for f in stored) == ["alice.pdf", "bob.pdf"]


@pytest.mark.asyncio
async def test_invalid_attached_feedback_is_ignored(runtime, learning_queue):
    response = await runtime.orchestrator.search(
        "python developer", "u1", feedback={"query": "x", "resultId": "a.pdf", "rating": 9}
    )
    await learning_queue.join()

    assert response.answer == NO_RESULTS_ANSWER
    assert await runtime.feedback.recent_for_user("u1") == []


@pytest.mark.asyncio
async def test_feedback_boosts_rated_result(runtime, learning_queue, fake_index):
    fake_index.matches = [
        candidate("d1", 0.80, name="alice.pdf", skills=["python"]),
        candidate("d2", 0.78, name="bob.pdf", skills=["python"]),
    ]
    runtime.orchestrator.record_feedback("u1", "python", "bob.pdf", 5)
    runtime.orchestrator.record_feedback("u1", "python", "alice.pdf", 1)
    await learning_queue.join()

    response = await runtime.orchestrator.search("python engineer", "u1")
    assert [r.name for r in response.references] == ["bob.pdf", "alice.pdf"]


@pytest.mark.asyncio
async def test_generation_paths(db, fake_embedder, fake_index, learning_queue, matches):
    llm = FakeLLM(responder=_responder)
    runtime = build_runtime(db, fake_embedder, llm, index=fake_index, queue=learning_queue)

    response = await runtime.orchestrator.search("python developer", "u1")
    assert response.query_analysis.rewritten_query == "python software engineer"
    assert response.answer == "Alice is a strong Python match."

    fake_index.matches = []
    response = await runtime.orchestrator.search("cobol", "u1")
    assert response.answer == NO_RESULTS_ANSWER
    assert response.suggestions[:2] == ["django developer", "data engineer"]
    assert len(response.suggestions) == 4


@pytest.mark.asyncio
async def test_health_without_generation(runtime):
    health = await runtime.orchestrator.health()
    assert health["status"] == "ok"
    assert health["generation"]["available"] is False
    assert health["generation"]["provider"] == "none"
    assert health["learningQueue"]["running"] is True
    assert health["learningQueue"]["failed"] == 0


@pytest.mark.asyncio
async def test_health_with_generation(db, fake_embedder, fake_index, learning_queue):
    runtime = build_runtime(db, fake_embedder, FakeLLM(), index=fake_index, queue=learning_queue)
    health = await runtime.orchestrator.health()
    assert health["generation"] == {
        "available": True,
        "provider": "fake",
        "model": "fake-model",
        "baseUrl": "http://fake",
    }
