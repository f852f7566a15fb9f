"""Tests for query rewriting and its deterministic fallback."""

import pytest

from resume_search.analysis.rewriter import (
    QueryRewriter,
    build_prompt,
    clean_rewrite,
    fallback_rewrite,
)
from resume_search.models.learning import QueryPattern
from resume_search.models.query import QueryFeatures, QueryType
from tests.conftest import FakeLLM


class BrokenPatterns:
    async def top_successful(self, limit=3):
        raise RuntimeError("db gone")


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("react", "react developer"),
        ("Python", "Python developer"),
        ("manager", "manager experience"),
        ("devops", "devops developer"),
        ("Jane", "Jane"),
        ("python developer", "python developer"),
        ("", ""),
    ],
)
def test_fallback_rewrite(query, expected):
    assert fallback_rewrite(query) == expected


def test_build_prompt_includes_examples_and_query():
    examples = [
        QueryPattern(original_query="react", rewritten_query="react frontend developer"),
        QueryPattern(original_query="ml", rewritten_query="machine learning engineer"),
    ]
    prompt = build_prompt("vue", examples)
    assert '"react" -> "react frontend developer"' in prompt
    assert '"ml" -> "machine learning engineer"' in prompt
    assert 'Current query: "vue"' in prompt


def test_build_prompt_without_examples():
    assert "(none yet)" in build_prompt("vue", [])


def test_build_prompt_caps_examples():
    examples = [QueryPattern(original_query=f"q{i}", rewritten_query=f"r{i}") for i in range(5)]
    prompt = build_prompt("vue", examples)
    assert '"q2" -> "r2"' in prompt
    assert '"q3"' not in prompt


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('"senior react developer"', "senior react developer"),
        ("\n\n  vue engineer  \nexplanation", "vue engineer"),
        ("'quoted'", "quoted"),
        ("   \n\"\"\n", ""),
    ],
)
def test_clean_rewrite(text, expected):
    assert clean_rewrite(text) == expected


@pytest.mark.asyncio
async def test_rewrite_without_llm_uses_fallback(pattern_store):
    rewriter = QueryRewriter(None, pattern_store)
    assert await rewriter.rewrite("react") == "react developer"


@pytest.mark.asyncio
async def test_rewrite_with_unavailable_llm_uses_fallback(pattern_store):
    llm = FakeLLM(available=False)
    rewriter = QueryRewriter(llm, pattern_store)
    assert await rewriter.rewrite("manager") == "manager experience"
    assert llm.generate_count == 0


@pytest.mark.asyncio
async def test_rewrite_uses_llm_and_successful_patterns(pattern_store):
    await pattern_store.record_use(
        "react", "react frontend developer", QueryType.GENERAL, QueryFeatures(), success=True
    )
    await pattern_store.record_use(
        "cobol", "cobol mainframe", QueryType.GENERAL, QueryFeatures(), success=False
    )
    llm = FakeLLM(response='"senior vue developer"\n')
    rewriter = QueryRewriter(llm, pattern_store)

    assert await rewriter.rewrite("vue") == "senior vue developer"
    assert '"react" -> "react frontend developer"' in llm.last_prompt
    assert "cobol" not in llm.last_prompt
    assert llm.last_system is not None


@pytest.mark.asyncio
async def test_rewrite_empty_output_falls_back(pattern_store):
    rewriter = QueryRewriter(FakeLLM(response='  ""  '), pattern_store)
    assert await rewriter.rewrite("react") == "react developer"


@pytest.mark.asyncio
async def test_rewrite_none_output_falls_back(pattern_store):
    rewriter = QueryRewriter(FakeLLM(response=None), pattern_store)
    assert await rewriter.rewrite("python developer") == "python developer"


@pytest.mark.asyncio
async def test_rewrite_pattern_failure_falls_back():
    llm = FakeLLM(response="should not be used")
    rewriter = QueryRewriter(llm, BrokenPatterns())  # type: ignore[arg-type]
    assert await rewriter.rewrite("react") == "react developer"
    assert llm.generate_count == 0
