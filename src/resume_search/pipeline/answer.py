"""Answer text, broadening suggestions and presentable references."""

import json
import logging
import re
from collections.abc import Sequence

from resume_search.errors import GenerationUnavailable
from resume_search.llm.provider import LLMProvider, generate_text
from resume_search.models.candidate import CandidateMetadata, RankedResult
from resume_search.models.query import QueryAnalysis
from resume_search.models.search import DocumentRecord, Reference

logger = logging.getLogger(__name__)

NO_RESULTS_ANSWER = (
    "No relevant candidates found for your search. Try refining your query with more "
    "specific terms or check the suggestions below."
)

DEFAULT_SUGGESTIONS: tuple[str, ...] = (
    'Try searching with specific skills (e.g., "JavaScript developer")',
    'Include years of experience (e.g., "5 years React")',
    'Search by role title (e.g., "Senior Engineer")',
    'Combine skills and roles (e.g., "Python data scientist")',
)

SUGGESTION_COUNT = 4
ANSWER_CANDIDATES = 5

_LIST_MARKER_RE = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")

_ANSWER_SYSTEM = "You are an expert resume search assistant. Be concise and professional."

_ANSWER_PROMPT = """\
Search query: "{query}"
Enhanced query: "{rewritten}"

Top candidates:
{candidates}

Write a natural, helpful summary in 2-3 sentences that acknowledges the search \
and the number of results ({count}), highlights the key skills and roles found, \
and mentions the quality of the matches."""

_SUGGEST_PROMPT = """\
The resume search query "{query}" returned no results. Suggest {count} alternative \
search queries covering different skill combinations, role variations, experience \
levels and industry-specific terms. Reply with the suggestions only, one per line."""


def fallback_answer(count: int, query: str) -> str:
    """Templated answer used when generation is unavailable."""
    return f'Found {count} candidates matching your search for "{query}".'


async def compose_answer(
    llm: LLMProvider | None,
    query: str,
    analysis: QueryAnalysis,
    results: Sequence[RankedResult],
) -> str:
    """Summarize the top results, or fall back to the templated answer."""
    summary = [
        {
            "name": r.metadata.name or "Unknown",
            "skills": r.metadata.skills,
            "experience": r.metadata.experience or "",
            "role": r.metadata.role or "",
            "score": round(r.final_score, 2),
        }
        for r in results[:ANSWER_CANDIDATES]
    ]
    prompt = _ANSWER_PROMPT.format(
        query=query,
        rewritten=analysis.rewritten_query,
        candidates=json.dumps(summary, indent=2),
        count=len(results),
    )
    try:
        return await generate_text(llm, prompt, system=_ANSWER_SYSTEM)
    except GenerationUnavailable:
        logger.debug("Answer generation unavailable, using template")
    except Exception:
        logger.warning("Answer generation failed, using template", exc_info=True)
    return fallback_answer(len(results), query)


def parse_suggestions(text: str) -> list[str]:
    """Non-empty lines of model output with list numbering and bullets removed."""
    suggestions: list[str] = []
    for line in text.splitlines():
        cleaned = _LIST_MARKER_RE.sub("", line).strip()
        if cleaned and cleaned not in suggestions:
            suggestions.append(cleaned)
    return suggestions


def pad_suggestions(suggestions: Sequence[str]) -> list[str]:
    """Trim or pad with defaults to exactly four suggestions."""
    result = list(suggestions[:SUGGESTION_COUNT])
    for default in DEFAULT_SUGGESTIONS:
        if len(result) >= SUGGESTION_COUNT:
            break
        if default not in result:
            result.append(default)
    return result


async def suggest_alternatives(llm: LLMProvider | None, query: str) -> list[str]:
    """Exactly four query-broadening suggestions."""
    prompt = _SUGGEST_PROMPT.format(query=query, count=SUGGESTION_COUNT)
    try:
        text = await generate_text(llm, prompt)
    except GenerationUnavailable:
        return list(DEFAULT_SUGGESTIONS)
    except Exception:
        logger.warning("Suggestion generation failed, using defaults", exc_info=True)
        return list(DEFAULT_SUGGESTIONS)
    return pad_suggestions(parse_suggestions(text))


def _reference_metadata(meta: CandidateMetadata) -> dict[str, object]:
    return {
        "pageNumber": meta.page_number or 1,
        "chunk": meta.chunk or 1,
        "skills": list(meta.skills),
        "experience": meta.experience or "",
        "role": meta.role or "",
    }


def result_references(results: Sequence[RankedResult]) -> list[Reference]:
    """Presentable references for freshly ranked results."""
    return [
        Reference(
            name=r.metadata.display_name,
            content=r.metadata.snippet,
            score=r.final_score,
            original_score=r.raw_score,
            metadata=_reference_metadata(r.metadata),
        )
        for r in results
    ]


def cached_references(records: Sequence[DocumentRecord], similarity: float) -> list[Reference]:
    """References rebuilt from stored documents for a cache hit."""
    refs: list[Reference] = []
    for record in records:
        meta = record.metadata
        refs.append(
            Reference(
                name=record.name or meta.display_name,
                content=record.content or meta.snippet,
                score=similarity,
                original_score=similarity,
                metadata={
                    "skills": list(meta.skills),
                    "experience": meta.experience or "",
                    "role": meta.role or "",
                    "pageNumber": 1,
                    "chunk": 1,
                },
            )
        )
    return refs
