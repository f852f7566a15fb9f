"""Query rewriting: generative with learned examples, deterministic fallback."""

import logging

from resume_search.analysis.features import ROLES, SKILLS
from resume_search.errors import AnalysisDegraded, GenerationUnavailable
from resume_search.llm.provider import LLMProvider, generate_text
from resume_search.models.learning import QueryPattern
from resume_search.store.patterns import QueryPatternStore

logger = logging.getLogger(__name__)

MAX_EXAMPLES = 3

_SYSTEM_PROMPT = """\
You rewrite resume search queries so they find more relevant candidates. \
Reply with the rewritten query only, on one line, without quotes or commentary."""

_PROMPT_TEMPLATE = """\
Examples of good rewrites:
{examples}

Current query: "{query}"

Rewrite this query to be more specific and likely to find relevant resumes:
- If it is too vague, add relevant skills or roles
- If it is a name only, keep it simple
- If it is missing context, add industry-relevant terms
- Keep it concise but specific"""


def fallback_rewrite(query: str) -> str:
    """Deterministic rewrite used whenever generation is unavailable.

    A bare skill gets " developer" appended, a bare role gets " experience",
    anything else passes through unchanged.
    """
    words = query.split()
    if len(words) != 1:
        return query
    word = words[0].lower()
    if word in SKILLS:
        return f"{query.strip()} developer"
    if word in ROLES:
        return f"{query.strip()} experience"
    return query


def build_prompt(query: str, examples: list[QueryPattern]) -> str:
    """Prompt with up to three past rewrites as guidance."""
    lines = [f'"{p.original_query}" -> "{p.rewritten_query}"' for p in examples[:MAX_EXAMPLES]]
    return _PROMPT_TEMPLATE.format(examples="\n".join(lines) or "(none yet)", query=query)


def clean_rewrite(text: str) -> str:
    """First non-empty line of model output, without wrapping quotes."""
    for line in text.splitlines():
        line = line.strip().strip('"').strip("'").strip()
        if line:
            return line
    return ""


class QueryRewriter:
    """Rewrites queries using the generation provider and successful past patterns."""

    def __init__(self, llm: LLMProvider | None, patterns: QueryPatternStore):
        """Initialize with an optional generation provider and the pattern store."""
        self.llm = llm
        self.patterns = patterns

    async def rewrite(self, query: str) -> str:
        """Rewrite a query. Never raises; degrades to fallback_rewrite."""
        try:
            return await self._generate(query)
        except AnalysisDegraded:
            logger.warning("Rewrite degraded for %r, using fallback", query, exc_info=True)
        except Exception:
            logger.warning("Rewrite failed for %r, using fallback", query, exc_info=True)
        return fallback_rewrite(query)

    async def _generate(self, query: str) -> str:
        if self.llm is None or not await self.llm.is_available():
            logger.debug("No generation provider, deterministic rewrite for %r", query)
            return fallback_rewrite(query)

        try:
            examples = await self.patterns.top_successful(MAX_EXAMPLES)
        except Exception as exc:
            raise AnalysisDegraded("Pattern history unavailable") from exc

        prompt = build_prompt(query, examples)
        try:
            text = await generate_text(self.llm, prompt, system=_SYSTEM_PROMPT)
        except GenerationUnavailable as exc:
            raise AnalysisDegraded("Generative rewrite unavailable") from exc

        rewritten = clean_rewrite(text)
        if not rewritten:
            raise AnalysisDegraded("Generative rewrite was empty")
        logger.debug("Rewrote %r as %r using %d examples", query, rewritten, len(examples))
        return rewritten
