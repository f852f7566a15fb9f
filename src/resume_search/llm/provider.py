"""Generation provider protocol for rewrite, answer and suggestion prompts."""

from typing import Protocol, runtime_checkable

from resume_search.errors import GenerationUnavailable

# Rewrites and answer summaries fit well under this
MAX_OUTPUT_TOKENS = 512


@runtime_checkable
class LLMProvider(Protocol):
    """Protocol for language model providers with graceful degradation."""

    async def is_available(self) -> bool:
        """Cheap liveness check used to pick fallback paths up front."""
        ...

    async def generate(self, prompt: str, *, system: str | None = None) -> str | None:
        """Generate text from a prompt. Returns None if unavailable."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...


async def generate_text(
    llm: LLMProvider | None, prompt: str, *, system: str | None = None
) -> str:
    """Generate non-blank text or raise GenerationUnavailable."""
    if llm is None:
        raise GenerationUnavailable("No generation provider configured")
    if not await llm.is_available():
        raise GenerationUnavailable("Generation provider is offline")
    result = await llm.generate(prompt, system=system)
    if result is None or not result.strip():
        raise GenerationUnavailable("Generation provider returned no text")
    return result.strip()
