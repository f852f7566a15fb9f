"""Anthropic client behind query rewrites and answer summaries.

Selected with RS_LLM_PROVIDER=anthropic. Failures return None like the Ollama client.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from resume_search.config import get_anthropic_model, get_anthropic_timeout
from resume_search.llm.provider import MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)


class AnthropicLLMClient:
    """Completes rewrite, answer and suggestion prompts via the Messages API."""

    provider = "anthropic"
    base_url = "https://api.anthropic.com"

    def __init__(self) -> None:
        """Initialize with lazy client creation."""
        self._client: Any = None
        self._available: bool | None = None

    @property
    def model(self) -> str:
        """Model name sent with each request and reported by health."""
        return get_anthropic_model()

    async def is_available(self) -> bool:
        """True once the SDK loads and a key is set. Only caches success."""
        if self._available is True:
            return True
        try:
            if self._get_client() is None:
                return False
            if not os.environ.get("ANTHROPIC_API_KEY"):
                logger.warning("ANTHROPIC_API_KEY not set, searches use deterministic rewrites")
                return False
            # Key is set; the first successful generate() confirms it
            return True
        except Exception:
            return False

    async def generate(self, prompt: str, *, system: str | None = None) -> str | None:
        """Generate a completion for one prompt. Returns None if unavailable."""
        try:
            client = self._get_client()
            if client is None:
                return None

            kwargs: dict[str, Any] = {
                "model": self.model,
                "max_tokens": MAX_OUTPUT_TOKENS,
                "messages": [{"role": "user", "content": prompt}],
            }
            if system is not None:
                kwargs["system"] = system

            response = await client.messages.create(
                **kwargs,
                timeout=get_anthropic_timeout(),
            )
            result: str = response.content[0].text
        except Exception:
            logger.warning("Anthropic generation with %s failed", self.model, exc_info=True)
            self._available = None
            return None
        self._available = True
        logger.debug("Anthropic %s returned %d chars", self.model, len(result))
        return result

    def _get_client(self) -> Any:
        """Lazily create the AsyncAnthropic client. Returns None if the SDK is missing."""
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic

                self._client = AsyncAnthropic()
            except ImportError:
                logger.warning("anthropic package not installed, Anthropic generation disabled")
                return None
        return self._client

    async def close(self) -> None:
        """Close the Anthropic client if open."""
        if self._client is not None:
            await self._client.close()
            self._client = None
