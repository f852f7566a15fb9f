"""Ollama client behind query rewrites and answer summaries.

Every failure returns None and the caller takes its deterministic path.
"""

import logging

import httpx

from resume_search.config import get_llm_model, get_llm_timeout, get_ollama_url
from resume_search.llm.provider import MAX_OUTPUT_TOKENS

logger = logging.getLogger(__name__)


class OllamaLLMClient:
    """Completes rewrite, answer and suggestion prompts via Ollama's /api/generate."""

    provider = "ollama"

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize with an optional HTTP client."""
        self._http = http_client
        self._available: bool | None = None

    @property
    def model(self) -> str:
        """Model name sent with each request and reported by health."""
        return get_llm_model()

    @property
    def base_url(self) -> str:
        """Ollama base URL, reported by health."""
        return get_ollama_url()

    async def is_available(self) -> bool:
        """Check if Ollama answers /api/tags. Only caches success."""
        if self._available is True:
            return True
        try:
            client = self._get_client()
            resp = await client.get(f"{self.base_url}/api/tags", timeout=get_llm_timeout())
            resp.raise_for_status()
            self._available = True
        except Exception:
            logger.warning(
                "Ollama not reachable at %s, searches use deterministic rewrites and answers",
                self.base_url,
            )
            self._available = None
        return self._available is True

    async def generate(self, prompt: str, *, system: str | None = None) -> str | None:
        """Generate a completion for one prompt. Returns None if unavailable."""
        if not await self.is_available():
            return None
        try:
            client = self._get_client()
            payload: dict[str, object] = {
                "model": self.model,
                "prompt": prompt,
                "stream": False,
                "options": {"num_predict": MAX_OUTPUT_TOKENS},
            }
            if system is not None:
                payload["system"] = system
            resp = await client.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=get_llm_timeout(),
            )
            resp.raise_for_status()
            result: str = resp.json()["response"]
        except Exception:
            logger.warning("Ollama generation with %s failed", self.model, exc_info=True)
            self._available = None
            return None
        logger.debug("Ollama %s returned %d chars", self.model, len(result))
        return result

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    async def close(self) -> None:
        """Close the HTTP client if open."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
