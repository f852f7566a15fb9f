"""Ollama embedding client."""

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import httpx

from resume_search.config import get_embedding_model, get_embedding_timeout, get_ollama_url
from resume_search.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)


@runtime_checkable
class Embedder(Protocol):
    """Produces one fixed-length vector per input text."""

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed a batch of texts. Raises EmbeddingUnavailable on provider error."""
        ...

    async def close(self) -> None:
        """Release resources."""
        ...


async def embed_one(embedder: Embedder, text: str) -> list[float]:
    """Embed a single text, raising EmbeddingUnavailable on an empty result."""
    vectors = await embedder.embed([text])
    if not vectors or not vectors[0]:
        raise EmbeddingUnavailable("Embedding provider returned no vector")
    return vectors[0]


class EmbeddingClient:
    """Generates embeddings via Ollama's /api/embed endpoint."""

    def __init__(self, http_client: httpx.AsyncClient | None = None):
        """Initialize with an optional HTTP client."""
        self._http = http_client
        self._available: bool | None = None

    @property
    def model(self) -> str:
        """Embedding model name."""
        return get_embedding_model()

    async def is_available(self) -> bool:
        """Check if Ollama is reachable. Only caches success, retries on failure."""
        if self._available is True:
            return True
        try:
            client = self._get_client()
            resp = await client.get(
                f"{get_ollama_url()}/api/tags", timeout=get_embedding_timeout()
            )
            resp.raise_for_status()
            self._available = True
        except Exception:
            logger.warning("Ollama not available, embeddings disabled")
            self._available = None
        return self._available is True

    async def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed a batch of texts in one request."""
        if not texts:
            return []
        try:
            client = self._get_client()
            resp = await client.post(
                f"{get_ollama_url()}/api/embed",
                json={"model": self.model, "input": list(texts)},
                timeout=get_embedding_timeout(),
            )
            resp.raise_for_status()
            # Ollama /api/embed returns {"embeddings": [[...], ...]}
            vectors: list[list[float]] = resp.json()["embeddings"]
        except Exception as exc:
            self._available = None
            raise EmbeddingUnavailable(f"Embedding request failed: {exc}") from exc

        if len(vectors) != len(texts):
            raise EmbeddingUnavailable(
                f"Expected {len(texts)} embeddings, provider returned {len(vectors)}"
            )
        self._available = True
        return vectors

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    async def close(self) -> None:
        """Close the HTTP client if open."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
