"""Environment-variable-based configuration."""

import os
from pathlib import Path


def get_db_path() -> Path:
    """Return the database file path from RS_DB_PATH."""
    raw = os.environ.get("RS_DB_PATH", "~/.local/share/resume_search/search.db")
    return Path(raw).expanduser()


def get_ollama_url() -> str:
    """Return the Ollama API URL from RS_OLLAMA_URL."""
    return os.environ.get("RS_OLLAMA_URL", "http://localhost:11434")


def get_embedding_model() -> str:
    """Return the embedding model name from RS_EMBEDDING_MODEL."""
    return os.environ.get("RS_EMBEDDING_MODEL", "qwen3-embedding:0.6b")


def get_embedding_dim() -> int:
    """Return the embedding vector dimensions from RS_EMBEDDING_DIM."""
    return int(os.environ.get("RS_EMBEDDING_DIM", "1024"))


def get_embedding_timeout() -> float:
    """Return the embedding call timeout in seconds from RS_EMBEDDING_TIMEOUT."""
    return float(os.environ.get("RS_EMBEDDING_TIMEOUT", "5.0"))


def get_index_timeout() -> float:
    """Return the vector index query timeout in seconds from RS_INDEX_TIMEOUT."""
    return float(os.environ.get("RS_INDEX_TIMEOUT", "5.0"))


def get_llm_provider() -> str:
    """Return the generation provider name from RS_LLM_PROVIDER."""
    return os.environ.get("RS_LLM_PROVIDER", "ollama").lower()


def get_llm_model() -> str:
    """Return the Ollama generation model from RS_LLM_MODEL."""
    return os.environ.get("RS_LLM_MODEL", "llama3.2")


def get_llm_timeout() -> float:
    """Return the generation timeout in seconds from RS_LLM_TIMEOUT."""
    return float(os.environ.get("RS_LLM_TIMEOUT", "30.0"))


def get_anthropic_model() -> str:
    """Return the Anthropic model name from RS_ANTHROPIC_MODEL."""
    return os.environ.get("RS_ANTHROPIC_MODEL", "claude-haiku-4-5")


def get_anthropic_timeout() -> float:
    """Return the Anthropic timeout in seconds from RS_ANTHROPIC_TIMEOUT."""
    return float(os.environ.get("RS_ANTHROPIC_TIMEOUT", "30.0"))


def get_cache_threshold() -> float:
    """Return the semantic cache acceptance threshold from RS_CACHE_THRESHOLD."""
    return float(os.environ.get("RS_CACHE_THRESHOLD", "0.85"))


def get_relevance_floor() -> float:
    """Return the retrieval relevance floor from RS_RELEVANCE_FLOOR."""
    return float(os.environ.get("RS_RELEVANCE_FLOOR", "0.3"))


def get_retrieval_top_k() -> int:
    """Return the nearest-neighbour K from RS_RETRIEVAL_TOP_K."""
    return int(os.environ.get("RS_RETRIEVAL_TOP_K", "20"))


def get_result_limit() -> int:
    """Return the number of references kept after reranking from RS_RESULT_LIMIT."""
    return int(os.environ.get("RS_RESULT_LIMIT", "10"))


def get_feedback_window() -> int:
    """Return how many recent feedback records per user feed the reranker."""
    return int(os.environ.get("RS_FEEDBACK_WINDOW", "50"))


def get_recency_horizon_days() -> float:
    """Return the recency decay horizon in days from RS_RECENCY_HORIZON_DAYS."""
    return float(os.environ.get("RS_RECENCY_HORIZON_DAYS", "180"))


def get_learning_queue_size() -> int:
    """Return the background write queue bound from RS_LEARNING_QUEUE_SIZE."""
    return int(os.environ.get("RS_LEARNING_QUEUE_SIZE", "256"))


def get_learning_max_attempts() -> int:
    """Return attempts per background write from RS_LEARNING_MAX_ATTEMPTS."""
    return int(os.environ.get("RS_LEARNING_MAX_ATTEMPTS", "3"))


def get_learning_retry_delay() -> float:
    """Return the base retry delay in seconds from RS_LEARNING_RETRY_DELAY."""
    return float(os.environ.get("RS_LEARNING_RETRY_DELAY", "0.5"))


def get_http_host() -> str:
    """Return the HTTP bind host from RS_HTTP_HOST."""
    return os.environ.get("RS_HTTP_HOST", "127.0.0.1")


def get_http_port() -> int:
    """Return the HTTP bind port from RS_HTTP_PORT."""
    return int(os.environ.get("RS_HTTP_PORT", "8000"))


def is_manager_mode() -> bool:
    """Return True if RS_MANAGER is set to TRUE."""
    return os.environ.get("RS_MANAGER", "").upper() == "TRUE"


def get_log_level() -> str:
    """Return the logging level from RS_LOG_LEVEL."""
    return os.environ.get("RS_LOG_LEVEL", "WARNING").upper()
