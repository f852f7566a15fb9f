"""Generation provider module."""

from resume_search.llm.anthropic import AnthropicLLMClient
from resume_search.llm.ollama import OllamaLLMClient
from resume_search.llm.provider import LLMProvider, generate_text

__all__ = ["AnthropicLLMClient", "LLMProvider", "OllamaLLMClient", "generate_text"]
