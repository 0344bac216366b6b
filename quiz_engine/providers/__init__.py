from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quiz_engine.config import Settings
    from quiz_engine.providers.base import LLMProvider


def get_llm(settings: Settings) -> LLMProvider:
    """Build the completion provider named by ``settings.llm_provider``."""
    if settings.llm_provider == "ollama":
        from quiz_engine.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=settings.ollama_url, model=settings.llm_model)
    elif settings.llm_provider == "anthropic":
        from quiz_engine.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider(model=settings.llm_model)
    elif settings.llm_provider == "openai":
        from quiz_engine.providers.llm_openai import OpenAIProvider
        return OpenAIProvider(model=settings.llm_model)
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
