from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

PROVIDERS = ("openai", "anthropic", "ollama")

# Environment variable holding the key for each provider (ollama needs none)
API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

# Model used when config.json names a provider but no model
DEFAULT_MODELS = {
    "openai": "gpt-3.5-turbo",
    "anthropic": "claude-sonnet-4-20250514",
    "ollama": "qwen3:8b",
}

DEFAULTS = {
    "llm_provider": "openai",
    "llm_model": "",
    "ollama_url": "http://localhost:11434",
    "temperature": 0.7,
    "max_tokens": 3000,
    "min_content_length": 100,
    "host": "127.0.0.1",
    "port": 3000,
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]
    llm_model: str = DEFAULTS["llm_model"]
    ollama_url: str = DEFAULTS["ollama_url"]
    temperature: float = DEFAULTS["temperature"]
    max_tokens: int = DEFAULTS["max_tokens"]
    min_content_length: int = DEFAULTS["min_content_length"]
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]

    def __post_init__(self):
        if not self.llm_model:
            self.llm_model = DEFAULT_MODELS.get(self.llm_provider, DEFAULT_MODELS["openai"])

    @property
    def api_key(self) -> str:
        env = API_KEY_ENV.get(self.llm_provider)
        return os.environ.get(env, "") if env else ""

    @property
    def api_key_configured(self) -> bool:
        if self.llm_provider not in API_KEY_ENV:
            return True
        return bool(self.api_key)

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "ollama_url": self.ollama_url,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "min_content_length": self.min_content_length,
            "host": self.host,
            "port": self.port,
        }


def infer_provider_from_key(api_key: str) -> str:
    """Legacy rule: keys starting with ``sk-ant-`` meant Anthropic, anything else OpenAI.

    Only for migrating old configs that stored a bare key; provider selection
    itself reads ``Settings.llm_provider``.
    """
    return "anthropic" if api_key.startswith("sk-ant-") else "openai"


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        # Migrate: bare "api_key" with no provider -> inferred provider
        if "api_key" in raw:
            raw.setdefault("llm_provider", infer_provider_from_key(str(raw["api_key"])))
            del raw["api_key"]
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()

