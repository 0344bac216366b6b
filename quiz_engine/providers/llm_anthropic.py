from __future__ import annotations

import logging
import os

from quiz_engine.errors import UpstreamError
from quiz_engine.providers.base import LLMProvider

log = logging.getLogger("quiz_engine.llm")


class AnthropicProvider(LLMProvider):
    def __init__(self, model: str = "claude-sonnet-4-20250514", api_key: str | None = None):
        import anthropic
        self._anthropic = anthropic
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key or os.environ.get("ANTHROPIC_API_KEY", ""),
        )
        self.model = model

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 3000,
    ) -> str:
        kwargs = {}
        if system:
            kwargs["system"] = system
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
        except self._anthropic.APIStatusError as e:
            log.error("Anthropic API error (%s): %s", e.status_code, e.message)
            raise UpstreamError(status=e.status_code, details=e.message) from e
        except self._anthropic.APIError as e:
            log.error("Anthropic API error: %s", e)
            raise UpstreamError(details=str(e)) from e
        return "".join(block.text for block in message.content if block.type == "text")

    def name(self) -> str:
        return f"anthropic/{self.model}"
