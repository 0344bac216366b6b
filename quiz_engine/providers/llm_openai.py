from __future__ import annotations

import logging
import os

from quiz_engine.errors import UpstreamError
from quiz_engine.providers.base import LLMProvider

log = logging.getLogger("quiz_engine.llm")


class OpenAIProvider(LLMProvider):
    def __init__(self, model: str = "gpt-3.5-turbo", api_key: str | None = None):
        import openai
        self._openai = openai
        self.client = openai.AsyncOpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY", ""),
        )
        self.model = model

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 3000,
    ) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=messages,
            )
        except self._openai.APIStatusError as e:
            log.error("OpenAI API error (%s): %s", e.status_code, e.message)
            raise UpstreamError(status=e.status_code, details=e.message) from e
        except self._openai.APIError as e:
            log.error("OpenAI API error: %s", e)
            raise UpstreamError(details=str(e)) from e
        if not resp.choices:
            log.error("OpenAI response had no choices")
            raise UpstreamError(details="completion response had no choices")
        return resp.choices[0].message.content or ""

    def name(self) -> str:
        return f"openai/{self.model}"
