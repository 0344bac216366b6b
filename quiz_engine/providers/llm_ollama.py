from __future__ import annotations

import logging
import time

import httpx

from quiz_engine.errors import UpstreamError
from quiz_engine.providers.base import LLMProvider

log = logging.getLogger("quiz_engine.llm")


class OllamaProvider(LLMProvider):
    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "qwen3:8b",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._transport = transport

    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 3000,
    ) -> str:
        log.info("── PROMPT (%s) ──\n%s", self.model, prompt)
        body: dict = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "think": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if system:
            body["system"] = system

        t0 = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=120.0, transport=self._transport) as client:
                resp = await client.post(f"{self.base_url}/api/generate", json=body)
                resp.raise_for_status()
                data = resp.json()
        except ValueError as e:
            log.error("Ollama returned a non-JSON body: %.200r", resp.text)
            raise UpstreamError(details=f"invalid JSON from completion service: {e}") from e
        except httpx.HTTPStatusError as e:
            log.error("Ollama error (%s): %s", e.response.status_code, e.response.text)
            raise UpstreamError(status=e.response.status_code, details=e.response.text) from e
        except httpx.HTTPError as e:
            log.error("Ollama request failed: %s", e)
            raise UpstreamError(details=str(e), message="Could not reach the completion service") from e

        elapsed = time.monotonic() - t0
        response = data.get("response", "")
        tokens = data.get("eval_count", "?")
        log.info("── RESPONSE (%.1fs, %s tokens) ──\n%s", elapsed, tokens, response)
        return response

    def name(self) -> str:
        return f"ollama/{self.model}"
