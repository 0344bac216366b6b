from __future__ import annotations

from abc import ABC, abstractmethod


class LLMProvider(ABC):
    """Completion service: instruction text in, raw completion text out.

    Implementations raise ``UpstreamError`` for service failures and do not
    retry.
    """

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 3000,
    ) -> str:
        ...

    @abstractmethod
    def name(self) -> str:
        ...
