"""Tests for completion providers' request shape and error mapping."""
from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import pytest

from quiz_engine.errors import UpstreamError
from quiz_engine.providers.llm_ollama import OllamaProvider


def _ollama(handler) -> OllamaProvider:
    return OllamaProvider(
        base_url="http://ollama.test/",
        model="qwen3:8b",
        transport=httpx.MockTransport(handler),
    )


class TestOllamaProvider:
    @pytest.mark.asyncio
    async def test_generate(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": '{"questions": []}', "eval_count": 12})

        llm = _ollama(handler)
        out = await llm.generate("make a quiz", system="be strict", temperature=0.3, max_tokens=99)

        assert out == '{"questions": []}'
        assert seen["url"] == "http://ollama.test/api/generate"
        assert seen["body"]["prompt"] == "make a quiz"
        assert seen["body"]["system"] == "be strict"
        assert seen["body"]["stream"] is False
        assert seen["body"]["options"] == {"temperature": 0.3, "num_predict": 99}

    @pytest.mark.asyncio
    async def test_status_error(self):
        llm = _ollama(lambda request: httpx.Response(429, text="slow down"))
        with pytest.raises(UpstreamError) as exc:
            await llm.generate("prompt")
        assert exc.value.status == 429
        assert exc.value.message.startswith("Rate limit exceeded")
        assert exc.value.details == "slow down"

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError) as exc:
            await _ollama(handler).generate("prompt")
        assert exc.value.status is None

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        llm = _ollama(lambda request: httpx.Response(200, text="<html>proxy page</html>"))
        with pytest.raises(UpstreamError) as exc:
            await llm.generate("prompt")
        assert exc.value.status is None
        assert "invalid JSON" in exc.value.details


class TestOpenAIProvider:
    @pytest.mark.asyncio
    async def test_generate_sends_system_and_user(self, monkeypatch):
        from quiz_engine.providers.llm_openai import OpenAIProvider

        llm = OpenAIProvider(model="gpt-test", api_key="test-key")
        captured = {}

        async def fake_create(**kwargs):
            captured.update(kwargs)
            message = SimpleNamespace(content="{}")
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

        monkeypatch.setattr(llm.client.chat.completions, "create", fake_create)
        out = await llm.generate("prompt", system="sys", max_tokens=10)

        assert out == "{}"
        assert captured["model"] == "gpt-test"
        assert captured["max_tokens"] == 10
        assert captured["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "prompt"},
        ]

    @pytest.mark.asyncio
    async def test_status_error_mapped(self, monkeypatch):
        import openai

        from quiz_engine.providers.llm_openai import OpenAIProvider

        llm = OpenAIProvider(api_key="test-key")
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(403, request=request)

        async def fake_create(**kwargs):
            raise openai.PermissionDeniedError("no access", response=response, body=None)

        monkeypatch.setattr(llm.client.chat.completions, "create", fake_create)
        with pytest.raises(UpstreamError) as exc:
            await llm.generate("prompt")
        assert exc.value.status == 403
        assert "billing" in exc.value.message

    @pytest.mark.asyncio
    async def test_empty_choices(self, monkeypatch):
        from quiz_engine.providers.llm_openai import OpenAIProvider

        llm = OpenAIProvider(api_key="test-key")

        async def fake_create(**kwargs):
            return SimpleNamespace(choices=[])

        monkeypatch.setattr(llm.client.chat.completions, "create", fake_create)
        with pytest.raises(UpstreamError) as exc:
            await llm.generate("prompt")
        assert exc.value.details == "completion response had no choices"


class TestAnthropicProvider:
    @pytest.mark.asyncio
    async def test_generate_joins_text_blocks(self, monkeypatch):
        from quiz_engine.providers.llm_anthropic import AnthropicProvider

        llm = AnthropicProvider(model="claude-test", api_key="test-key")
        captured = {}

        async def fake_create(**kwargs):
            captured.update(kwargs)
            return SimpleNamespace(content=[
                SimpleNamespace(type="text", text='{"questions": '),
                SimpleNamespace(type="text", text="[]}"),
            ])

        monkeypatch.setattr(llm.client.messages, "create", fake_create)
        out = await llm.generate("prompt", system="sys")

        assert out == '{"questions": []}'
        assert captured["system"] == "sys"
        assert captured["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_status_error_mapped(self, monkeypatch):
        import anthropic

        from quiz_engine.providers.llm_anthropic import AnthropicProvider

        llm = AnthropicProvider(api_key="test-key")
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        response = httpx.Response(401, request=request)

        async def fake_create(**kwargs):
            raise anthropic.AuthenticationError("bad key", response=response, body=None)

        monkeypatch.setattr(llm.client.messages, "create", fake_create)
        with pytest.raises(UpstreamError) as exc:
            await llm.generate("prompt")
        assert exc.value.status == 401
        assert exc.value.message == "Invalid API key"
