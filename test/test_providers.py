import json

import httpx
import pytest

from lecture_ai.errors import ConfigurationError, ProviderError
from llm.providers.gemini_provider import GeminiProvider
from llm.providers.ollama_provider import OllamaProvider
from llm.providers.openai_provider import OpenAIProvider


def _transport(status_code, body, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)


def test_openai_generate(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    seen = []
    provider = OpenAIProvider(
        transport=_transport(200, {"choices": [{"message": {"content": "hello"}}]}, seen)
    )

    assert provider.generate(system="sys", user="hi") == "hello"
    assert seen[0].url.path.endswith("/chat/completions")
    assert seen[0].headers["Authorization"] == "Bearer sk-test"
    assert json.loads(seen[0].content)["messages"][1] == {"role": "user", "content": "hi"}


def test_openai_http_error(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    provider = OpenAIProvider(transport=_transport(500, {"error": "boom"}))
    with pytest.raises(ProviderError):
        provider.generate(system="sys", user="hi")


def test_openai_unexpected_shape(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    provider = OpenAIProvider(transport=_transport(200, {"choices": []}))
    with pytest.raises(ProviderError):
        provider.generate(system="sys", user="hi")


def test_openai_missing_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        OpenAIProvider()


def test_gemini_generate(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-test")
    seen = []
    body = {"candidates": [{"content": {"parts": [{"text": "Part one. "}, {"text": "Part two."}]}}]}
    provider = GeminiProvider(transport=_transport(200, body, seen))

    assert provider.generate(system="sys", user="hi") == "Part one. Part two."
    assert seen[0].url.params["key"] == "g-test"
    assert ":generateContent" in seen[0].url.path


def test_gemini_missing_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        GeminiProvider()


def test_ollama_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = OllamaProvider(transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError):
        provider.generate(system="sys", user="hi")
