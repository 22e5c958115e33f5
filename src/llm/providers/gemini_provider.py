from __future__ import annotations
import os
import httpx
from lecture_ai.errors import ConfigurationError, ProviderError
from .base import LLMProvider, post_json

class GeminiProvider(LLMProvider):
    def __init__(self, transport: httpx.BaseTransport | None = None):
        self.api_key = os.getenv("GEMINI_API_KEY", "").strip()
        self.model = os.getenv("GEMINI_MODEL", "gemini-1.5-flash").strip()
        self.base_url = os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).strip()
        self.transport = transport

        if not self.api_key:
            raise ConfigurationError("GEMINI_API_KEY is missing")

    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        url = f"{self.base_url}/models/{model or self.model}:generateContent"
        payload = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {"temperature": 0.2},
        }

        data = post_json(url, payload, params={"key": self.api_key}, transport=self.transport)

        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Gemini reply shape: {e}") from e
        return "".join(p.get("text", "") for p in parts)
