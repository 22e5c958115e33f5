from __future__ import annotations
import os
import httpx
from lecture_ai.errors import ConfigurationError, ProviderError
from .base import LLMProvider, post_json

class OpenAIProvider(LLMProvider):
    def __init__(self, transport: httpx.BaseTransport | None = None):
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o").strip()
        self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        self.transport = transport

        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is missing")

    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": 0.2,
        }

        data = post_json(url, payload, headers=headers, transport=self.transport)

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected OpenAI reply shape: {e}") from e
