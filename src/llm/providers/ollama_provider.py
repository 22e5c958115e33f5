from __future__ import annotations
import os
import httpx
from lecture_ai.errors import ProviderError
from .base import LLMProvider, post_json

class OllamaProvider(LLMProvider):
    def __init__(self, transport: httpx.BaseTransport | None = None):
        self.model = os.getenv("OLLAMA_MODEL", "llama3.1").strip()
        self.base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()
        self.transport = transport

    def generate(self, *, system: str, user: str, model: str | None = None) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": model or self.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "options": {"temperature": 0.2},
        }

        data = post_json(url, payload, transport=self.transport)

        try:
            return data["message"]["content"]
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected Ollama reply shape: {e}") from e
