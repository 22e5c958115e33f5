from __future__ import annotations

import os
from abc import ABC, abstractmethod

import httpx

from lecture_ai.errors import ProviderError

HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", "60"))


class LLMProvider(ABC):
    @abstractmethod
    def generate(self, *, system: str, user: str) -> str:
        """
        Must return the model output as TEXT (we'll parse/validate JSON in LLMClient).
        """
        raise NotImplementedError


def post_json(
    url: str,
    payload: dict,
    *,
    headers: dict | None = None,
    params: dict | None = None,
    transport: httpx.BaseTransport | None = None,
    timeout: float = HTTP_TIMEOUT_S,
) -> dict:
    """POST a JSON payload and return the decoded reply; any failure is a ProviderError."""
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            r = client.post(url, headers=headers, params=params, json=payload)
            r.raise_for_status()
            return r.json()
    except httpx.HTTPStatusError as e:
        raise ProviderError(
            f"{url} returned {e.response.status_code}: {e.response.text[:200]}"
        ) from e
    except (httpx.HTTPError, ValueError) as e:
        raise ProviderError(f"Request to {url} failed: {e}") from e
