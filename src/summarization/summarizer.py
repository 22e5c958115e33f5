from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from lecture_ai.errors import ProviderError
from lecture_ai.models import Flashcard
from llm.llm_client import LLMClient, get_provider
from llm.providers.base import LLMProvider

logger = logging.getLogger(__name__)


class SummaryEngine(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


# Engine -> LLM provider name.
ENGINE_PROVIDERS = {
    SummaryEngine.PRIMARY: "openai",
    SummaryEngine.SECONDARY: "gemini",
}


class Summarizer:
    """
    Summaries and flashcards over the two summary engines.

    Providers are built on first use of each engine, so a missing key for the
    engine that is not used never raises ConfigurationError.
    """

    def __init__(self, provider_factories: Optional[Dict[SummaryEngine, Callable[[], LLMProvider]]] = None):
        self._factories = provider_factories or {
            engine: (lambda name=name: get_provider(name)) for engine, name in ENGINE_PROVIDERS.items()
        }
        self._clients: Dict[SummaryEngine, LLMClient] = {}

    def client(self, engine: SummaryEngine) -> LLMClient:
        engine = SummaryEngine(engine)
        if engine not in self._clients:
            self._clients[engine] = LLMClient(self._factories[engine]())
        return self._clients[engine]

    def summarize(self, text: str, engine: SummaryEngine = SummaryEngine.PRIMARY) -> str:
        logger.info(f"Summarizing {len(text)} chars with {SummaryEngine(engine).value} engine")
        summary = self.client(engine).summarize(text).strip()
        if not summary:
            raise ProviderError(f"{SummaryEngine(engine).value} engine returned an empty summary")
        return summary

    def flashcards(self, text: str) -> List[Flashcard]:
        cards = self.client(SummaryEngine.SECONDARY).create_flashcards(text)
        logger.info(f"Generated {len(cards)} flashcards")
        return cards
