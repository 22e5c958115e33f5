import json
import logging
import os
from datetime import date
from typing import Any, List, Optional

from pydantic import ValidationError

from lecture_ai.errors import ConfigurationError, ParseError
from lecture_ai.models import Flashcard
from llm.providers.base import LLMProvider
from llm.schemas import FlashcardResult, TaskExtractionResult

logger = logging.getLogger(__name__)

LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").strip().lower()

EXTRACTION_SYSTEM_PROMPT = """
You are an AI assistant specializing in extracting academic tasks from lecture transcripts.

Carefully analyze the transcript for these task types:
- Assignments (written work, papers, essays, homework, projects)
- Quizzes (quizzes, tests, midterms, finals)
- Readings (textbook chapters, articles)
- Presentations
- Lab work

For each task you find, extract:
1. A clear, descriptive title
2. A description that explains what students need to do
3. The due date in YYYY-MM-DD format (use today's date to resolve relative phrases such as "next week" or "by Friday")
4. The task type: assignment, quiz, reading, presentation or lab
5. A priority: low, medium or high
""".strip()

SUMMARY_SYSTEM_PROMPT = (
    "You are an AI assistant that summarizes academic lectures. Create a concise summary "
    "highlighting key concepts, main points, and important details. The summary should be "
    "well-structured with clear sections."
)

FLASHCARD_SYSTEM_PROMPT = (
    "You create educational flashcards from lecture transcripts. Focus on key concepts, "
    "definitions, and important facts."
)


def get_provider(name: Optional[str] = None) -> LLMProvider:
    """Build the provider named by `name` (or LLM_PROVIDER)."""
    name = (name or LLM_PROVIDER).lower()
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider
        return OpenAIProvider()
    if name == "gemini":
        from llm.providers.gemini_provider import GeminiProvider
        return GeminiProvider()
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider
        return OllamaProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider
        return MockProvider()
    raise ConfigurationError(f"Unknown LLM provider: {name}")


def parse_json(text: str) -> Any:
    """
    Parse a JSON reply, tolerating prose around a single object or array.

    Raises ParseError if no JSON value can be recovered.
    """
    if not text or not text.strip():
        raise ParseError("Empty reply")

    try:
        return json.loads(text)
    except ValueError:
        pass

    spans = sorted(
        (text.find(opener), text.rfind(closer))
        for opener, closer in (("{", "}"), ("[", "]"))
    )
    for start, end in spans:
        if start != -1 and end > start:
            try:
                return json.loads(text[start:end + 1])
            except ValueError:
                continue

    raise ParseError(f"Reply is not valid JSON: {text[:80]!r}")


class LLMClient:
    """Prompting and reply validation on top of a pluggable LLMProvider."""

    def __init__(self, provider: Optional[LLMProvider] = None):
        self.provider = provider or get_provider()

    def complete(self, prompt: str, system: str = SUMMARY_SYSTEM_PROMPT) -> str:
        return self.provider.generate(system=system, user=prompt)

    def extract_tasks(self, transcript: str, today: Optional[date] = None) -> TaskExtractionResult:
        today = today or date.today()
        prompt = (
            "Extract all academic tasks mentioned in this lecture transcript. For each task, provide "
            "a title, description, type, priority and due date (if mentioned).\n\n"
            f"Even if due dates are mentioned vaguely, convert them to actual dates based on the "
            f"current date being {today.isoformat()}.\n\n"
            'Format your response as a JSON object with a "tasks" array where each item has: '
            "title, description, type, priority, and dueDate (YYYY-MM-DD or null).\n\n"
            f"Transcript:\n{transcript}"
        )
        raw = self.complete(prompt, system=EXTRACTION_SYSTEM_PROMPT)
        data = parse_json(raw)

        if isinstance(data, list):
            data = {"tasks": data}
        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            raise ParseError('Reply has no "tasks" array')

        try:
            result = TaskExtractionResult(**data)
        except ValidationError as e:
            raise ParseError(f"Malformed task list: {e}") from e

        logger.info(f"LLM extracted {len(result.tasks)} tasks")
        return result

    def summarize(self, transcript: str) -> str:
        return self.complete(
            f"Please summarize the following lecture transcript:\n\n{transcript}",
            system=SUMMARY_SYSTEM_PROMPT,
        )

    def create_flashcards(self, transcript: str) -> List[Flashcard]:
        raw = self.complete(
            "Create a set of educational flashcards based on the following lecture transcript. "
            "Format your response as a JSON object with a 'flashcards' array, where each item has "
            f"'question' and 'answer' fields.\n\nTranscript:\n{transcript}",
            system=FLASHCARD_SYSTEM_PROMPT,
        )
        try:
            data = parse_json(raw)
            if isinstance(data, list):
                data = {"flashcards": data}
            return FlashcardResult(**data).flashcards
        except (ParseError, ValidationError, TypeError) as e:
            logger.warning(f"Could not parse flashcards reply: {e}")
            return []
