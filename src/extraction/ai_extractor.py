from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from lecture_ai.models import KNOWN_TASK_TYPES, Priority, TaskDraft
from llm.llm_client import LLMClient
from llm.schemas import ExtractedTask

logger = logging.getLogger(__name__)


class AIExtractor:
    """
    Delegates extraction to an LLM and normalises its structured reply.

    Raises ParseError when the reply is not well-formed and ProviderError when
    the call itself fails; choosing a fallback is left to the caller.
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._llm_client = llm_client

    @property
    def llm(self) -> LLMClient:
        # Built on first use so a missing API key only matters if this strategy runs.
        if self._llm_client is None:
            self._llm_client = LLMClient()
        return self._llm_client

    def extract(self, transcript: str, today: Optional[date] = None) -> List[TaskDraft]:
        result = self.llm.extract_tasks(transcript, today=today)
        return [self._to_draft(t) for t in result.tasks]

    @staticmethod
    def _to_draft(task: ExtractedTask) -> TaskDraft:
        title = (task.title or "").strip() or "Untitled Task"
        task_type = (task.type or "").strip().lower() or "assignment"
        if task_type not in KNOWN_TASK_TYPES:
            logger.debug(f"Keeping non-standard task type from LLM: {task_type}")

        try:
            priority = Priority((task.priority or "medium").strip().lower())
        except ValueError:
            priority = Priority.MEDIUM

        return TaskDraft(
            title=title,
            description=task.description or "",
            type=task_type,
            priority=priority,
            due_date=_parse_iso_date(task.due_date),
        )


def _parse_iso_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        logger.debug(f"Dropping unparseable LLM due date: {value!r}")
        return None
