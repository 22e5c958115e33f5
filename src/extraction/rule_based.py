"""
Deterministic task extraction from transcript text.

Every line that mentions a task keyword becomes one draft. The line itself is
the title, the following line is the description, priority comes from the line
and the next one, and the due date from the line and the next two. No
deduplication or merging of adjacent lines is done.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import List, Optional

from classification.task_classifier import TaskClassifier
from extraction.date_resolver import DateResolver
from extraction.rule_table import DEFAULT_RULE_TABLE, RuleTable
from lecture_ai.models import TaskDraft

logger = logging.getLogger(__name__)

_EDGE_NON_WORD = re.compile(r"^\W+|\W+$")

PRIORITY_WINDOW = 2
DUE_DATE_WINDOW = 3


class RuleBasedExtractor:
    def __init__(self, rules: Optional[RuleTable] = None):
        self.rules = rules or DEFAULT_RULE_TABLE
        self.classifier = TaskClassifier(self.rules)
        self.date_resolver = DateResolver(self.rules)

    def extract(self, transcript: str, today: Optional[date] = None) -> List[TaskDraft]:
        today = today or date.today()
        lines = transcript.splitlines()
        drafts: List[TaskDraft] = []

        for i, line in enumerate(lines):
            task_type = self.classifier.classify_type(line)
            if task_type is None:
                continue

            title = _EDGE_NON_WORD.sub("", line.strip())
            if not title:
                continue
            description = lines[i + 1].strip() if i + 1 < len(lines) else ""

            priority = self.classifier.classify_priority(
                " ".join(lines[i:i + PRIORITY_WINDOW])
            )
            due_date = self.date_resolver.resolve_window(lines[i:i + DUE_DATE_WINDOW], today)

            drafts.append(
                TaskDraft(
                    title=title,
                    description=description,
                    type=task_type,
                    priority=priority,
                    due_date=due_date,
                )
            )

        logger.info(f"Rule-based extraction found {len(drafts)} tasks in {len(lines)} lines")
        return drafts
