from typing import Optional

from extraction.rule_table import DEFAULT_RULE_TABLE, RuleTable
from lecture_ai.models import Priority


class TaskClassifier:
    """Keyword classification of transcript lines into task type and priority."""

    def __init__(self, rules: Optional[RuleTable] = None):
        self.rules = rules or DEFAULT_RULE_TABLE

    def classify_type(self, line: str) -> Optional[str]:
        """First category (in rule-table order) with a keyword in the line, else None."""
        lowered = line.lower()
        for task_type, keywords in self.rules.task_types.items():
            if any(k.lower() in lowered for k in keywords):
                return task_type
        return None

    def classify_priority(self, window: str) -> Priority:
        lowered = window.lower()
        if any(k.lower() in lowered for k in self.rules.priority_cues.high):
            return Priority.HIGH
        if any(k.lower() in lowered for k in self.rules.priority_cues.low):
            return Priority.LOW
        return Priority.MEDIUM
