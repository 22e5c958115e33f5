from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

RULE_TABLE_PATH = os.getenv("RULE_TABLE_PATH", "data/rule_table.json")


class PriorityCues(BaseModel):
    high: List[str] = Field(default_factory=list)
    low: List[str] = Field(default_factory=list)


class RuleTable(BaseModel):
    """
    Keyword categories consulted by the rule-based extractor.

    `task_types` is ordered: when a line matches several categories the first
    one listed wins. `relative_phrases` maps a phrase to a symbolic target:
    "weekday:<name>", "+<n>d", "end_of_month" or "end_of_semester".
    """

    task_types: Dict[str, List[str]]
    due_cues: List[str] = Field(default_factory=list)
    priority_cues: PriorityCues = Field(default_factory=PriorityCues)
    relative_phrases: Dict[str, str] = Field(default_factory=dict)
    semester_end: str = "12-15"

    @field_validator("task_types", "relative_phrases")
    @classmethod
    def lower_keys(cls, v: dict) -> dict:
        return {k.lower(): val for k, val in v.items()}

    @field_validator("semester_end")
    @classmethod
    def month_day(cls, v: str) -> str:
        month, day = (int(p) for p in v.split("-"))
        if not (1 <= month <= 12 and 1 <= day <= 31):
            raise ValueError("semester_end must be MM-DD")
        return f"{month:02d}-{day:02d}"


DEFAULT_RULE_TABLE = RuleTable(
    task_types={
        "assignment": [
            "assignment", "homework", "exercise", "project", "paper", "essay",
            "submission", "task", "work", "write", "prepare", "create",
            "develop", "complete",
        ],
        "quiz": [
            "quiz", "test", "exam", "midterm", "final", "assessment",
            "evaluation", "examination",
        ],
        "reading": [
            "read", "reading", "textbook", "chapter", "article", "material",
            "literature", "book", "pages", "publication",
        ],
        "presentation": [
            "presentation", "present", "slides", "speech", "talk",
            "demonstrate", "demo",
        ],
        "lab": ["lab", "laboratory", "experiment", "practical"],
    },
    due_cues=[
        "due", "deadline", "submit by", "turn in by", "by the",
        "no later than", "before the", "not after",
    ],
    priority_cues=PriorityCues(
        high=["important", "critical", "crucial", "essential", "significant", "major", "key"],
        low=["optional", "if time permits", "extra credit", "bonus"],
    ),
    relative_phrases={
        "next monday": "weekday:monday",
        "next tuesday": "weekday:tuesday",
        "next wednesday": "weekday:wednesday",
        "next thursday": "weekday:thursday",
        "next friday": "weekday:friday",
        "next saturday": "weekday:saturday",
        "next sunday": "weekday:sunday",
        "next week": "+7d",
        "in two weeks": "+14d",
        "in 2 weeks": "+14d",
        "end of month": "end_of_month",
        "end of the month": "end_of_month",
        "end of semester": "end_of_semester",
        "end of the semester": "end_of_semester",
    },
    semester_end="12-15",
)


class RuleTableStore:
    def __init__(self, path: str = RULE_TABLE_PATH):
        self.path = Path(path)

    def load(self) -> RuleTable:
        """
        Load the rule table from disk. Returns the default table if the file
        is missing or invalid.
        """
        if not self.path.exists():
            return DEFAULT_RULE_TABLE
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return RuleTable(**data)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Invalid rule table at {self.path}, using defaults: {e}")
            return DEFAULT_RULE_TABLE

    def save(self, table: RuleTable) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(table.model_dump(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
