from __future__ import annotations
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from lecture_ai.models import Flashcard

NUMERIC_PRIORITIES = {1: "low", 2: "medium", 3: "high"}

class ExtractedTask(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    priority: Optional[str] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def null_string(cls, v):
        if v is None or (isinstance(v, str) and v.strip().lower() in {"", "null", "none"}):
            return None
        return str(v)

    @field_validator("title", "description", "type", "priority", mode="before")
    @classmethod
    def scalar_string(cls, v, info):
        # Models sometimes answer priority on the 1 (low) to 3 (high) scale.
        if info.field_name == "priority" and isinstance(v, (int, float)) and not isinstance(v, bool):
            return NUMERIC_PRIORITIES.get(int(v), "medium")
        if isinstance(v, (int, float, bool)):
            return str(v)
        return v

class TaskExtractionResult(BaseModel):
    tasks: List[ExtractedTask] = Field(default_factory=list)

class FlashcardResult(BaseModel):
    flashcards: List[Flashcard] = Field(default_factory=list)
