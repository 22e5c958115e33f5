from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Literal, Optional, List, Dict, Any

from pydantic import BaseModel, Field, field_validator, model_validator


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    TRANSCRIBING = "transcribing"
    TRANSCRIBED = "transcribed"
    SUMMARIZING = "summarizing"
    COMPLETED = "completed"
    FAILED = "failed"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Task types form an open set; these are the ones the default rule table knows.
KNOWN_TASK_TYPES = ("assignment", "quiz", "reading", "presentation", "lab")

PublicationStatus = Literal["draft", "published"]


class Lecture(BaseModel):
    id: int
    title: str = Field(..., min_length=1)
    course_id: int
    teacher_id: Optional[int] = None

    # Audio reference: either an external URL, or inline base64 content addressed
    # by a generated identifier (audio_url is then a pseudo-URL /api/audio/<id>).
    audio_url: Optional[str] = None
    audio_content: Optional[str] = None
    audio_type: Optional[str] = None
    audio_identifier: Optional[str] = None

    transcript: Optional[str] = None
    summary: Optional[str] = None
    duration: Optional[int] = None

    status: PublicationStatus = "draft"
    processing_status: ProcessingStatus = ProcessingStatus.PENDING

    version: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def status_matches_content(self) -> "Lecture":
        if self.processing_status == ProcessingStatus.TRANSCRIBED and not self.transcript:
            raise ValueError("a transcribed lecture must have a non-empty transcript")
        if self.processing_status == ProcessingStatus.COMPLETED and not self.summary:
            raise ValueError("a completed lecture must have a non-empty summary")
        return self

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_url or self.audio_content)

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript and self.transcript.strip())


class TaskDraft(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    type: str = "assignment"
    priority: Priority = Priority.MEDIUM
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("description", mode="before")
    @classmethod
    def description_not_null(cls, v: Any) -> str:
        return "" if v is None else v


class Task(TaskDraft):
    id: int
    lecture_id: int
    course_id: int
    completed: bool = False
    # Opaque; set by the calendar collaborator, never interpreted here.
    calendar_event_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)


class ExtractionResult(BaseModel):
    """Ordered drafts produced by one extraction strategy for one transcript."""

    lecture_id: int
    course_id: int
    strategy: str
    drafts: List[TaskDraft] = Field(default_factory=list)
    fell_back: bool = False

    def task_rows(self) -> List[Dict[str, Any]]:
        return [
            {**d.model_dump(), "lecture_id": self.lecture_id, "course_id": self.course_id}
            for d in self.drafts
        ]


class Flashcard(BaseModel):
    question: str
    answer: str
