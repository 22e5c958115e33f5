from datetime import date

import pytest
from pydantic import ValidationError

from lecture_ai.models import ExtractionResult, Lecture, Priority, ProcessingStatus, TaskDraft


def test_lecture_defaults():
    lecture = Lecture(id=1, title="Intro to Graphs", course_id=7)
    assert lecture.processing_status == ProcessingStatus.PENDING
    assert lecture.status == "draft"
    assert lecture.version == 0
    assert not lecture.has_audio
    assert not lecture.has_transcript


def test_transcribed_requires_transcript():
    with pytest.raises(ValidationError):
        Lecture(id=1, title="X", course_id=1, processing_status="transcribed")
    with pytest.raises(ValidationError):
        Lecture(id=1, title="X", course_id=1, processing_status="transcribed", transcript="")


def test_completed_requires_summary():
    with pytest.raises(ValidationError):
        Lecture(id=1, title="X", course_id=1, transcript="t", processing_status="completed")
    ok = Lecture(id=1, title="X", course_id=1, transcript="t", summary="s", processing_status="completed")
    assert ok.processing_status == ProcessingStatus.COMPLETED


def test_task_draft_blank_title():
    with pytest.raises(ValidationError):
        TaskDraft(title="   ")


def test_task_draft_null_description():
    draft = TaskDraft(title="Essay", description=None)
    assert draft.description == ""
    assert draft.priority == Priority.MEDIUM
    assert draft.type == "assignment"


def test_extraction_result_task_rows():
    result = ExtractionResult(
        lecture_id=3,
        course_id=9,
        strategy="rule_based",
        drafts=[TaskDraft(title="Lab 2", type="lab", due_date=date(2024, 3, 8))],
    )
    rows = result.task_rows()
    assert rows == [
        {
            "title": "Lab 2",
            "description": "",
            "type": "lab",
            "priority": Priority.MEDIUM,
            "due_date": date(2024, 3, 8),
            "lecture_id": 3,
            "course_id": 9,
        }
    ]
