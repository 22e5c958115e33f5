"""
Pure lecture state transitions.

    pending -> transcribing -> transcribed -> summarizing -> completed
    transcribing | summarizing -> failed

Each function returns a new Lecture with `version` bumped by one and leaves the
input untouched. Persisting the result (with the old version as the expected
one) is the caller's job.
"""

from __future__ import annotations

from typing import Any

from lecture_ai.errors import PreconditionError
from lecture_ai.models import Lecture, ProcessingStatus

TRANSCRIBABLE = frozenset({ProcessingStatus.PENDING, ProcessingStatus.FAILED})
IN_PROGRESS = frozenset({ProcessingStatus.TRANSCRIBING, ProcessingStatus.SUMMARIZING})


def _advance(lecture: Lecture, **changes: Any) -> Lecture:
    # Rebuilt through the constructor so the status/content invariant is checked.
    return Lecture(**{**lecture.model_dump(), **changes, "version": lecture.version + 1})


def begin_transcription(lecture: Lecture) -> Lecture:
    if lecture.processing_status not in TRANSCRIBABLE:
        raise PreconditionError(
            f"Lecture {lecture.id} cannot be transcribed from status {lecture.processing_status.value}"
        )
    return _advance(lecture, processing_status=ProcessingStatus.TRANSCRIBING)


def complete_transcription(lecture: Lecture, transcript: str) -> Lecture:
    """Store a transcript. Manual transcripts skip `transcribing`, so pending/failed are accepted too."""
    if lecture.processing_status not in TRANSCRIBABLE | {ProcessingStatus.TRANSCRIBING}:
        raise PreconditionError(
            f"Lecture {lecture.id} cannot receive a transcript in status {lecture.processing_status.value}"
        )
    if not transcript or not transcript.strip():
        raise PreconditionError(f"Transcript for lecture {lecture.id} is empty")
    return _advance(lecture, transcript=transcript, processing_status=ProcessingStatus.TRANSCRIBED)


def begin_summary(lecture: Lecture) -> Lecture:
    if not lecture.has_transcript:
        raise PreconditionError(f"Lecture {lecture.id} does not have a transcript")
    if lecture.processing_status in IN_PROGRESS:
        raise PreconditionError(
            f"Lecture {lecture.id} is already {lecture.processing_status.value}"
        )
    return _advance(lecture, processing_status=ProcessingStatus.SUMMARIZING)


def complete_summary(lecture: Lecture, summary: str) -> Lecture:
    if lecture.processing_status != ProcessingStatus.SUMMARIZING:
        raise PreconditionError(
            f"Lecture {lecture.id} is not being summarized (status {lecture.processing_status.value})"
        )
    if not summary or not summary.strip():
        raise PreconditionError(f"Summary for lecture {lecture.id} is empty")
    return _advance(lecture, summary=summary, processing_status=ProcessingStatus.COMPLETED)


def fail(lecture: Lecture) -> Lecture:
    if lecture.processing_status not in IN_PROGRESS:
        raise PreconditionError(
            f"Lecture {lecture.id} cannot fail from status {lecture.processing_status.value}"
        )
    return _advance(lecture, processing_status=ProcessingStatus.FAILED)
