from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, List, Optional

from api.metrics import EXTRACTION_FALLBACKS_TOTAL, PROCESSING_FAILURES_TOTAL, TASKS_EXTRACTED_TOTAL
from audio.source_resolver import (
    DEFAULT_AUDIO_TYPE,
    VIRTUAL_AUDIO_PREFIX,
    AudioSourceResolver,
    identifier_from_reference,
    is_external_url,
    new_audio_identifier,
    virtual_audio_url,
)
from extraction.task_extractor import ExtractionStrategy, TaskExtractor
from lecture_ai.errors import ConflictError, NotFoundError, ParseError, PreconditionError, ProviderError
from lecture_ai.models import ExtractionResult, Flashcard, Lecture, Task
from processing import transitions
from storage.lecture_store import LectureStore, TaskStore
from summarization.summarizer import SummaryEngine, Summarizer
from transcription.base import Transcriber, get_transcriber

logger = logging.getLogger(__name__)


class LectureProcessor:
    """
    Drives a lecture through transcription, summarization and task extraction.

    Every status change is written with the version it was read at, so a
    concurrent transition on the same lecture fails with ConflictError instead
    of overwriting. Vendor calls are blocking and run in worker threads.
    """

    def __init__(
        self,
        lectures: LectureStore,
        tasks: TaskStore,
        resolver: Optional[AudioSourceResolver] = None,
        transcriber_factory: Callable[[], Transcriber] = get_transcriber,
        summarizer: Optional[Summarizer] = None,
        extractor: Optional[TaskExtractor] = None,
    ):
        self.lectures = lectures
        self.tasks = tasks
        self.resolver = resolver or AudioSourceResolver(lectures)
        self.transcriber_factory = transcriber_factory
        self.summarizer = summarizer or Summarizer()
        self.extractor = extractor or TaskExtractor()

    async def get_lecture(self, lecture_id: int) -> Lecture:
        lecture = await self.lectures.get(lecture_id)
        if lecture is None:
            raise NotFoundError(f"Lecture {lecture_id} not found")
        return lecture

    async def create_lecture(
        self,
        title: str,
        course_id: int,
        teacher_id: Optional[int] = None,
        audio_url: Optional[str] = None,
        audio_content: Optional[str] = None,
        audio_type: Optional[str] = None,
        duration: Optional[int] = None,
        status: str = "draft",
    ) -> Lecture:
        """Create a lecture and its audio in one write."""
        data = {
            "title": title,
            "course_id": course_id,
            "teacher_id": teacher_id,
            "duration": duration,
            "status": status,
            **_audio_fields(title, audio_url, audio_content, audio_type),
        }
        lecture = await self.lectures.create(data)
        logger.info(f"Lecture {lecture.id} created (audio: {lecture.has_audio})")
        return lecture

    async def attach_audio(
        self,
        lecture_id: int,
        audio_url: Optional[str] = None,
        audio_content: Optional[str] = None,
        audio_type: Optional[str] = None,
    ) -> Lecture:
        if not audio_url and not audio_content:
            raise PreconditionError("No audio URL or content provided")

        lecture = await self.get_lecture(lecture_id)
        fields = _audio_fields(lecture.title, audio_url, audio_content, audio_type)
        updated = Lecture(**{**lecture.model_dump(), **fields, "version": lecture.version + 1})
        saved = await self.lectures.update(updated, expected_version=lecture.version)

        size = len(audio_content) if audio_content else 0
        logger.info(f"Audio attached to lecture {lecture_id} ({size} chars inline, url={saved.audio_url})")
        return saved

    async def transcribe(self, lecture_id: int, manual_transcript: Optional[str] = None) -> Lecture:
        lecture = await self.get_lecture(lecture_id)
        if lecture.processing_status not in transitions.TRANSCRIBABLE:
            raise PreconditionError(
                f"Lecture {lecture_id} cannot be transcribed from status {lecture.processing_status.value}"
            )

        if manual_transcript and manual_transcript.strip():
            done = await self._save(transitions.complete_transcription(lecture, manual_transcript), lecture)
            logger.info(f"Lecture {lecture_id}: manual transcript stored ({len(manual_transcript)} chars)")
            return done

        if not lecture.has_audio:
            raise PreconditionError(f"Lecture {lecture_id} does not have an audio file")

        # Missing credentials must surface before the lecture leaves its current status.
        transcriber = self.transcriber_factory()

        started = await self._save(transitions.begin_transcription(lecture), lecture)
        logger.info(f"Lecture {lecture_id}: transcription started")
        try:
            audio = await self.resolver.resolve(started)
            transcript = await asyncio.to_thread(transcriber.transcribe, audio)
            if not transcript or not transcript.strip():
                raise ProviderError("Transcription service returned no text")
        except BaseException as e:
            # Any escape, cancellation included, must leave the lecture retryable.
            await self._mark_failed(started, "transcribe", e)
            raise

        done = await self._save(transitions.complete_transcription(started, transcript), started)
        logger.info(f"Lecture {lecture_id}: transcribed ({len(transcript)} chars)")
        return done

    async def summarize(self, lecture_id: int, engine: SummaryEngine = SummaryEngine.PRIMARY) -> Lecture:
        lecture = await self.get_lecture(lecture_id)
        begun = transitions.begin_summary(lecture)

        # Builds the engine provider now so missing credentials fail before any write.
        self.summarizer.client(engine)

        started = await self._save(begun, lecture)
        logger.info(f"Lecture {lecture_id}: summarization started ({SummaryEngine(engine).value})")
        try:
            summary = await asyncio.to_thread(self.summarizer.summarize, started.transcript, engine)
        except BaseException as e:
            await self._mark_failed(started, "summarize", e)
            raise

        done = await self._save(transitions.complete_summary(started, summary), started)
        logger.info(f"Lecture {lecture_id}: summary stored ({len(summary)} chars)")
        return done

    async def run_extraction(
        self,
        lecture: Lecture,
        strategy: ExtractionStrategy = ExtractionStrategy.AI,
        use_fallback: bool = True,
        today: Optional[date] = None,
    ) -> ExtractionResult:
        """
        Extract drafts without persisting them.

        With `use_fallback`, a ParseError or ProviderError from the AI strategy
        is replaced by a rule-based run; ConfigurationError always propagates.
        """
        if not lecture.has_transcript:
            raise PreconditionError(f"Lecture {lecture.id} does not have a transcript")

        strategy = ExtractionStrategy(strategy)
        try:
            return await asyncio.to_thread(
                self.extractor.extract, lecture.transcript, lecture.id, lecture.course_id, strategy, today
            )
        except (ParseError, ProviderError) as e:
            if not use_fallback or strategy is ExtractionStrategy.RULE_BASED:
                raise
            logger.warning(f"Lecture {lecture.id}: AI extraction failed ({e}), using rule-based extraction")
            EXTRACTION_FALLBACKS_TOTAL.inc()

        result = await asyncio.to_thread(
            self.extractor.extract,
            lecture.transcript,
            lecture.id,
            lecture.course_id,
            ExtractionStrategy.RULE_BASED,
            today,
        )
        return result.model_copy(update={"fell_back": True})

    async def extract_tasks(
        self,
        lecture_id: int,
        strategy: ExtractionStrategy = ExtractionStrategy.AI,
        use_fallback: bool = True,
        today: Optional[date] = None,
    ) -> List[Task]:
        """Extract and persist tasks. Every call adds new rows; processing_status is not touched."""
        lecture = await self.get_lecture(lecture_id)
        result = await self.run_extraction(lecture, strategy, use_fallback, today)

        created = await self.tasks.create_many(result.task_rows())
        TASKS_EXTRACTED_TOTAL.labels(strategy=result.strategy).inc(len(created))
        logger.info(
            f"Lecture {lecture_id}: {len(created)} tasks stored "
            f"(strategy={result.strategy}, fell_back={result.fell_back})"
        )
        return created

    async def create_flashcards(self, lecture_id: int) -> List[Flashcard]:
        lecture = await self.get_lecture(lecture_id)
        if not lecture.has_transcript:
            raise PreconditionError(f"Lecture {lecture_id} does not have a transcript")
        return await asyncio.to_thread(self.summarizer.flashcards, lecture.transcript)

    async def _save(self, lecture: Lecture, previous: Lecture) -> Lecture:
        return await self.lectures.update(lecture, expected_version=previous.version)

    async def _mark_failed(self, lecture: Lecture, step: str, error: BaseException) -> None:
        PROCESSING_FAILURES_TOTAL.labels(step=step).inc()
        logger.error(f"Lecture {lecture.id}: {step} failed: {type(error).__name__}: {error}")
        try:
            await self._save(transitions.fail(lecture), lecture)
        except ConflictError:
            logger.warning(f"Lecture {lecture.id} changed before it could be marked failed")


def _audio_fields(
    title: str,
    audio_url: Optional[str],
    audio_content: Optional[str],
    audio_type: Optional[str],
) -> dict:
    if not audio_url and not audio_content:
        return {}

    fields = {
        "audio_url": audio_url,
        "audio_content": audio_content,
        "audio_type": audio_type or (DEFAULT_AUDIO_TYPE if audio_content else None),
        "audio_identifier": None,
    }
    if audio_content and not is_external_url(audio_url):
        if audio_url and audio_url.startswith(VIRTUAL_AUDIO_PREFIX):
            identifier = identifier_from_reference(audio_url)
        else:
            identifier = new_audio_identifier(title)
        fields["audio_identifier"] = identifier
        fields["audio_url"] = virtual_audio_url(identifier)
    return fields
