import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from api.routers.lectures import lecture_out
from api.routers.tasks import task_out
from api.dependencies import get_processor
from extraction.task_extractor import ExtractionStrategy
from processing.lecture_processor import LectureProcessor
from summarization.summarizer import SummaryEngine

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


class TranscribeIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    manual_transcript: Optional[str] = None


@router.post("/transcribe/{lecture_id}")
async def transcribe(
    lecture_id: int,
    payload: Optional[TranscribeIn] = None,
    processor: LectureProcessor = Depends(get_processor),
) -> dict:
    manual = payload.manual_transcript if payload else None
    lecture = await processor.transcribe(lecture_id, manual_transcript=manual)
    return lecture_out(lecture)


@router.post("/summarize/{lecture_id}")
async def summarize(
    lecture_id: int,
    engine: SummaryEngine = SummaryEngine.PRIMARY,
    processor: LectureProcessor = Depends(get_processor),
) -> dict:
    lecture = await processor.summarize(lecture_id, engine=engine)
    return lecture_out(lecture)


@router.post("/extract-tasks/{lecture_id}")
async def extract_tasks(
    lecture_id: int,
    strategy: ExtractionStrategy = ExtractionStrategy.AI,
    fallback: bool = True,
    processor: LectureProcessor = Depends(get_processor),
) -> list:
    tasks = await processor.extract_tasks(lecture_id, strategy=strategy, use_fallback=fallback)
    return [task_out(t) for t in tasks]


@router.post("/create-flashcards/{lecture_id}")
async def create_flashcards(
    lecture_id: int,
    processor: LectureProcessor = Depends(get_processor),
) -> dict:
    flashcards = await processor.create_flashcards(lecture_id)
    return {"flashcards": [f.model_dump() for f in flashcards]}
