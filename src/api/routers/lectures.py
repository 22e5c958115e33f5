import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from api.dependencies import get_lecture_store, get_processor
from lecture_ai.errors import NotFoundError
from lecture_ai.models import Lecture, PublicationStatus
from processing.lecture_processor import LectureProcessor
from storage.lecture_store import LectureStore

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    # Accept both audioUrl and audio_url style payloads.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LectureIn(_CamelModel):
    title: str = Field(..., min_length=1)
    course_id: int
    teacher_id: Optional[int] = None
    duration: Optional[int] = None
    status: PublicationStatus = "draft"
    audio_url: Optional[str] = None
    audio_content: Optional[str] = None  # base64, optionally a data: URI
    audio_type: Optional[str] = None


class UploadAudioIn(_CamelModel):
    lecture_id: int
    audio_url: Optional[str] = None
    audio_content: Optional[str] = None
    audio_type: Optional[str] = None


def lecture_out(lecture: Lecture) -> dict:
    """Lecture JSON without the inline audio blob."""
    out = lecture.model_dump(mode="json", exclude={"audio_content"})
    out["has_inline_audio"] = bool(lecture.audio_content)
    return out


@router.post("/lectures", status_code=201)
async def create_lecture(
    payload: LectureIn,
    processor: LectureProcessor = Depends(get_processor),
) -> dict:
    lecture = await processor.create_lecture(**payload.model_dump())
    return lecture_out(lecture)


@router.get("/lectures")
async def list_lectures(
    course_id: Optional[int] = None,
    lectures: LectureStore = Depends(get_lecture_store),
) -> list:
    if course_id is None:
        found = await lectures.list_all()
    else:
        found = await lectures.list_by_course(course_id)
    return [lecture_out(l) for l in found]


@router.get("/lectures/{lecture_id}")
async def get_lecture(
    lecture_id: int,
    processor: LectureProcessor = Depends(get_processor),
) -> dict:
    return lecture_out(await processor.get_lecture(lecture_id))


@router.post("/upload-audio")
async def upload_audio(
    payload: UploadAudioIn,
    processor: LectureProcessor = Depends(get_processor),
) -> dict:
    lecture = await processor.attach_audio(
        payload.lecture_id,
        audio_url=payload.audio_url,
        audio_content=payload.audio_content,
        audio_type=payload.audio_type,
    )
    return {"success": True, "lecture": lecture_out(lecture)}


@router.get("/audio/{identifier}")
async def serve_audio(
    identifier: str,
    processor: LectureProcessor = Depends(get_processor),
) -> Response:
    source = await processor.resolver.load(identifier)
    if source.content is None:
        raise NotFoundError(f"Audio file {identifier} not found")
    logger.info(f"Serving audio {identifier} ({len(source.content)} bytes)")
    return Response(
        content=source.content,
        media_type=source.mime_type,
        headers={"Content-Disposition": f'inline; filename="{identifier}"'},
    )
