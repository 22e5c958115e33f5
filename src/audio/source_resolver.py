"""
Locate the audio for a lecture record.

Audio is stored either as an external URL, or inline as base64 content
addressed by a generated identifier behind the pseudo-URL
/api/audio/<identifier>. Lectures and their audio used to be written in two
separate updates, so records exist whose pseudo-URL points at content that
lives on another row; the substring and title-fragment scans below are kept
only as a compatibility path for that data.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from lecture_ai.errors import NotFoundError, PreconditionError
from lecture_ai.models import Lecture
from storage.lecture_store import LectureStore

logger = logging.getLogger(__name__)

VIRTUAL_AUDIO_PREFIX = "/api/audio/"
DEFAULT_AUDIO_TYPE = "audio/mp3"

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*://")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class AudioSource:
    """Either a URL the transcription vendor fetches itself, or decoded bytes."""

    url: Optional[str] = None
    content: Optional[bytes] = None
    mime_type: str = DEFAULT_AUDIO_TYPE

    @property
    def is_url(self) -> bool:
        return self.url is not None


def is_external_url(reference: Optional[str]) -> bool:
    return bool(reference and _SCHEME_RE.match(reference))


def new_audio_identifier(title: str) -> str:
    """`lecture_<title-slug>_<millis>_<hex>`; the slug keeps the title-fragment match working."""
    slug = _SLUG_RE.sub("", title.lower().split()[0]) if title.strip() else ""
    return f"lecture_{slug or 'untitled'}_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def virtual_audio_url(identifier: str) -> str:
    return f"{VIRTUAL_AUDIO_PREFIX}{identifier}"


def identifier_from_reference(reference: str) -> str:
    return reference.rstrip("/").rsplit("/", 1)[-1]


def decode_audio_content(content: str) -> bytes:
    # Tolerate a data URI prefix such as "data:audio/webm;base64,".
    payload = content.split(",", 1)[1] if content.startswith("data:") else content
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise NotFoundError(f"Stored audio content is not valid base64: {e}") from e


class AudioSourceResolver:
    def __init__(self, lectures: LectureStore):
        self.lectures = lectures

    async def resolve(self, lecture: Lecture) -> AudioSource:
        if not lecture.has_audio:
            raise PreconditionError(f"Lecture {lecture.id} does not have an audio file")

        if is_external_url(lecture.audio_url):
            logger.info(f"Lecture {lecture.id}: using external audio URL")
            return AudioSource(url=lecture.audio_url, mime_type=lecture.audio_type or DEFAULT_AUDIO_TYPE)

        if lecture.audio_content:
            logger.info(f"Lecture {lecture.id}: using inline audio content")
            return self._from_record(lecture)

        identifier = lecture.audio_identifier or identifier_from_reference(lecture.audio_url or "")
        source = await self.find_by_identifier(identifier)
        if source is None:
            raise NotFoundError(
                f"Audio referenced by {lecture.audio_url} but no content found for {identifier}"
            )
        return source

    async def find_by_identifier(self, identifier: str) -> Optional[AudioSource]:
        """Look up inline audio by virtual identifier; returns None if nothing matches."""
        if not identifier:
            return None

        match = await self.lectures.find_by_audio_identifier(identifier)
        if match is not None and match.audio_content:
            logger.info(f"Audio {identifier} found by identifier on lecture {match.id}")
            return self._from_record(match)

        return await self._scan_for_identifier(identifier)

    async def _scan_for_identifier(self, identifier: str) -> Optional[AudioSource]:
        candidates = [l for l in await self.lectures.list_all() if l.audio_content]
        logger.warning(
            f"Audio {identifier} not indexed, scanning {len(candidates)} lectures with inline audio"
        )

        for candidate in candidates:
            if candidate.audio_url and identifier in candidate.audio_url:
                logger.info(f"Audio {identifier} matched lecture {candidate.id} by URL")
                return self._from_record(candidate)

        parts = identifier.split("_")
        if len(parts) >= 2 and parts[1]:
            fragment = parts[1].lower()
            for candidate in candidates:
                if fragment in candidate.title.lower():
                    logger.info(f"Audio {identifier} matched lecture {candidate.id} by title fragment")
                    return self._from_record(candidate)

        return None

    @staticmethod
    def _from_record(lecture: Lecture) -> AudioSource:
        return AudioSource(
            content=decode_audio_content(lecture.audio_content or ""),
            mime_type=lecture.audio_type or DEFAULT_AUDIO_TYPE,
        )

    async def load(self, identifier: str) -> AudioSource:
        """Inline audio for GET /api/audio/<identifier>; a numeric identifier is a lecture id."""
        if identifier.isdigit():
            lecture = await self.lectures.get(int(identifier))
            if lecture is None or not lecture.audio_content:
                raise NotFoundError(f"No inline audio stored for lecture {identifier}")
            return self._from_record(lecture)

        source = await self.find_by_identifier(identifier)
        if source is None:
            raise NotFoundError(f"Audio file {identifier} not found")
        return source
