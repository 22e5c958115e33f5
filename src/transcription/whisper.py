from __future__ import annotations

import logging
import mimetypes
import os

import httpx

from audio.source_resolver import AudioSource
from lecture_ai.errors import ConfigurationError, ProviderError
from transcription.base import Transcriber

logger = logging.getLogger(__name__)


class WhisperTranscriber(Transcriber):
    """OpenAI Whisper transcription. URL audio is downloaded first; the API only takes files."""

    def __init__(self, transport: httpx.BaseTransport | None = None):
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        self.model = os.getenv("WHISPER_MODEL", "whisper-1").strip()
        self.timeout_s = float(os.getenv("HTTP_TIMEOUT_S", "60"))
        self.transport = transport

        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is missing")

    def transcribe(self, audio: AudioSource) -> str:
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self.transport) as client:
                content = audio.content or b""
                if audio.is_url:
                    logger.info(f"Downloading audio from {audio.url}")
                    r = client.get(audio.url, follow_redirects=True)
                    r.raise_for_status()
                    content = r.content

                extension = mimetypes.guess_extension(audio.mime_type) or ".mp3"
                r = client.post(
                    f"{self.base_url}/audio/transcriptions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    data={"model": self.model, "language": "en"},
                    files={"file": (f"lecture{extension}", content, audio.mime_type)},
                )
                r.raise_for_status()
                return r.json().get("text") or ""
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Whisper request failed ({e.response.status_code}): {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"Whisper request failed: {e}") from e
