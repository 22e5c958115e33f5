from __future__ import annotations

import logging
import os
import time
from typing import Callable

import httpx

from audio.source_resolver import AudioSource
from lecture_ai.errors import ConfigurationError, ProviderError
from transcription.base import Transcriber

logger = logging.getLogger(__name__)


class AssemblyAITranscriber(Transcriber):
    """
    AssemblyAI transcription: upload (or pass a URL through), create a job, poll.

    Polling is bounded by ASSEMBLYAI_MAX_POLLS * ASSEMBLYAI_POLL_INTERVAL_S; a job
    that has not finished by then is reported as a ProviderError.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = os.getenv("ASSEMBLYAI_API_KEY", "").strip()
        self.base_url = os.getenv("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com/v2").strip()
        self.poll_interval_s = float(os.getenv("ASSEMBLYAI_POLL_INTERVAL_S", "2"))
        self.max_polls = int(os.getenv("ASSEMBLYAI_MAX_POLLS", "60"))
        self.timeout_s = float(os.getenv("HTTP_TIMEOUT_S", "60"))
        self.transport = transport
        self._sleep = sleep

        if not self.api_key:
            raise ConfigurationError("ASSEMBLYAI_API_KEY is missing")

    def transcribe(self, audio: AudioSource) -> str:
        try:
            with httpx.Client(
                base_url=self.base_url,
                headers={"authorization": self.api_key},
                timeout=self.timeout_s,
                transport=self.transport,
            ) as client:
                return self._run(client, audio)
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"AssemblyAI request failed: {e.response.status_code} - {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, KeyError) as e:
            raise ProviderError(f"AssemblyAI request failed: {e}") from e

    def _run(self, client: httpx.Client, audio: AudioSource) -> str:
        audio_url = audio.url if audio.is_url else self._upload(client, audio.content or b"")

        r = client.post("/transcript", json={"audio_url": audio_url, "language_code": "en"})
        job_id = _json_object(r)["id"]
        logger.info(f"AssemblyAI transcription job created: {job_id}")

        for _ in range(self.max_polls):
            self._sleep(self.poll_interval_s)
            result = _json_object(client.get(f"/transcript/{job_id}"))

            status = result.get("status")
            if status == "completed":
                logger.info(f"AssemblyAI job {job_id} completed")
                return result.get("text") or ""
            if status == "error":
                raise ProviderError(f"AssemblyAI transcription failed: {result.get('error', 'unknown error')}")

            logger.debug(f"AssemblyAI job {job_id} status: {status} ({result.get('progress') or 0}%)")

        raise ProviderError(
            f"AssemblyAI transcription timed out after {self.max_polls * self.poll_interval_s:.0f}s"
        )

    def _upload(self, client: httpx.Client, content: bytes) -> str:
        logger.info(f"Uploading {len(content)} bytes of audio to AssemblyAI")
        r = client.post(
            "/upload",
            content=content,
            headers={"content-type": "application/octet-stream"},
        )
        return _json_object(r)["upload_url"]


def _json_object(r: httpx.Response) -> dict:
    r.raise_for_status()
    body = r.json()
    if not isinstance(body, dict):
        raise ProviderError(f"AssemblyAI returned {type(body).__name__} where an object was expected")
    return body
