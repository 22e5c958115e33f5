from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Optional

from audio.source_resolver import AudioSource
from lecture_ai.errors import ConfigurationError

TRANSCRIPTION_PROVIDER = os.getenv("TRANSCRIPTION_PROVIDER", "assemblyai").strip().lower()


class Transcriber(ABC):
    @abstractmethod
    def transcribe(self, audio: AudioSource) -> str:
        """Return the transcript text. Blocking; raises ProviderError on any vendor failure."""
        raise NotImplementedError


def get_transcriber(name: Optional[str] = None) -> Transcriber:
    """Build the transcriber named by `name` (or TRANSCRIPTION_PROVIDER)."""
    name = (name or TRANSCRIPTION_PROVIDER).lower()
    if name == "assemblyai":
        from transcription.assemblyai import AssemblyAITranscriber
        return AssemblyAITranscriber()
    if name == "whisper":
        from transcription.whisper import WhisperTranscriber
        return WhisperTranscriber()
    raise ConfigurationError(f"Unknown transcription provider: {name}")
