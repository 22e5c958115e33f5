import base64

import pytest

from audio.source_resolver import AudioSource
from extraction.task_extractor import TaskExtractor
from extraction.ai_extractor import AIExtractor
from lecture_ai.errors import ProviderError
from llm.llm_client import LLMClient
from processing.lecture_processor import LectureProcessor
from storage.memory_store import InMemoryLectureStore, InMemoryTaskStore
from summarization.summarizer import Summarizer, SummaryEngine

AUDIO_BYTES = b"ID3\x00fake-mp3-frames"
AUDIO_B64 = base64.b64encode(AUDIO_BYTES).decode()


class FakeProvider:
    def __init__(self, response_text: str):
        self._response_text = response_text
        self.calls = []

    def generate(self, *, system: str, user: str) -> str:
        self.calls.append(user)
        return self._response_text


class FailingProvider:
    def generate(self, *, system: str, user: str) -> str:
        raise ProviderError("upstream returned 500")


class FakeTranscriber:
    def __init__(self, text: str = "Homework 1 is due next Monday.", error: Exception = None):
        self.text = text
        self.error = error
        self.received = []

    def transcribe(self, audio: AudioSource) -> str:
        self.received.append(audio)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def lecture_store():
    return InMemoryLectureStore()


@pytest.fixture
def task_store():
    return InMemoryTaskStore()


@pytest.fixture
def processor_factory(lecture_store, task_store):
    """LectureProcessor over in-memory stores with fake vendors."""

    def _make(transcriber=None, llm_reply="Summary of the lecture.", llm_provider=None):
        provider = llm_provider or FakeProvider(llm_reply)
        summarizer = Summarizer(
            provider_factories={engine: (lambda: provider) for engine in SummaryEngine}
        )
        extractor = TaskExtractor(ai_extractor=AIExtractor(LLMClient(provider=provider)))
        return LectureProcessor(
            lecture_store,
            task_store,
            transcriber_factory=lambda: transcriber or FakeTranscriber(),
            summarizer=summarizer,
            extractor=extractor,
        )

    return _make


class FakeCalendarRequest:
    def __init__(self, result):
        self._result = result

    def execute(self):
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeCalendarEvents:
    def __init__(self):
        self.inserted = []
        self.deleted = []
        self.delete_error = None

    def insert(self, calendarId, body):
        self.inserted.append((calendarId, body))
        return FakeCalendarRequest({"id": f"evt-{len(self.inserted)}"})

    def delete(self, calendarId, eventId):
        self.deleted.append(eventId)
        return FakeCalendarRequest(self.delete_error or {})


class FakeService:
    """Stand-in for the googleapiclient calendar service."""

    def __init__(self):
        self._events = FakeCalendarEvents()

    def events(self):
        return self._events
