from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from googleapiclient.errors import HttpError

from api import dependencies
from api.main import app
from conftest import AUDIO_B64, AUDIO_BYTES, FakeService
from integration.calendar_integration import CalendarIntegration

TRANSCRIPT = "Homework 3 is due next Monday.\nIt is important.\nRead chapter 5 of the textbook."


@pytest.fixture
def client(processor_factory, lecture_store, task_store):
    calendar = CalendarIntegration(service=FakeService())
    app.dependency_overrides[dependencies.get_processor] = lambda: processor_factory(llm_reply="not json")
    app.dependency_overrides[dependencies.get_lecture_store] = lambda: lecture_store
    app.dependency_overrides[dependencies.get_task_store] = lambda: task_store
    app.dependency_overrides[dependencies.get_calendar] = lambda: calendar
    yield TestClient(app)
    app.dependency_overrides.clear()


def _lecture(client, **extra):
    r = client.post("/api/lectures", json={"title": "Recursion", "courseId": 4, **extra})
    assert r.status_code == 201
    return r.json()


def test_create_lecture_with_inline_audio(client):
    lecture = _lecture(client, audioContent=AUDIO_B64, audioType="audio/webm")

    assert lecture["audio_url"].startswith("/api/audio/lecture_recursion_")
    assert lecture["processing_status"] == "pending"
    assert lecture["has_inline_audio"] is True
    assert "audio_content" not in lecture

    audio = client.get(lecture["audio_url"])
    assert audio.status_code == 200
    assert audio.content == AUDIO_BYTES
    assert audio.headers["content-type"].startswith("audio/webm")


def test_upload_audio_then_list_by_course(client):
    lecture = _lecture(client)
    r = client.post("/api/upload-audio", json={"lectureId": lecture["id"], "audioUrl": "https://cdn.example.edu/a.mp3"})
    assert r.status_code == 200
    assert r.json()["lecture"]["audio_url"] == "https://cdn.example.edu/a.mp3"

    listed = client.get("/api/lectures", params={"course_id": 4}).json()
    assert [l["id"] for l in listed] == [lecture["id"]]


def test_unknown_lecture_is_404(client):
    r = client.get("/api/lectures/999")
    assert r.status_code == 404
    assert "999" in r.json()["message"]


def test_summarize_without_transcript_is_400(client):
    lecture = _lecture(client)
    r = client.post(f"/api/summarize/{lecture['id']}")
    assert r.status_code == 400
    assert client.get(f"/api/lectures/{lecture['id']}").json()["processing_status"] == "pending"


def test_manual_transcript_then_extract_with_fallback(client):
    lecture = _lecture(client)
    r = client.post(f"/api/transcribe/{lecture['id']}", json={"manualTranscript": TRANSCRIPT})
    assert r.status_code == 200
    assert r.json()["processing_status"] == "transcribed"

    # The fake LLM answers "not json", so the rule-based strategy takes over.
    r = client.post(f"/api/extract-tasks/{lecture['id']}")
    assert r.status_code == 200
    tasks = r.json()
    assert [t["type"] for t in tasks] == ["assignment", "reading"]
    assert tasks[0]["priority"] == "high"
    assert set(tasks[0]) == {
        "id", "lecture_id", "course_id", "title", "description", "type",
        "due_date", "priority", "completed", "calendar_event_id",
    }

    r = client.post(f"/api/extract-tasks/{lecture['id']}", params={"fallback": "false"})
    assert r.status_code == 502


def test_task_update_and_calendar_sync(client):
    lecture = _lecture(client)
    client.post(f"/api/transcribe/{lecture['id']}", json={"manual_transcript": "Lab report due 15/03/2030"})
    task = client.post(f"/api/extract-tasks/{lecture['id']}", params={"strategy": "rule_based"}).json()[0]

    r = client.put(f"/api/tasks/{task['id']}", json={"completed": True})
    assert r.status_code == 200
    assert r.json()["completed"] is True

    r = client.post(f"/api/calendar/events/{task['id']}")
    assert r.status_code == 200
    assert r.json()["calendar_event_id"] == "evt-1"

    by_lecture = client.get(f"/api/tasks/lecture/{lecture['id']}").json()
    assert by_lecture[0]["calendar_event_id"] == "evt-1"
    assert client.get("/api/tasks/course/4").json()[0]["due_date"] == "2030-03-15"


def test_calendar_resync_after_event_removed_upstream(client):
    service = FakeService()
    service.events().delete_error = HttpError(SimpleNamespace(status=404, reason="Not Found"), b"{}")
    app.dependency_overrides[dependencies.get_calendar] = lambda: CalendarIntegration(service=service)
    lecture = _lecture(client)
    client.post(f"/api/transcribe/{lecture['id']}", json={"manual_transcript": "Essay due 20/05/2030"})
    task = client.post(f"/api/extract-tasks/{lecture['id']}", params={"strategy": "rule_based"}).json()[0]
    client.put(f"/api/tasks/{task['id']}", json={"calendarEventId": "evt-stale"})

    r = client.post(f"/api/calendar/events/{task['id']}")

    assert r.status_code == 200
    assert r.json()["calendar_event_id"] == "evt-1"
    assert service.events().deleted == ["evt-stale"]


def test_calendar_disabled_is_503(client):
    app.dependency_overrides[dependencies.get_calendar] = lambda: CalendarIntegration()
    lecture = _lecture(client)
    client.post(f"/api/transcribe/{lecture['id']}", json={"manual_transcript": "Quiz due 01/04/2030"})
    task = client.post(f"/api/extract-tasks/{lecture['id']}", params={"strategy": "rule_based"}).json()[0]

    r = client.post(f"/api/calendar/events/{task['id']}")
    assert r.status_code == 503


def test_invalid_strategy_is_422(client):
    lecture = _lecture(client)
    r = client.post(f"/api/extract-tasks/{lecture['id']}", params={"strategy": "magic"})
    assert r.status_code == 422


def test_create_flashcards_requires_transcript(client):
    lecture = _lecture(client)
    assert client.post(f"/api/create-flashcards/{lecture['id']}").status_code == 400


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["storage"] == "in-memory"


def test_metrics_endpoint_exposes_prometheus_text(client):
    client.get("/api/lectures/999")
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "text/plain" in r.headers.get("content-type", "")
    assert 'lecture_requests_total{endpoint="/api/lectures/{lecture_id}",status="404"}' in r.text
    assert "lecture_request_latency_seconds" in r.text
