import logging
import os
from datetime import timedelta
from typing import List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from lecture_ai.errors import ConfigurationError, ProviderError
from lecture_ai.models import Task

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_CREDENTIALS_FILE = os.getenv("GOOGLE_CALENDAR_CREDENTIALS_FILE", "").strip()
GOOGLE_CALENDAR_ID = os.getenv("GOOGLE_CALENDAR_ID", "primary").strip()
SCOPES = ["https://www.googleapis.com/auth/calendar"]


def load_credentials(path: str = GOOGLE_CALENDAR_CREDENTIALS_FILE):
    """Service-account credentials, or None when no credentials file is configured."""
    if not path:
        return None
    try:
        return service_account.Credentials.from_service_account_file(path, scopes=SCOPES)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot load Google Calendar credentials from {path}: {e}") from e


def task_event(task: Task) -> dict:
    """All-day event body for a task; Google treats the end date as exclusive."""
    return {
        "summary": f"[{task.type.capitalize()}] {task.title}",
        "description": task.description,
        "start": {"date": task.due_date.isoformat()},
        "end": {"date": (task.due_date + timedelta(days=1)).isoformat()},
        "extendedProperties": {
            "private": {"lectureId": str(task.lecture_id), "taskId": str(task.id)}
        },
    }


class CalendarIntegration:

    def __init__(self, credentials=None, calendar_id: str = GOOGLE_CALENDAR_ID, service=None):
        self.credentials = credentials
        self.calendar_id = calendar_id
        self._service = service

    @property
    def enabled(self) -> bool:
        return self.credentials is not None or self._service is not None

    @property
    def service(self):
        if self._service is None:
            self._service = build(
                "calendar",
                "v3",
                credentials=self.credentials,
                cache_discovery=False,
            )
        return self._service

    def sync(self, tasks: List[Task]) -> List[Task]:
        """
        Create an all-day event for every task with a due date.

        Returns the tasks with calendar_event_id set. Without credentials this
        is a no-op and the tasks come back unchanged.
        """
        if not self.enabled:
            return list(tasks)

        synced: List[Task] = []
        for task in tasks:
            if task.due_date is None:
                synced.append(task)
                continue
            try:
                event = (
                    self.service.events()
                    .insert(calendarId=self.calendar_id, body=task_event(task))
                    .execute()
                )
            except HttpError as e:
                raise ProviderError(f"Google Calendar rejected task {task.id}: {e}") from e

            logger.info(f"Task {task.id} synced to calendar event {event['id']}")
            synced.append(task.model_copy(update={"calendar_event_id": event["id"]}))
        return synced

    def delete_event(self, event_id: Optional[str]) -> None:
        if not self.enabled or not event_id:
            return
        try:
            self.service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()
        except HttpError as e:
            if e.resp.status in (404, 410):
                logger.info(f"Calendar event {event_id} already gone")
                return
            raise ProviderError(f"Could not delete calendar event {event_id}: {e}") from e
        logger.info(f"Calendar event {event_id} deleted")
