from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Optional

from lecture_ai.errors import ConflictError, NotFoundError
from lecture_ai.models import Lecture, Task
from storage.lecture_store import LectureStore, TaskStore

logger = logging.getLogger(__name__)


class InMemoryLectureStore(LectureStore):
    def __init__(self) -> None:
        self._lectures: Dict[int, Lecture] = {}
        self._ids = itertools.count(1)

    async def get(self, lecture_id: int) -> Optional[Lecture]:
        return self._lectures.get(lecture_id)

    async def create(self, data: Dict[str, Any]) -> Lecture:
        lecture = Lecture(**{**data, "id": next(self._ids), "version": 0})
        if lecture.audio_identifier and await self.find_by_audio_identifier(lecture.audio_identifier):
            raise ConflictError(f"Audio identifier {lecture.audio_identifier} already in use")
        self._lectures[lecture.id] = lecture
        return lecture

    async def update(self, lecture: Lecture, expected_version: int) -> Lecture:
        current = self._lectures.get(lecture.id)
        if current is None:
            raise NotFoundError(f"Lecture {lecture.id} not found")
        if current.version != expected_version:
            raise ConflictError(
                f"Lecture {lecture.id} changed concurrently "
                f"(expected version {expected_version}, found {current.version})"
            )
        self._lectures[lecture.id] = lecture
        return lecture

    async def list_all(self) -> List[Lecture]:
        return list(self._lectures.values())

    async def list_by_course(self, course_id: int) -> List[Lecture]:
        return [l for l in self._lectures.values() if l.course_id == course_id]

    async def find_by_audio_identifier(self, identifier: str) -> Optional[Lecture]:
        for lecture in self._lectures.values():
            if lecture.audio_identifier == identifier:
                return lecture
        return None


class InMemoryTaskStore(TaskStore):
    def __init__(self) -> None:
        self._tasks: Dict[int, Task] = {}
        self._ids = itertools.count(1)

    async def create_many(self, rows: List[Dict[str, Any]]) -> List[Task]:
        created = [Task(**{**row, "id": next(self._ids)}) for row in rows]
        for task in created:
            self._tasks[task.id] = task
        return created

    async def get(self, task_id: int) -> Optional[Task]:
        return self._tasks.get(task_id)

    async def update(self, task_id: int, changes: Dict[str, Any]) -> Task:
        current = self._tasks.get(task_id)
        if current is None:
            raise NotFoundError(f"Task {task_id} not found")
        updated = Task(**{**current.model_dump(), **changes, "id": task_id})
        self._tasks[task_id] = updated
        return updated

    async def list_by_lecture(self, lecture_id: int) -> List[Task]:
        return [t for t in self._tasks.values() if t.lecture_id == lecture_id]

    async def list_by_course(self, course_id: int) -> List[Task]:
        return [t for t in self._tasks.values() if t.course_id == course_id]
