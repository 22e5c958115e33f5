"""
Storage interfaces for lectures and tasks.

Two implementations exist: PostgreSQL (storage.postgres_store, asyncpg) and
in-memory (storage.memory_store) for tests and local runs without DATABASE_URL.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from lecture_ai.models import Lecture, Task


class LectureStore(ABC):
    @abstractmethod
    async def get(self, lecture_id: int) -> Optional[Lecture]:
        ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Lecture:
        """Insert a lecture, audio included, in a single write."""

    @abstractmethod
    async def update(self, lecture: Lecture, expected_version: int) -> Lecture:
        """
        Replace the stored lecture if its version still equals `expected_version`.

        Raises NotFoundError for an unknown id and ConflictError for a stale version.
        """

    @abstractmethod
    async def list_all(self) -> List[Lecture]:
        ...

    @abstractmethod
    async def list_by_course(self, course_id: int) -> List[Lecture]:
        ...

    @abstractmethod
    async def find_by_audio_identifier(self, identifier: str) -> Optional[Lecture]:
        ...


class TaskStore(ABC):
    @abstractmethod
    async def create_many(self, rows: List[Dict[str, Any]]) -> List[Task]:
        ...

    @abstractmethod
    async def get(self, task_id: int) -> Optional[Task]:
        ...

    @abstractmethod
    async def update(self, task_id: int, changes: Dict[str, Any]) -> Task:
        """Apply `changes` to a task. Raises NotFoundError for an unknown id."""

    @abstractmethod
    async def list_by_lecture(self, lecture_id: int) -> List[Task]:
        ...

    @abstractmethod
    async def list_by_course(self, course_id: int) -> List[Task]:
        ...
