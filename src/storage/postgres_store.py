"""
PostgreSQL-backed lecture and task stores.

All queries go through the asyncpg pool in storage.db. Lecture updates are
guarded by the `version` column, so two concurrent transitions on the same
lecture cannot both succeed.
"""

import logging
from typing import Any, Dict, List, Optional

import asyncpg

from lecture_ai.errors import ConflictError, NotFoundError
from lecture_ai.models import Lecture, Task
from storage import db
from storage.lecture_store import LectureStore, TaskStore

logger = logging.getLogger(__name__)

LECTURE_COLUMNS = (
    "title",
    "course_id",
    "teacher_id",
    "audio_url",
    "audio_content",
    "audio_type",
    "audio_identifier",
    "transcript",
    "summary",
    "duration",
    "status",
    "processing_status",
)

TASK_COLUMNS = (
    "lecture_id",
    "course_id",
    "type",
    "title",
    "description",
    "due_date",
    "priority",
    "completed",
    "calendar_event_id",
)


def _lecture_from_record(record) -> Lecture:
    return Lecture(**dict(record))


def _task_from_record(record) -> Task:
    return Task(**dict(record))


def _db_value(value: Any) -> Any:
    # Enums are stored by their string value.
    return getattr(value, "value", value)


class PostgresLectureStore(LectureStore):
    async def get(self, lecture_id: int) -> Optional[Lecture]:
        record = await db.fetchrow("SELECT * FROM lectures WHERE id = $1", lecture_id)
        return _lecture_from_record(record) if record else None

    async def create(self, data: Dict[str, Any]) -> Lecture:
        # Validate before writing so invalid payloads never reach the database.
        draft = Lecture(**{**data, "id": 0})
        columns = [c for c in LECTURE_COLUMNS if getattr(draft, c) is not None]
        values = [_db_value(getattr(draft, c)) for c in columns]
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))

        query = (
            f"INSERT INTO lectures ({', '.join(columns)}) "
            f"VALUES ({placeholders}) RETURNING *"
        )
        try:
            record = await db.fetchrow(query, *values)
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(f"Audio identifier {draft.audio_identifier} already in use") from e

        lecture = _lecture_from_record(record)
        logger.info(f"Created lecture {lecture.id} ({lecture.title})")
        return lecture

    async def update(self, lecture: Lecture, expected_version: int) -> Lecture:
        assignments = ", ".join(
            f"{c} = ${i}" for i, c in enumerate(LECTURE_COLUMNS, start=3)
        )
        version_param = len(LECTURE_COLUMNS) + 3
        query = (
            f"UPDATE lectures SET {assignments}, version = ${version_param} "
            f"WHERE id = $1 AND version = $2 RETURNING *"
        )
        values = [_db_value(getattr(lecture, c)) for c in LECTURE_COLUMNS]

        record = await db.fetchrow(query, lecture.id, expected_version, *values, lecture.version)
        if record is not None:
            return _lecture_from_record(record)

        current = await db.fetchval("SELECT version FROM lectures WHERE id = $1", lecture.id)
        if current is None:
            raise NotFoundError(f"Lecture {lecture.id} not found")
        raise ConflictError(
            f"Lecture {lecture.id} changed concurrently "
            f"(expected version {expected_version}, found {current})"
        )

    async def list_all(self) -> List[Lecture]:
        records = await db.fetch("SELECT * FROM lectures ORDER BY id")
        return [_lecture_from_record(r) for r in records]

    async def list_by_course(self, course_id: int) -> List[Lecture]:
        records = await db.fetch(
            "SELECT * FROM lectures WHERE course_id = $1 ORDER BY created_at DESC", course_id
        )
        return [_lecture_from_record(r) for r in records]

    async def find_by_audio_identifier(self, identifier: str) -> Optional[Lecture]:
        record = await db.fetchrow(
            "SELECT * FROM lectures WHERE audio_identifier = $1", identifier
        )
        return _lecture_from_record(record) if record else None


class PostgresTaskStore(TaskStore):
    async def create_many(self, rows: List[Dict[str, Any]]) -> List[Task]:
        placeholders = ", ".join(f"${i}" for i in range(1, len(TASK_COLUMNS) + 1))
        query = (
            f"INSERT INTO tasks ({', '.join(TASK_COLUMNS)}) "
            f"VALUES ({placeholders}) RETURNING *"
        )

        created: List[Task] = []
        async with db.transaction() as conn:
            for row in rows:
                draft = Task(**{**row, "id": 0})
                values = [_db_value(getattr(draft, c)) for c in TASK_COLUMNS]
                record = await conn.fetchrow(query, *values)
                created.append(_task_from_record(record))
        return created

    async def get(self, task_id: int) -> Optional[Task]:
        record = await db.fetchrow("SELECT * FROM tasks WHERE id = $1", task_id)
        return _task_from_record(record) if record else None

    async def update(self, task_id: int, changes: Dict[str, Any]) -> Task:
        current = await self.get(task_id)
        if current is None:
            raise NotFoundError(f"Task {task_id} not found")

        updated = Task(**{**current.model_dump(), **changes, "id": task_id})
        assignments = ", ".join(f"{c} = ${i}" for i, c in enumerate(TASK_COLUMNS, start=2))
        values = [_db_value(getattr(updated, c)) for c in TASK_COLUMNS]

        record = await db.fetchrow(
            f"UPDATE tasks SET {assignments} WHERE id = $1 RETURNING *", task_id, *values
        )
        if record is None:
            raise NotFoundError(f"Task {task_id} not found")
        return _task_from_record(record)

    async def list_by_lecture(self, lecture_id: int) -> List[Task]:
        records = await db.fetch(
            "SELECT * FROM tasks WHERE lecture_id = $1 ORDER BY id", lecture_id
        )
        return [_task_from_record(r) for r in records]

    async def list_by_course(self, course_id: int) -> List[Task]:
        records = await db.fetch(
            "SELECT * FROM tasks WHERE course_id = $1 ORDER BY due_date NULLS LAST, id", course_id
        )
        return [_task_from_record(r) for r in records]
