import asyncio
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from api.dependencies import get_calendar, get_task_store
from integration.calendar_integration import CalendarIntegration
from lecture_ai.errors import ConfigurationError, NotFoundError, PreconditionError
from lecture_ai.models import Priority, Task
from storage.lecture_store import TaskStore

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)


class TaskUpdateIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    completed: Optional[bool] = None
    calendar_event_id: Optional[str] = None


def task_out(task: Task) -> dict:
    return task.model_dump(mode="json", exclude={"created_at"})


@router.get("/tasks/lecture/{lecture_id}")
async def tasks_for_lecture(lecture_id: int, tasks: TaskStore = Depends(get_task_store)) -> list:
    return [task_out(t) for t in await tasks.list_by_lecture(lecture_id)]


@router.get("/tasks/course/{course_id}")
async def tasks_for_course(course_id: int, tasks: TaskStore = Depends(get_task_store)) -> list:
    return [task_out(t) for t in await tasks.list_by_course(course_id)]


@router.put("/tasks/{task_id}")
async def update_task(
    task_id: int,
    payload: TaskUpdateIn,
    tasks: TaskStore = Depends(get_task_store),
) -> dict:
    changes = payload.model_dump(exclude_unset=True)
    try:
        updated = await tasks.update(task_id, changes)
    except ValidationError as e:
        raise PreconditionError(f"Invalid task update: {e}") from e
    logger.info(f"Task {task_id} updated: {sorted(changes)}")
    return task_out(updated)


@router.post("/calendar/events/{task_id}")
async def create_calendar_event(
    task_id: int,
    tasks: TaskStore = Depends(get_task_store),
    calendar: CalendarIntegration = Depends(get_calendar),
) -> dict:
    task = await tasks.get(task_id)
    if task is None:
        raise NotFoundError(f"Task {task_id} not found")
    if not calendar.enabled:
        raise ConfigurationError("Google Calendar is not configured")
    if task.due_date is None:
        raise PreconditionError(f"Task {task_id} has no due date")

    # Replace any event created by an earlier sync.
    await asyncio.to_thread(calendar.delete_event, task.calendar_event_id)
    synced = await asyncio.to_thread(calendar.sync, [task])
    updated = await tasks.update(task_id, {"calendar_event_id": synced[0].calendar_event_id})
    return task_out(updated)
