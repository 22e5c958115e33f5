from api import state
from integration.calendar_integration import CalendarIntegration
from processing.lecture_processor import LectureProcessor
from storage.lecture_store import LectureStore, TaskStore


def get_lecture_store() -> LectureStore:
    return state.lecture_store


def get_task_store() -> TaskStore:
    return state.task_store


def get_processor() -> LectureProcessor:
    return state.processor


def get_calendar() -> CalendarIntegration:
    return state.calendar
