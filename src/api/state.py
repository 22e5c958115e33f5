from extraction.rule_based import RuleBasedExtractor
from extraction.rule_table import RuleTableStore
from extraction.task_extractor import TaskExtractor
from integration.calendar_integration import CalendarIntegration
from processing.lecture_processor import LectureProcessor
from storage.lecture_store import LectureStore, TaskStore
from storage.memory_store import InMemoryLectureStore, InMemoryTaskStore


def build_processor(lectures: LectureStore, tasks: TaskStore) -> LectureProcessor:
    rules = RuleTableStore().load()
    return LectureProcessor(
        lectures,
        tasks,
        extractor=TaskExtractor(rule_based=RuleBasedExtractor(rules)),
    )


# In-memory until startup swaps in PostgreSQL (when DATABASE_URL is set).
lecture_store: LectureStore = InMemoryLectureStore()
task_store: TaskStore = InMemoryTaskStore()
processor: LectureProcessor = build_processor(lecture_store, task_store)

# No-op until startup loads service-account credentials.
calendar: CalendarIntegration = CalendarIntegration()
