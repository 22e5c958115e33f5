from datetime import date

import pytest

from extraction.ai_extractor import AIExtractor
from lecture_ai.errors import ParseError
from lecture_ai.models import Priority
from llm.llm_client import LLMClient


def _extractor(provider):
    return AIExtractor(llm_client=LLMClient(provider=provider))


def test_normalises_missing_fields(fake_provider_factory):
    provider = fake_provider_factory(
        '{"tasks":[{"title":"","type":"","dueDate":"null","priority":"urgent"}]}'
    )
    drafts = _extractor(provider).extract("transcript", today=date(2024, 3, 1))

    assert len(drafts) == 1
    draft = drafts[0]
    assert draft.title == "Untitled Task"
    assert draft.type == "assignment"
    assert draft.due_date is None
    assert draft.priority == Priority.MEDIUM
    assert draft.description == ""


def test_parses_due_date_and_priority(fake_provider_factory):
    provider = fake_provider_factory(
        '{"tasks":[{"title":"Quiz 2","type":"Quiz","dueDate":"2024-03-15T00:00:00Z","priority":"HIGH"}]}'
    )
    draft = _extractor(provider).extract("transcript")[0]
    assert draft.type == "quiz"
    assert draft.due_date == date(2024, 3, 15)
    assert draft.priority == Priority.HIGH


def test_numeric_priorities_and_scalar_titles(fake_provider_factory):
    provider = fake_provider_factory(
        '{"tasks":[{"title":"Essay","type":"assignment","priority":3},'
        '{"title":2024,"type":"reading","priority":1},'
        '{"title":"Lab","type":"lab","priority":7}]}'
    )
    drafts = _extractor(provider).extract("transcript")

    assert [d.priority for d in drafts] == [Priority.HIGH, Priority.LOW, Priority.MEDIUM]
    assert drafts[1].title == "2024"


def test_unparseable_due_date_dropped(fake_provider_factory):
    provider = fake_provider_factory('{"tasks":[{"title":"Essay","dueDate":"next Friday"}]}')
    assert _extractor(provider).extract("transcript")[0].due_date is None


def test_malformed_reply_raises(fake_provider_factory):
    with pytest.raises(ParseError):
        _extractor(fake_provider_factory("I could not find any tasks.")).extract("transcript")
