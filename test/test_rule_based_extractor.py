from datetime import date

from extraction.rule_based import RuleBasedExtractor
from lecture_ai.models import Priority

TODAY = date(2024, 3, 1)

TRANSCRIPT = """Good morning everyone.
Homework 3 is due next Monday.
It covers recursion and is important.
Read chapter 5 of the textbook."""


def test_extracts_one_draft_per_keyword_line():
    drafts = RuleBasedExtractor().extract(TRANSCRIPT, today=TODAY)
    assert [d.type for d in drafts] == ["assignment", "reading"]

    homework, reading = drafts
    assert homework.title == "Homework 3 is due next Monday"
    assert homework.description == "It covers recursion and is important."
    assert homework.priority == Priority.HIGH
    assert homework.due_date == date(2024, 3, 4)

    assert reading.title == "Read chapter 5 of the textbook"
    assert reading.description == ""
    assert reading.priority == Priority.MEDIUM
    assert reading.due_date is None


def test_deterministic():
    extractor = RuleBasedExtractor()
    assert extractor.extract(TRANSCRIPT, today=TODAY) == extractor.extract(TRANSCRIPT, today=TODAY)


def test_explicit_due_date_on_quiz_line():
    drafts = RuleBasedExtractor().extract("Midterm exam: submit by March 15th", today=TODAY)
    assert len(drafts) == 1
    assert drafts[0].type == "quiz"
    assert drafts[0].due_date == date(2024, 3, 15)


def test_due_cue_without_date():
    drafts = RuleBasedExtractor().extract("The essay is due soon", today=TODAY)
    assert drafts[0].due_date is None


def test_no_deduplication():
    drafts = RuleBasedExtractor().extract("Lab report\nLab report", today=TODAY)
    assert len(drafts) == 2
    assert drafts[0].description == "Lab report"
    assert drafts[1].description == ""


def test_title_trims_edge_punctuation():
    drafts = RuleBasedExtractor().extract("  -- Quiz on Friday!! --", today=TODAY)
    assert drafts[0].title == "Quiz on Friday"


def test_empty_and_keywordless_transcripts():
    extractor = RuleBasedExtractor()
    assert extractor.extract("", today=TODAY) == []
    assert extractor.extract("Hello\nSee you soon", today=TODAY) == []
