from classification.task_classifier import TaskClassifier
from extraction.rule_table import RuleTable
from lecture_ai.models import Priority


def test_quiz_beats_reading():
    classifier = TaskClassifier()
    assert classifier.classify_type("Read chapter 4 before the quiz") == "quiz"


def test_assignment_beats_quiz():
    assert TaskClassifier().classify_type("Homework covers the midterm topics") == "assignment"


def test_each_category():
    classifier = TaskClassifier()
    assert classifier.classify_type("Chapter 6 of the textbook") == "reading"
    assert classifier.classify_type("Group slides on Thursday") == "presentation"
    assert classifier.classify_type("LAB session in room 4") == "lab"


def test_no_keyword():
    assert TaskClassifier().classify_type("Good morning everyone") is None


def test_priority():
    classifier = TaskClassifier()
    assert classifier.classify_priority("This one is IMPORTANT") == Priority.HIGH
    assert classifier.classify_priority("Optional, extra credit") == Priority.LOW
    assert classifier.classify_priority("important, even if optional") == Priority.HIGH
    assert classifier.classify_priority("see you on Monday") == Priority.MEDIUM


def test_custom_rule_order():
    rules = RuleTable(task_types={"lab": ["lab"], "reading": ["read"]})
    assert TaskClassifier(rules).classify_type("read the lab manual") == "lab"
