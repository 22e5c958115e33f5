import json

from extraction.rule_table import DEFAULT_RULE_TABLE, RuleTable, RuleTableStore


def test_missing_file_returns_default(tmp_path):
    store = RuleTableStore(path=str(tmp_path / "missing.json"))
    assert store.load() == DEFAULT_RULE_TABLE


def test_corrupted_file_returns_default(tmp_path):
    p = tmp_path / "rules.json"
    p.write_text("{not valid json")
    assert RuleTableStore(path=str(p)).load() == DEFAULT_RULE_TABLE


def test_invalid_semester_end_returns_default(tmp_path):
    p = tmp_path / "rules.json"
    p.write_text(json.dumps({"task_types": {"lab": ["lab"]}, "semester_end": "13-40"}))
    assert RuleTableStore(path=str(p)).load() == DEFAULT_RULE_TABLE


def test_roundtrip_keeps_category_order(tmp_path):
    store = RuleTableStore(path=str(tmp_path / "nested" / "rules.json"))
    table = RuleTable(
        task_types={"Lab": ["lab"], "quiz": ["quiz"]},
        due_cues=["due"],
        semester_end="6-1",
    )
    store.save(table)

    loaded = store.load()
    assert list(loaded.task_types) == ["lab", "quiz"]
    assert loaded.semester_end == "06-01"
    assert loaded.due_cues == ["due"]


def test_default_table_category_order():
    assert list(DEFAULT_RULE_TABLE.task_types) == [
        "assignment", "quiz", "reading", "presentation", "lab",
    ]
