from __future__ import annotations

import pytest

from activity_engine.clock import FixedClock
from activity_engine.data_models import ActivityRecord, is_blank, require_name
from activity_engine.errors import ValidationError


def test_new_record_is_unsaved_and_stamped_by_clock() -> None:
    record = ActivityRecord.new("Buy milk", FixedClock(1_700_000_000_000))

    assert record.record_id == ""
    assert record.name == "Buy milk"
    assert record.created_at == 1_700_000_000_000
    assert record.completed is False


@pytest.mark.parametrize("name", ["", " ", "\t\n"])
def test_new_record_rejects_blank_names(name: str) -> None:
    with pytest.raises(ValidationError):
        ActivityRecord.new(name, FixedClock(0))


def test_require_name_returns_name_unchanged() -> None:
    assert require_name("  padded  ") == "  padded  "


def test_is_blank() -> None:
    assert is_blank(None)
    assert is_blank("   ")
    assert not is_blank("x")


def test_document_body_excludes_identifier() -> None:
    record = ActivityRecord(record_id="abc", name="Read", created_at=5, completed=True)

    assert record.to_document() == {"name": "Read", "date": 5, "completed": True}


def test_from_document_applies_defaults_for_missing_fields() -> None:
    record = ActivityRecord.from_document("doc-1", {"name": "Walk"})

    assert record == ActivityRecord(record_id="doc-1", name="Walk", created_at=0, completed=False)


def test_from_document_accepts_none_body() -> None:
    assert ActivityRecord.from_document("doc-2", None) == ActivityRecord(record_id="doc-2")


@pytest.mark.parametrize(
    "doc",
    [
        {"name": 42},
        {"name": "x", "date": "yesterday"},
        {"name": "x", "date": True},
        {"name": "x", "completed": "yes"},
    ],
)
def test_from_document_rejects_wrong_field_types(doc: dict[str, object]) -> None:
    with pytest.raises(ValueError):
        ActivityRecord.from_document("doc-3", doc)

