"""
Tests for the task schema: enums, wire (de)serialization, validation.
"""
import pytest

from taskboard.errors import ValidationError
from taskboard.schema import (
    Column,
    Priority,
    Task,
    TaskStatus,
    validate_draft,
    validate_fields,
)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Enums
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_priority_from_str_is_case_insensitive():
    assert Priority.from_str("high") == Priority.HIGH
    assert Priority.from_str("Low") == Priority.LOW
    assert Priority.from_str("whatever") == Priority.MEDIUM


def test_status_toggle():
    assert TaskStatus.INCOMPLETE.toggled() == TaskStatus.COMPLETE
    assert TaskStatus.COMPLETE.toggled() == TaskStatus.INCOMPLETE


def test_column_from_str_accepts_display_and_member_names():
    assert Column.from_str("In Progress") == Column.IN_PROGRESS
    assert Column.from_str("in_progress") == Column.IN_PROGRESS
    assert Column.from_str("To Do") == Column.TODO
    assert Column.from_str(Column.COMPLETED) == Column.COMPLETED
    assert Column.from_str("T1") is None
    assert Column.from_str(None) is None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Wire format
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_task_from_dict_defaults():
    task = Task.from_dict({"id": "T1", "title": "Write report"})
    assert task.priority == Priority.MEDIUM
    assert task.progress == 0
    assert task.status == TaskStatus.INCOMPLETE
    assert task.deadline is None
    assert task.description == ""


def test_task_from_dict_accepts_mongo_style_record():
    task = Task.from_dict({
        "_id": "665f1c",
        "title": "Ship it",
        "priority": "high",
        "dueDate": "2024-06-10T00:00:00.000Z",
        "progress": 42.0,
        "assignedTo": "alice@example.com",
    })
    assert task.id == "665f1c"
    assert task.priority == Priority.HIGH
    assert task.deadline == "2024-06-10"
    assert task.progress == 42
    assert task.assigned_to == "alice@example.com"


def test_task_from_dict_clamps_progress_and_drops_bad_deadline():
    task = Task.from_dict({"id": "T1", "title": "x", "progress": 140, "deadline": "soon"})
    assert task.progress == 100
    assert task.deadline is None


def test_task_from_dict_requires_id():
    with pytest.raises(ValueError):
        Task.from_dict({"title": "no id"})


def test_task_to_dict_uses_camel_case():
    task = Task(id="T1", title="x", assigned_to="alice", deadline="2024-06-10")
    data = task.to_dict()
    assert data["assignedTo"] == "alice"
    assert data["priority"] == "Medium"
    assert data["status"] == "incomplete"
    assert data["deadline"] == "2024-06-10"
    assert Task.from_dict(data) == task


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Validation
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestValidateFields:

    def test_normalizes_values(self):
        clean = validate_fields({
            "title": "  Trim me  ",
            "priority": "low",
            "progress": "55",
            "status": "COMPLETE",
            "deadline": "2024-06-11",
        })
        assert clean == {
            "title": "Trim me",
            "priority": "Low",
            "progress": 55,
            "status": "complete",
            "deadline": "2024-06-11",
        }

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError, match="title"):
            validate_fields({"title": "   "})

    @pytest.mark.parametrize("progress", [-1, 101, "abc", 12.5, True])
    def test_bad_progress_rejected(self, progress):
        with pytest.raises(ValidationError):
            validate_fields({"progress": progress})

    def test_progress_bounds_accepted(self):
        assert validate_fields({"progress": 0}) == {"progress": 0}
        assert validate_fields({"progress": 100}) == {"progress": 100}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError, match="unknown"):
            validate_fields({"column": "Completed"})

    def test_bad_priority_rejected(self):
        with pytest.raises(ValidationError, match="priority"):
            validate_fields({"priority": "urgent"})

    def test_bad_deadline_rejected(self):
        with pytest.raises(ValidationError, match="deadline"):
            validate_fields({"deadline": "next week"})

    def test_empty_deadline_clears(self):
        assert validate_fields({"deadline": ""}) == {"deadline": None}


class TestValidateDraft:

    def test_fills_defaults(self):
        payload = validate_draft({"title": "New", "description": "Details"})
        assert payload == {
            "title": "New",
            "description": "Details",
            "priority": "Medium",
            "deadline": None,
            "progress": 0,
            "status": "incomplete",
        }

    def test_requires_description_by_default(self):
        with pytest.raises(ValidationError, match="description"):
            validate_draft({"title": "New", "description": "  "})

    def test_description_optional_for_store(self):
        payload = validate_draft({"title": "New"}, require_description=False)
        assert payload["description"] == ""

    def test_missing_title(self):
        with pytest.raises(ValidationError, match="title"):
            validate_draft({"description": "Details"})

    def test_ignores_non_editable_keys(self):
        payload = validate_draft({"title": "New", "description": "d", "assignedTo": "mallory"})
        assert "assignedTo" not in payload
