from datetime import datetime

import pytest
from pydantic import ValidationError

from task_tracker.models import FilterSet, Priority, SortKey, Task, TaskDraft, TaskPatch


class TestTaskDraft:
    def test_defaults(self):
        draft = TaskDraft(title="Write report")
        assert draft.completed is False
        assert draft.priority is Priority.MEDIUM

    def test_title_is_stripped(self):
        assert TaskDraft(title="  Buy milk ").title == "Buy milk"

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValidationError):
            TaskDraft(title=title)

    def test_wire_omits_server_fields_and_unset_optionals(self):
        draft = TaskDraft.model_validate({"title": "X", "priority": "low", "id": "7", "createdAt": "2025-01-01"})
        assert draft.to_wire() == {"title": "X", "completed": False, "priority": "low"}


class TestTaskPatch:
    def test_only_set_fields_are_sent(self):
        assert TaskPatch(completed=True).to_wire() == {"completed": True}

    def test_explicit_none_clears(self):
        assert TaskPatch(deadline=None, category=None).to_wire() == {"deadline": None, "category": None}

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskPatch(title=" ")


class TestTask:
    def test_accepts_wire_alias_and_numeric_id(self):
        task = Task.model_validate({"id": 12, "title": "T", "createdAt": "2025-01-01T10:00:00Z"})
        assert task.id == "12"
        assert task.created_at == datetime.fromisoformat("2025-01-01T10:00:00+00:00")

    def test_is_immutable(self):
        task = Task(id="1", title="T", created_at=datetime(2025, 1, 1))
        with pytest.raises(ValidationError):
            task.title = "changed"


class TestFilterSetAndSortKey:
    def test_coerce_mapping(self):
        filters = FilterSet.coerce({"completed": False})
        assert filters.constraints() == {"completed": False}
        assert not filters.is_empty()

    def test_empty(self):
        assert FilterSet.coerce(None).is_empty()
        assert FilterSet.coerce({}).is_empty()

    def test_sort_key_parse(self):
        assert SortKey.parse("createdAt") is SortKey.CREATED_AT
        assert SortKey.parse(SortKey.TITLE) is SortKey.TITLE
        assert SortKey.parse("size") is None
        assert SortKey.parse(None) is None
