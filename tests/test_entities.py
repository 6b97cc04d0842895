from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from todo_app.domain.entities import Task, TaskStatistics
from todo_app.domain.enums import Priority

NOON = datetime(2026, 3, 10, 12, 0, 0)


def test_new_task_defaults() -> None:
    task = Task(title="Test Task", description="Test Description")

    assert task.id is None
    assert task.priority is Priority.MEDIUM
    assert not task.completed
    assert task.completed_date is None
    assert task.created_date is not None
    assert task.created_date.microsecond == 0


def test_completion_toggles_keep_completed_date_in_sync() -> None:
    task = Task(title="Toggle")

    for completed in (True, True, False, True, False, False, True):
        task.set_completed(completed)
        assert task.completed is completed
        assert (task.completed_date is not None) is completed


def test_assigning_completed_keeps_completed_date_in_sync() -> None:
    task = Task(title="Assign")

    task.completed = True
    stamped = task.completed_date
    assert stamped is not None

    task.completed = True
    assert task.completed_date == stamped

    task.completed = False
    assert task.completed_date is None


def test_completing_again_keeps_original_completion_time() -> None:
    first = datetime(2026, 1, 1, 8, 0, 0)
    task = Task(title="Done", completed=True, completed_date=first)

    task.set_completed(True)

    assert task.completed_date == first


def test_construction_normalizes_completion() -> None:
    assert Task(title="a", completed=True).completed_date is not None
    assert Task(title="b", completed=False, completed_date=NOON).completed_date is None


def test_overdue() -> None:
    task = Task(title="Late", due_date=NOON - timedelta(minutes=1))
    assert task.is_overdue(NOON)

    task.set_completed(True)
    assert not task.is_overdue(NOON)

    assert not Task(title="Future", due_date=NOON + timedelta(days=1)).is_overdue(NOON)
    assert not Task(title="Exactly now", due_date=NOON).is_overdue(NOON)
    assert not Task(title="Undated").is_overdue(NOON)


def test_due_today_ignores_completion() -> None:
    task = Task(title="Today", due_date=NOON.replace(hour=23, minute=59))
    assert task.is_due_today(NOON)

    task.set_completed(True)
    assert task.is_due_today(NOON)

    assert not Task(title="Tomorrow", due_date=NOON + timedelta(days=1)).is_due_today(NOON)
    assert not Task(title="Undated").is_due_today(NOON)


def test_due_soon_window() -> None:
    assert Task(title="Soon", due_date=NOON + timedelta(days=2)).is_due_soon(NOON)
    assert not Task(title="Later", due_date=NOON + timedelta(days=4)).is_due_soon(NOON)
    assert not Task(title="Past", due_date=NOON - timedelta(hours=1)).is_due_soon(NOON)
    assert not Task(title="Undated").is_due_soon(NOON)


def test_equality_is_keyed_on_id() -> None:
    first = Task(title="Task 1", description="Description 1")
    second = Task(title="Task 2", description="Description 2")

    assert first == first
    assert first != second

    first.id = 1
    second.id = 1
    assert first == second
    assert hash(first) == hash(second)

    second.id = 2
    assert first != second


def test_unsaved_tasks_with_same_fields_are_not_equal() -> None:
    created = datetime(2026, 1, 1)
    first = Task(title="Same", created_date=created)
    second = Task(title="Same", created_date=created)

    assert first != second


def test_copy_is_independent() -> None:
    task = Task(title="Original", id=1, priority=Priority.HIGH, due_date=NOON)
    task.set_completed(True)

    clone = task.copy()

    assert clone == task
    assert clone is not task
    assert clone.title == task.title
    assert clone.priority is Priority.HIGH
    assert clone.due_date == NOON
    assert clone.completed_date == task.completed_date

    clone.title = "Changed"
    assert task.title == "Original"


def test_str_mentions_key_fields() -> None:
    task = Task(title="Readable", id=7, priority=Priority.HIGH)

    text = str(task)

    assert "id=7" in text
    assert "Readable" in text
    assert "High" in text


def test_priority_lookups() -> None:
    assert Priority.URGENT.level == 4
    assert Priority.LOW.display_name == "Low"
    assert Priority.HIGH.color == "#fd7e14"
    assert str(Priority.MEDIUM) == "Medium"
    assert Priority.from_level(3) is Priority.HIGH
    assert Priority.from_level(42) is Priority.MEDIUM
    assert Priority.from_display_name("urgent") is Priority.URGENT
    assert Priority.from_display_name("unknown") is Priority.MEDIUM
    assert Priority["LOW"] is Priority.LOW
    assert sorted([Priority.URGENT, Priority.LOW, Priority.HIGH]) == [
        Priority.LOW,
        Priority.HIGH,
        Priority.URGENT,
    ]


def test_statistics_percentage() -> None:
    assert TaskStatistics(3, 1, 2, 0, 0).completion_percentage == pytest.approx(33.33, abs=0.01)
    assert TaskStatistics(0, 0, 0, 0, 0).completion_percentage == 0.0
