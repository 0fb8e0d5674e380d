# tests/test_storage.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from errors import ValidationError
from schemas import TaskPatch
from storage import TaskStorage, completion_time, day_bounds

from .helpers import new_reminder, new_task


def test_create_assigns_unique_ids_and_ordered_created_at(storage: TaskStorage) -> None:
    created = [storage.create_task(new_task(f"Job number {i}")) for i in range(5)]

    assert len({t.id for t in created}) == 5
    stamps = [t.created_at for t in created]
    assert stamps == sorted(stamps)
    assert all(t.status == "pending" and t.completed_at is None for t in created)


def test_get_round_trip_and_list(storage: TaskStorage) -> None:
    task = storage.create_task(new_task(due_date=datetime(2024, 5, 10, 12, 0)))

    assert storage.get_task(task.id) == task
    assert storage.get_all_tasks() == [task]
    assert task.title == "My kitchen faucet is leaking"


def test_delete_then_get_is_not_found(storage: TaskStorage) -> None:
    task = storage.create_task(new_task())

    assert storage.delete_task(task.id) is True
    assert storage.get_task(task.id) is None
    assert storage.delete_task(task.id) is False


def test_search_matches_title_and_description(storage: TaskStorage) -> None:
    faucet = storage.create_task(new_task("My kitchen faucet is leaking", title="Kitchen"))
    storage.create_task(new_task("Old boards are peeling", title="Paint the fence", category="painting"))

    assert storage.search_tasks("faucet") == [faucet]
    assert storage.search_tasks("FAUCET") == [faucet]
    assert [t.title for t in storage.search_tasks("fence")] == ["Paint the fence"]
    assert storage.search_tasks("chimney") == []

    oil = storage.create_task(new_task("Ölfleck in der Garage entfernen", category="cleaning"))
    assert storage.search_tasks("ölfleck") == [oil]
    assert storage.search_tasks("GARAGE") == [oil]


def test_search_treats_wildcards_literally(storage: TaskStorage) -> None:
    storage.create_task(new_task("Sand the deck 100% smooth"))
    storage.create_task(new_task("Sand the deck 1000 times"))

    assert [t.description for t in storage.search_tasks("100%")] == ["Sand the deck 100% smooth"]
    assert storage.search_tasks("deck_") == []


def test_todays_tasks_uses_local_calendar_day(storage: TaskStorage) -> None:
    now = datetime(2024, 5, 10, 9, 30)
    noon = storage.create_task(new_task("Noon job", due_date=datetime(2024, 5, 10, 12, 0)))
    midnight = storage.create_task(new_task("Midnight job", due_date=datetime(2024, 5, 10, 0, 0)))
    storage.create_task(new_task("Tomorrow job", due_date=datetime(2024, 5, 11, 0, 0)))
    storage.create_task(new_task("Yesterday job", due_date=datetime(2024, 5, 9, 23, 59)))
    storage.create_task(new_task("Someday job"))

    assert storage.get_todays_tasks(now=now) == [midnight, noon]


def test_update_merges_only_given_fields(storage: TaskStorage) -> None:
    task = storage.create_task(new_task())

    updated = storage.update_task(task.id, TaskPatch(ai_response="Turn off the water"))

    assert updated is not None
    assert updated.ai_response == "Turn off the water"
    assert updated.description == task.description
    assert updated.created_at == task.created_at
    assert storage.get_task(task.id) == updated


def test_update_unknown_task_returns_none(storage: TaskStorage) -> None:
    assert storage.update_task(999, TaskPatch(status="completed")) is None


def test_completed_at_follows_status(storage: TaskStorage) -> None:
    task = storage.create_task(new_task())

    done = storage.update_task(task.id, TaskPatch(status="completed"))
    assert done is not None and done.completed_at is not None

    again = storage.update_task(task.id, TaskPatch(status="completed"))
    assert again is not None and again.completed_at == done.completed_at

    reopened = storage.update_task(task.id, TaskPatch(status="in_progress"))
    assert reopened is not None and reopened.completed_at is None


def test_create_completed_task_sets_completed_at(storage: TaskStorage) -> None:
    task = storage.create_task(new_task(status="completed"))

    assert task.completed_at is not None


def test_reminder_for_missing_task_is_rejected(storage: TaskStorage) -> None:
    with pytest.raises(ValidationError) as exc:
        storage.create_reminder(new_reminder(42, datetime(2024, 5, 10, 8, 0)))

    assert exc.value.errors[0]["loc"] == ["taskId"]


def test_reminders_by_task_pending_and_sent(storage: TaskStorage) -> None:
    a = storage.create_task(new_task("Task A"))
    b = storage.create_task(new_task("Task B"))
    late = storage.create_reminder(new_reminder(a.id, datetime(2024, 5, 10, 18, 0)))
    early = storage.create_reminder(new_reminder(a.id, datetime(2024, 5, 10, 8, 0), type="notification"))
    other = storage.create_reminder(new_reminder(b.id, datetime(2024, 5, 9, 8, 0)))

    assert storage.get_reminders_by_task(a.id) == [early, late]
    assert storage.get_pending_reminders() == [other, early, late]
    assert early.sent is False

    sent = storage.mark_reminder_sent(early.id)
    assert sent is not None and sent.sent is True
    assert storage.get_pending_reminders() == [other, late]
    assert storage.mark_reminder_sent(999) is None


def test_delete_task_cascades_to_reminders(storage: TaskStorage) -> None:
    task = storage.create_task(new_task())
    storage.create_reminder(new_reminder(task.id, datetime(2024, 5, 10, 8, 0)))

    storage.delete_task(task.id)

    assert storage.get_reminders_by_task(task.id) == []
    assert storage.get_pending_reminders() == []


def test_day_bounds() -> None:
    start, end = day_bounds(datetime(2024, 2, 29, 23, 59, 59))

    assert start == datetime(2024, 2, 29)
    assert end - start == timedelta(days=1)


def test_completion_time_rules() -> None:
    now = datetime(2024, 5, 10, 9, 0)
    earlier = datetime(2024, 5, 1, 9, 0)

    assert completion_time("completed", "pending", None, now) == now
    assert completion_time("completed", "completed", earlier, now) == earlier
    assert completion_time("cancelled", "completed", earlier, now) is None
