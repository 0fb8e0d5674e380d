# tests/helpers.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from config import TestConfig
from schemas import InsertReminder, InsertTask, Task


def new_task(description: str = "My kitchen faucet is leaking. It drips all night.", **overrides: Any) -> InsertTask:
    fields: dict[str, Any] = {
        "description": description,
        "category": "plumbing",
        "priority": "medium",
    }
    fields.update(overrides)
    return InsertTask(**fields)


def new_reminder(task_id: int, when: datetime, type: str = "email") -> InsertReminder:
    return InsertReminder(task_id=task_id, reminder_time=when, type=type)


def task_record(task_id: int, status: str, due_date: datetime | None = None) -> Task:
    return Task(
        id=task_id,
        title=f"task {task_id}",
        description="something to do",
        category="general",
        priority="low",
        status=status,
        due_date=due_date,
        created_at=datetime(2024, 1, 1, 8, 0),
    )


def make_config(tmp_path: Path, backend: str = "database") -> type:
    class _Config(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'tasks.db'}"
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        STORAGE_BACKEND = backend

    return _Config
