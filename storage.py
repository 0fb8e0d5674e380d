import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import List, Optional

import models
from errors import ValidationError
from models import db
from schemas import InsertReminder, InsertTask, Reminder, Task, TaskPatch, TaskStatus

logger = logging.getLogger(__name__)

COMPLETED = TaskStatus.COMPLETED.value


def day_bounds(now=None):
    """[start, end) of the server-local calendar day containing ``now``."""
    start = (now or datetime.now()).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def completion_time(new_status, old_status, old_completed_at, now):
    """completedAt for a task moving from ``old_status`` to ``new_status``."""
    if new_status != COMPLETED:
        return None
    if old_status == COMPLETED and old_completed_at is not None:
        return old_completed_at
    return now


def orphan_error(task_id):
    return ValidationError.for_field(
        "taskId", f"task {task_id} does not exist", message="Invalid reminder data"
    )


class TaskStorage(ABC):
    """Repository for tasks and their reminders."""

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[Task]: ...

    @abstractmethod
    def get_all_tasks(self) -> List[Task]: ...

    @abstractmethod
    def get_todays_tasks(self, now: Optional[datetime] = None) -> List[Task]: ...

    @abstractmethod
    def search_tasks(self, query: str) -> List[Task]: ...

    @abstractmethod
    def create_task(self, data: InsertTask) -> Task: ...

    @abstractmethod
    def update_task(self, task_id: int, patch: TaskPatch) -> Optional[Task]: ...

    @abstractmethod
    def delete_task(self, task_id: int) -> bool: ...

    @abstractmethod
    def create_reminder(self, data: InsertReminder) -> Reminder: ...

    @abstractmethod
    def get_reminders_by_task(self, task_id: int) -> List[Reminder]: ...

    @abstractmethod
    def get_pending_reminders(self) -> List[Reminder]: ...

    @abstractmethod
    def mark_reminder_sent(self, reminder_id: int) -> Optional[Reminder]: ...


class MemStorage(TaskStorage):
    """Process-local storage; everything is lost at shutdown."""

    def __init__(self):
        self._lock = threading.Lock()
        self._tasks = {}
        self._reminders = {}
        self._next_task_id = 1
        self._next_reminder_id = 1

    def get_task(self, task_id):
        with self._lock:
            return self._tasks.get(task_id)

    def get_all_tasks(self):
        with self._lock:
            return [self._tasks[k] for k in sorted(self._tasks)]

    def get_todays_tasks(self, now=None):
        start, end = day_bounds(now)
        tasks = [t for t in self.get_all_tasks()
                 if t.due_date is not None and start <= t.due_date < end]
        return sorted(tasks, key=lambda t: (t.due_date, t.id))

    def search_tasks(self, query):
        needle = query.lower()
        return [t for t in self.get_all_tasks()
                if needle in t.title.lower() or needle in t.description.lower()]

    def create_task(self, data):
        now = datetime.now()
        with self._lock:
            task = Task(
                id=self._next_task_id,
                created_at=now,
                completed_at=now if data.status == COMPLETED else None,
                **data.model_dump(),
            )
            self._tasks[task.id] = task
            self._next_task_id += 1
        logger.info(f"Created task {task.id} ({task.category})")
        return task

    def update_task(self, task_id, patch):
        changes = patch.changes()
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            if "status" in changes:
                changes["completed_at"] = completion_time(
                    changes["status"], task.status, task.completed_at, datetime.now()
                )
            task = task.model_copy(update=changes)
            self._tasks[task_id] = task
        logger.info(f"Updated task {task_id}: {sorted(changes)}")
        return task

    def delete_task(self, task_id):
        with self._lock:
            if self._tasks.pop(task_id, None) is None:
                return False
            for reminder_id in [r.id for r in self._reminders.values() if r.task_id == task_id]:
                del self._reminders[reminder_id]
        logger.info(f"Deleted task {task_id}")
        return True

    def create_reminder(self, data):
        with self._lock:
            if data.task_id not in self._tasks:
                raise orphan_error(data.task_id)
            reminder = Reminder(id=self._next_reminder_id, **data.model_dump())
            self._reminders[reminder.id] = reminder
            self._next_reminder_id += 1
        logger.info(f"Created {reminder.type} reminder {reminder.id} for task {reminder.task_id}")
        return reminder

    def get_reminders_by_task(self, task_id):
        with self._lock:
            reminders = [r for r in self._reminders.values() if r.task_id == task_id]
        return sorted(reminders, key=lambda r: (r.reminder_time, r.id))

    def get_pending_reminders(self):
        with self._lock:
            reminders = [r for r in self._reminders.values() if not r.sent]
        return sorted(reminders, key=lambda r: (r.reminder_time, r.id))

    def mark_reminder_sent(self, reminder_id):
        with self._lock:
            reminder = self._reminders.get(reminder_id)
            if reminder is None:
                return None
            reminder = reminder.model_copy(update={"sent": True})
            self._reminders[reminder_id] = reminder
        return reminder


class DatabaseStorage(TaskStorage):
    """Flask-SQLAlchemy backed storage. Must be used inside an app context."""

    def get_task(self, task_id):
        row = db.session.get(models.Task, task_id)
        return Task.model_validate(row) if row else None

    def _tasks(self, stmt):
        return [Task.model_validate(row) for row in db.session.execute(stmt).scalars()]

    def _reminders(self, stmt):
        return [Reminder.model_validate(row) for row in db.session.execute(stmt).scalars()]

    def get_all_tasks(self):
        return self._tasks(db.select(models.Task).order_by(models.Task.id))

    def get_todays_tasks(self, now=None):
        start, end = day_bounds(now)
        return self._tasks(
            db.select(models.Task)
            .where(models.Task.due_date >= start, models.Task.due_date < end)
            .order_by(models.Task.due_date, models.Task.id)
        )

    def search_tasks(self, query):
        needle = query.lower()
        return self._tasks(
            db.select(models.Task)
            .where(db.or_(
                db.func.lower(models.Task.title, type_=db.Text).contains(needle, autoescape=True),
                db.func.lower(models.Task.description, type_=db.Text).contains(needle, autoescape=True),
            ))
            .order_by(models.Task.id)
        )

    def create_task(self, data):
        now = datetime.now()
        row = models.Task(
            created_at=now,
            completed_at=now if data.status == COMPLETED else None,
            **data.model_dump(),
        )
        db.session.add(row)
        db.session.commit()
        logger.info(f"Created task {row.id} ({row.category})")
        return Task.model_validate(row)

    def update_task(self, task_id, patch):
        row = db.session.get(models.Task, task_id)
        if row is None:
            return None
        changes = patch.changes()
        if "status" in changes:
            changes["completed_at"] = completion_time(
                changes["status"], row.status, row.completed_at, datetime.now()
            )
        for field, value in changes.items():
            setattr(row, field, value)
        db.session.commit()
        logger.info(f"Updated task {task_id}: {sorted(changes)}")
        return Task.model_validate(row)

    def delete_task(self, task_id):
        row = db.session.get(models.Task, task_id)
        if row is None:
            return False
        db.session.delete(row)
        db.session.commit()
        logger.info(f"Deleted task {task_id}")
        return True

    def create_reminder(self, data):
        if db.session.get(models.Task, data.task_id) is None:
            raise orphan_error(data.task_id)
        row = models.Reminder(**data.model_dump())
        db.session.add(row)
        db.session.commit()
        logger.info(f"Created {row.type} reminder {row.id} for task {row.task_id}")
        return Reminder.model_validate(row)

    def get_reminders_by_task(self, task_id):
        return self._reminders(
            db.select(models.Reminder)
            .where(models.Reminder.task_id == task_id)
            .order_by(models.Reminder.reminder_time, models.Reminder.id)
        )

    def get_pending_reminders(self):
        return self._reminders(
            db.select(models.Reminder)
            .where(models.Reminder.sent.is_(False))
            .order_by(models.Reminder.reminder_time, models.Reminder.id)
        )

    def mark_reminder_sent(self, reminder_id):
        row = db.session.get(models.Reminder, reminder_id)
        if row is None:
            return None
        row.sent = True
        db.session.commit()
        return Reminder.model_validate(row)


def create_storage(backend):
    if backend == "memory":
        return MemStorage()
    if backend == "database":
        return DatabaseStorage()
    raise ValueError(f"Unknown storage backend: {backend}")
