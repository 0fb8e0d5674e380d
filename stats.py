import math
from datetime import datetime

from schemas import Stats, TaskStatus


def progress_percent(completed, pending):
    total = completed + pending
    if total == 0:
        return 0
    # round half up, not half to even
    return math.floor(100 * completed / total + 0.5)


def compute_stats(tasks, now=None):
    """Counts over the full task list.

    Only completed and pending tasks make up the progress denominator;
    in_progress and cancelled tasks are left out of it.
    """
    now = now or datetime.now()
    completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED.value)
    pending = sum(1 for t in tasks if t.status == TaskStatus.PENDING.value)
    overdue = sum(
        1 for t in tasks
        if t.due_date is not None and t.due_date < now and t.status != TaskStatus.COMPLETED.value
    )
    return Stats(
        completed=completed,
        pending=pending,
        overdue=overdue,
        progress_percent=progress_percent(completed, pending),
    )
