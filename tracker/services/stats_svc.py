"""Tracker statistics."""

from __future__ import annotations

from datetime import datetime, timezone

from ..models import Note, Person, Task
from ..schemas import TaskRead, TaskStats, as_utc
from ..storage.base import EntityStore


def compute_stats(store: EntityStore, now: datetime | None = None) -> TaskStats:
    """Count tasks by status, overdue open tasks, notes and people.

    Rescans every collection on each call.
    """
    now = as_utc(now) or datetime.now(timezone.utc)
    tasks = [TaskRead.from_record(r) for r in store.list(Task)]

    overdue = [
        t for t in tasks
        if t.deadline is not None and t.status != "done" and t.deadline < now
    ]

    return TaskStats(
        total=len(tasks),
        todo=sum(1 for t in tasks if t.status == "todo"),
        in_progress=sum(1 for t in tasks if t.status == "in-progress"),
        done=sum(1 for t in tasks if t.status == "done"),
        overdue=len(overdue),
        total_notes=len(store.list(Note)),
        total_people=len(store.list(Person)),
    )
