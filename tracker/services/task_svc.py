"""Task service - CRUD, filtering, ranking, search and reminders."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any

from ..errors import MissingFieldError
from ..models import Task
from ..schemas import (
    PRIORITY_RANK,
    UNASSIGNED,
    TaskCreate,
    TaskFilters,
    TaskPatch,
    TaskRead,
)
from ..storage.base import EntityStore
from .tags import encode_tags

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

# Columns that may not be nulled by a patch.
_NOT_NULL = ("status", "priority")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _newest_first(tasks: list[TaskRead]) -> list[TaskRead]:
    return sorted(tasks, key=lambda t: (t.created_at, t.id), reverse=True)


def rank_by_priority(tasks: list[TaskRead]) -> list[TaskRead]:
    """Order by priority (urgent first), then earliest deadline, then newest.

    Tasks with a deadline sort ahead of tasks without one at the same
    priority. Unknown priorities rank below ``low``.
    """
    def key(t: TaskRead):
        return (
            -PRIORITY_RANK.get(t.priority, 0),
            t.deadline is None,
            t.deadline or _EPOCH,
            -t.created_at.timestamp(),
            -t.id,
        )

    return sorted(tasks, key=key)


def _store_filters(filters: TaskFilters) -> dict[str, Any]:
    where: dict[str, Any] = {}
    if filters.status:
        where["status"] = filters.status
    if filters.priority:
        where["priority"] = filters.priority
    if filters.assigned_to == UNASSIGNED:
        where["assigned_to"] = None
    elif filters.assigned_to is not None:
        where["assigned_to"] = filters.assigned_to
    return where


def list_tasks(
    store: EntityStore,
    filters: TaskFilters | None = None,
    *,
    order: str = "created",
) -> list[TaskRead]:
    """List tasks matching every supplied filter, newest first by default."""
    filters = filters or TaskFilters()
    records = store.list(Task, _store_filters(filters))
    tasks = [TaskRead.from_record(r) for r in records]
    if filters.tag:
        tasks = [t for t in tasks if filters.tag in t.tags]

    if (filters.order or order) == "priority":
        return rank_by_priority(tasks)
    return _newest_first(tasks)


def get_task(store: EntityStore, task_id: int) -> TaskRead | None:
    record = store.get(Task, task_id)
    return TaskRead.from_record(record) if record else None


def create_task(store: EntityStore, data: TaskCreate) -> TaskRead:
    if not (data.title or "").strip():
        raise MissingFieldError("title", "Task")

    now = _utcnow()
    status = data.status or "todo"
    task = Task(
        title=data.title,
        description=data.description or "",
        status=status,
        priority=data.priority or "medium",
        assigned_to=data.assigned_to,
        deadline=data.deadline,
        scheduled_date=data.scheduled_date,
        scheduled_time=data.scheduled_time,
        estimated_duration=data.estimated_duration,
        tags=encode_tags(data.tags),
        created_at=now,
        updated_at=now,
        completed_at=now if status == "done" else None,
        source=data.source or "web",
    )
    task = store.insert(task)
    logger.debug("Created task %s", task.id)
    return TaskRead.from_record(task)


def update_task(store: EntityStore, task_id: int, patch: TaskPatch) -> TaskRead | None:
    """Merge the fields set on ``patch`` into the task.

    Moving into ``done`` stamps ``completed_at`` once; it is left alone on
    later transitions, including moves back out of ``done``.
    """
    values = patch.model_dump(exclude_unset=True)
    if "title" in values and not (values["title"] or "").strip():
        raise MissingFieldError("title", "Task")
    for key in _NOT_NULL:
        if key in values and values[key] is None:
            del values[key]
    if "description" in values and values["description"] is None:
        values["description"] = ""
    if "tags" in values:
        values["tags"] = encode_tags(values["tags"])

    existing = store.get(Task, task_id)
    if not existing:
        return None

    now = _utcnow()
    if values.get("status") == "done" and existing.completed_at is None:
        values["completed_at"] = now
    values["updated_at"] = now

    task = store.update(Task, task_id, values)
    return TaskRead.from_record(task) if task else None


def delete_task(store: EntityStore, task_id: int) -> bool:
    return store.delete(Task, task_id)


def search_tasks(store: EntityStore, query: str) -> list[TaskRead]:
    """Case-insensitive substring search over title and description."""
    q = (query or "").lower()
    tasks = list_tasks(store)
    if not q:
        return tasks
    return [
        t for t in tasks
        if q in (t.title or "").lower()
        or q in (t.description or "").lower()
    ]


def tasks_needing_reminder(store: EntityStore, today: date | None = None) -> list[TaskRead]:
    """Open tasks due today or tomorrow, or scheduled for today."""
    today = today or _utcnow().date()
    tomorrow = today + timedelta(days=1)

    due: list[TaskRead] = []
    for t in list_tasks(store):
        if t.status == "done":
            continue
        if t.deadline and today <= t.deadline.date() <= tomorrow:
            due.append(t)
        elif t.scheduled_date == today:
            due.append(t)
    return due
