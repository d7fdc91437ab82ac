"""Tests for tracker statistics."""

from datetime import datetime, timezone

from tracker.schemas import NoteCreate, PersonCreate, TaskCreate, TaskPatch
from tracker.services.note_svc import create_note
from tracker.services.person_svc import create_person
from tracker.services.stats_svc import compute_stats
from tracker.services.task_svc import create_task, update_task

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_empty_store(store):
    stats = compute_stats(store, now=NOW)
    assert stats.total == 0
    assert stats.overdue == 0
    assert stats.total_notes == 0
    assert stats.total_people == 0


def test_counts_by_status_and_overdue(store):
    create_task(store, TaskCreate(title="late", deadline="2026-10-18"))
    create_task(store, TaskCreate(title="late but done", status="done", deadline="2026-10-01"))
    create_task(store, TaskCreate(title="in flight", status="in-progress", deadline="2026-10-19T11:59:00Z"))
    create_task(store, TaskCreate(title="future", deadline="2026-10-30"))
    create_task(store, TaskCreate(title="undated"))
    create_note(store, NoteCreate(title="n", content="c"))
    create_person(store, PersonCreate(name="Avner"))
    create_person(store, PersonCreate(name="Dana"))

    stats = compute_stats(store, now=NOW)

    assert stats.total == 5
    assert stats.todo == 3
    assert stats.in_progress == 1
    assert stats.done == 1
    assert stats.overdue == 2
    assert stats.total_notes == 1
    assert stats.total_people == 2
    assert stats.todo + stats.in_progress + stats.done == stats.total


def test_deadline_equal_to_now_is_not_overdue(store):
    create_task(store, TaskCreate(title="t", deadline=NOW))
    assert compute_stats(store, now=NOW).overdue == 0


def test_completing_clears_overdue(store):
    task = create_task(store, TaskCreate(title="t", deadline="2026-10-01"))
    assert compute_stats(store, now=NOW).overdue == 1
    update_task(store, task.id, TaskPatch(status="done"))
    assert compute_stats(store, now=NOW).overdue == 0


def test_serializes_with_camel_case(store):
    payload = compute_stats(store, now=NOW).model_dump(by_alias=True)
    assert set(payload) == {
        "total", "todo", "inProgress", "done", "overdue", "totalNotes", "totalPeople",
    }
