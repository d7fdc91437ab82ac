"""Tests for task service logic against both storage backends."""

from datetime import date, datetime, timezone

import pytest

from tracker.errors import MissingFieldError
from tracker.schemas import TaskCreate, TaskFilters, TaskPatch
from tracker.services.task_svc import (
    create_task,
    delete_task,
    get_task,
    list_tasks,
    rank_by_priority,
    search_tasks,
    tasks_needing_reminder,
    update_task,
)


def test_create_task_defaults(store, clock):
    task = create_task(store, TaskCreate(title="Buy milk", priority="high"))

    assert task.id is not None
    assert task.title == "Buy milk"
    assert task.status == "todo"
    assert task.priority == "high"
    assert task.tags == []
    assert task.completed_at is None
    assert task.source == "web"
    assert task.description == ""
    assert task.created_at == task.updated_at


def test_create_task_requires_title(store):
    with pytest.raises(MissingFieldError):
        create_task(store, TaskCreate(title="   "))
    assert list_tasks(store) == []


def test_ids_are_assigned_in_order(store):
    first = create_task(store, TaskCreate(title="one"))
    second = create_task(store, TaskCreate(title="two"))
    assert second.id > first.id


def test_tags_round_trip_through_store(store):
    tags = ["home", "שופינג", "z", "a", "home"]
    task = create_task(store, TaskCreate(title="t", tags=tags))
    assert task.tags == tags
    assert get_task(store, task.id).tags == tags


def test_buy_milk_lifecycle(store, clock):
    task = create_task(store, TaskCreate(title="Buy milk", priority="high"))

    done = update_task(store, task.id, TaskPatch(status="done"))
    assert done.completed_at is not None
    assert done.completed_at >= done.created_at
    assert done.updated_at > task.updated_at
    assert done.title == "Buy milk"
    assert done.priority == "high"

    assert delete_task(store, task.id) is True
    assert get_task(store, task.id) is None


def test_done_twice_keeps_first_completion(store, clock):
    task = create_task(store, TaskCreate(title="t"))
    first = update_task(store, task.id, TaskPatch(status="done"))
    second = update_task(store, task.id, TaskPatch(status="done"))

    assert second.completed_at == first.completed_at
    assert second.updated_at > first.updated_at


def test_leaving_done_keeps_completed_at(store, clock):
    task = create_task(store, TaskCreate(title="t"))
    done = update_task(store, task.id, TaskPatch(status="done"))
    reopened = update_task(store, task.id, TaskPatch(status="in-progress"))

    assert reopened.status == "in-progress"
    assert reopened.completed_at == done.completed_at


def test_create_as_done_stamps_completion(store, clock):
    task = create_task(store, TaskCreate(title="already done", status="done"))
    assert task.completed_at == task.created_at


def test_update_merges_only_supplied_fields(store, clock):
    task = create_task(store, TaskCreate(
        title="Write report",
        description="quarterly",
        priority="low",
        tags=["work"],
        assigned_to=3,
    ))

    updated = update_task(store, task.id, TaskPatch(priority="urgent"))
    assert updated.priority == "urgent"
    assert updated.title == "Write report"
    assert updated.description == "quarterly"
    assert updated.tags == ["work"]
    assert updated.assigned_to == 3


def test_update_can_clear_assignee_and_replace_tags(store):
    task = create_task(store, TaskCreate(title="t", assigned_to=2, tags=["a"]))
    updated = update_task(store, task.id, TaskPatch(assigned_to=None, tags=["b", "c"]))

    assert updated.assigned_to is None
    assert updated.tags == ["b", "c"]


def test_update_rejects_blank_title(store):
    task = create_task(store, TaskCreate(title="t"))
    with pytest.raises(MissingFieldError):
        update_task(store, task.id, TaskPatch(title=""))
    assert get_task(store, task.id).title == "t"


def test_update_missing_task_returns_none(store):
    assert update_task(store, 999, TaskPatch(status="done")) is None


def test_delete_missing_task_is_noop(store):
    create_task(store, TaskCreate(title="keep"))
    assert delete_task(store, 999) is False
    assert len(list_tasks(store)) == 1


def test_delete_removes_exactly_one(store):
    a = create_task(store, TaskCreate(title="a"))
    create_task(store, TaskCreate(title="b"))
    assert delete_task(store, a.id) is True
    remaining = list_tasks(store)
    assert [t.title for t in remaining] == ["b"]


def test_list_newest_first(store, clock):
    for title in ("first", "second", "third"):
        create_task(store, TaskCreate(title=title))
    assert [t.title for t in list_tasks(store)] == ["third", "second", "first"]


def test_list_filters(store, clock):
    create_task(store, TaskCreate(title="a", status="todo", priority="high", assigned_to=1))
    create_task(store, TaskCreate(title="b", status="done", priority="high"))
    create_task(store, TaskCreate(title="c", status="todo", priority="low", assigned_to=2, tags=["x"]))

    assert {t.title for t in list_tasks(store, TaskFilters(status="todo"))} == {"a", "c"}
    assert {t.title for t in list_tasks(store, TaskFilters(priority="high"))} == {"a", "b"}
    assert [t.title for t in list_tasks(store, TaskFilters(assigned_to=2))] == ["c"]
    assert [t.title for t in list_tasks(store, TaskFilters(assigned_to="unset"))] == ["b"]
    assert [t.title for t in list_tasks(store, TaskFilters(tag="x"))] == ["c"]
    assert [
        t.title for t in list_tasks(store, TaskFilters(status="todo", priority="high"))
    ] == ["a"]


def test_assignee_filter_accepts_query_strings():
    assert TaskFilters(assigned_to="none").assigned_to == "unset"
    assert TaskFilters(assigned_to="7").assigned_to == 7
    assert TaskFilters(assigned_to="").assigned_to is None


def test_priority_ranking(store, clock):
    create_task(store, TaskCreate(title="low", priority="low"))
    create_task(store, TaskCreate(title="medium-undated", priority="medium"))
    create_task(store, TaskCreate(title="medium-late", priority="medium", deadline="2026-12-01"))
    create_task(store, TaskCreate(title="medium-soon", priority="medium", deadline="2026-11-01"))
    create_task(store, TaskCreate(title="urgent", priority="urgent"))
    create_task(store, TaskCreate(title="high-old", priority="high"))
    create_task(store, TaskCreate(title="high-new", priority="high"))

    ranked = list_tasks(store, TaskFilters(order="priority"))
    assert [t.title for t in ranked] == [
        "urgent",
        "high-new",
        "high-old",
        "medium-soon",
        "medium-late",
        "medium-undated",
        "low",
    ]
    assert [t.title for t in list_tasks(store, order="priority")] == [t.title for t in ranked]


def test_unknown_priority_ranks_last(store):
    low = create_task(store, TaskCreate(title="low", priority="low"))
    odd = low.model_copy(update={"priority": "someday", "id": low.id + 100})
    assert rank_by_priority([odd, low])[-1].priority == "someday"


def test_search_is_case_insensitive(store):
    create_task(store, TaskCreate(title="Call the Bank", description=""))
    create_task(store, TaskCreate(title="Groceries", description="buy BANANAS"))
    create_task(store, TaskCreate(title="Other"))

    assert [t.title for t in search_tasks(store, "bank")] == ["Call the Bank"]
    assert [t.title for t in search_tasks(store, "bananas")] == ["Groceries"]
    assert search_tasks(store, "nothing-like-this") == []


def test_empty_search_matches_list(store):
    for title in ("a", "b", "c"):
        create_task(store, TaskCreate(title=title))
    assert {t.id for t in search_tasks(store, "")} == {t.id for t in list_tasks(store)}


def test_tasks_needing_reminder(store):
    today = date(2026, 10, 19)
    create_task(store, TaskCreate(title="due tomorrow", deadline="2026-10-20T09:00:00Z"))
    create_task(store, TaskCreate(title="due today", deadline=datetime(2026, 10, 19, 18, tzinfo=timezone.utc)))
    create_task(store, TaskCreate(title="scheduled today", scheduled_date="2026-10-19"))
    create_task(store, TaskCreate(title="due later", deadline="2026-10-25"))
    create_task(store, TaskCreate(title="overdue", deadline="2026-10-18"))
    create_task(store, TaskCreate(title="done today", status="done", deadline="2026-10-19"))

    titles = {t.title for t in tasks_needing_reminder(store, today=today)}
    assert titles == {"due tomorrow", "due today", "scheduled today"}
