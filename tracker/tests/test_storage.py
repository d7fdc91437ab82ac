"""Tests for the storage backends."""

import json

import pytest

from tracker.config import TrackerSettings
from tracker.errors import StoreUnavailableError
from tracker.models import Note, Person, Task
from tracker.schemas import TaskCreate
from tracker.services.task_svc import create_task, delete_task, list_tasks
from tracker.storage import JSONStore, SQLStore, build_store


def test_json_collection_file_layout(json_store):
    create_task(json_store, TaskCreate(title="Buy milk", tags=["home"]))

    doc = json.loads((json_store.directory / "tasks.json").read_text(encoding="utf-8"))
    assert doc["nextId"] == 2
    assert "lastUpdated" in doc
    assert [t["title"] for t in doc["tasks"]] == ["Buy milk"]
    assert json.loads(doc["tasks"][0]["tags"]) == ["home"]
    assert (json_store.directory / "notes.json").exists()
    assert (json_store.directory / "people.json").exists()


def test_ids_are_never_reused_after_delete(store):
    first = create_task(store, TaskCreate(title="one"))
    second = create_task(store, TaskCreate(title="two"))
    delete_task(store, second.id)
    third = create_task(store, TaskCreate(title="three"))

    assert third.id > second.id > first.id


def test_json_store_starts_empty_without_files(tmp_path):
    store = JSONStore(tmp_path / "missing")
    assert store.list(Task) == []
    assert store.get(Task, 1) is None


def test_json_store_keeps_collections_separate(json_store):
    create_task(json_store, TaskCreate(title="t"))
    assert json_store.list(Note) == []


def test_corrupt_json_file_raises(json_store):
    (json_store.directory / "tasks.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreUnavailableError):
        list_tasks(json_store)
    with pytest.raises(StoreUnavailableError):
        json_store.ping()


def test_malformed_json_document_raises(json_store):
    (json_store.directory / "tasks.json").write_text('{"nextId": 1}', encoding="utf-8")
    with pytest.raises(StoreUnavailableError):
        json_store.list(Task)


def test_json_backup_copies_directory(json_store):
    create_task(json_store, TaskCreate(title="keep me"))
    target = json_store.backup()

    assert target.is_dir()
    assert target != json_store.directory
    restored = JSONStore(target)
    assert [t.title for t in list_tasks(restored)] == ["keep me"]


def test_sql_store_on_disk_and_backup(tmp_path):
    store = SQLStore.from_path(tmp_path / "data" / "tracker.db")
    store.create_all()
    try:
        create_task(store, TaskCreate(title="persisted"))
        store.ping()
        target = store.backup()
    finally:
        store.close()

    assert target.exists()
    copy = SQLStore.from_path(target)
    try:
        assert [t.title for t in list_tasks(copy)] == ["persisted"]
    finally:
        copy.close()


def test_sql_store_unreachable_path_raises(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(StoreUnavailableError):
        SQLStore.from_path(blocker / "tracker.db")


def test_sql_database_path_is_directory_raises(tmp_path):
    store = SQLStore.from_path(tmp_path)
    with pytest.raises(StoreUnavailableError):
        store.create_all()
    store.close()


def test_in_memory_backup_is_refused(sql_store):
    with pytest.raises(StoreUnavailableError):
        sql_store.backup()


def test_build_store_selects_backend(tmp_path):
    json_settings = TrackerSettings(backend="json", json_dir=str(tmp_path / "j"))
    assert isinstance(build_store(json_settings), JSONStore)

    sql_settings = TrackerSettings(backend="SQLite", db_path=str(tmp_path / "t.db"))
    store = build_store(sql_settings)
    assert isinstance(store, SQLStore)
    store.close()

    with pytest.raises(ValueError):
        build_store(TrackerSettings(backend="mongo"))


@pytest.mark.parametrize("model, fields", [
    (Task, {"title": "t"}),
    (Note, {"title": "n", "content": "c"}),
    (Person, {"name": "p"}),
])
def test_sql_ids_survive_deleting_the_newest_row(sql_store, model, fields):
    first = sql_store.insert(model(**fields))
    newest = sql_store.insert(model(**fields))
    assert sql_store.delete(model, newest.id) is True

    replacement = sql_store.insert(model(**fields))
    assert replacement.id > newest.id > first.id


def test_sql_ids_not_reused_after_reopen(tmp_path):
    path = tmp_path / "tracker.db"
    store = SQLStore.from_path(path)
    store.create_all()
    try:
        create_task(store, TaskCreate(title="one"))
        gone = create_task(store, TaskCreate(title="two"))
        delete_task(store, gone.id)
    finally:
        store.close()

    reopened = SQLStore.from_path(path)
    try:
        assert create_task(reopened, TaskCreate(title="three")).id > gone.id
    finally:
        reopened.close()
