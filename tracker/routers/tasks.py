"""Task JSON API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from ..config import settings
from ..database import get_store
from ..schemas import DetectRequest, TaskCreate, TaskFilters, TaskPatch, envelope
from ..security.api_auth import require_api_auth
from ..services import detect_svc, person_svc, task_svc
from ..storage.base import EntityStore

router = APIRouter(dependencies=[Depends(require_api_auth)])


@router.get("")
def list_tasks(
    status: str | None = None,
    assigned_to: str | None = Query(None, alias="assignedTo"),
    priority: str | None = None,
    tag: str | None = None,
    order: str | None = None,
    store: EntityStore = Depends(get_store),
):
    try:
        filters = TaskFilters(
            status=status,
            assigned_to=assigned_to,
            priority=priority,
            tag=tag,
            order=order,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()[0]["msg"]) from exc
    tasks = task_svc.list_tasks(store, filters, order=settings.default_order)
    return envelope(tasks)


@router.get("/search")
def search_tasks(q: str = "", store: EntityStore = Depends(get_store)):
    return envelope(task_svc.search_tasks(store, q))


@router.get("/reminders")
def reminders(store: EntityStore = Depends(get_store)):
    return envelope(task_svc.tasks_needing_reminder(store))


@router.post("/detect")
def detect_task(data: DetectRequest, store: EntityStore = Depends(get_store)):
    people = person_svc.list_people(store)
    return envelope(detect_svc.detect_task_from_text(data.text, people))


@router.get("/{task_id}")
def get_task(task_id: int, store: EntityStore = Depends(get_store)):
    task = task_svc.get_task(store, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return envelope(task)


@router.post("")
def create_task(data: TaskCreate, store: EntityStore = Depends(get_store)):
    return envelope(task_svc.create_task(store, data))


@router.put("/{task_id}")
@router.patch("/{task_id}")
def update_task(task_id: int, data: TaskPatch, store: EntityStore = Depends(get_store)):
    task = task_svc.update_task(store, task_id, data)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return envelope(task)


@router.delete("/{task_id}")
def delete_task(task_id: int, store: EntityStore = Depends(get_store)):
    if not task_svc.delete_task(store, task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return envelope()
