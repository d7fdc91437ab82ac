"""Note JSON API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from ..database import get_store
from ..schemas import NoteCreate, NoteFilters, NotePatch, envelope
from ..security.api_auth import require_api_auth
from ..services import note_svc
from ..storage.base import EntityStore

router = APIRouter(dependencies=[Depends(require_api_auth)])


@router.get("")
def list_notes(
    category: str | None = None,
    created_from: str | None = Query(None, alias="from"),
    created_to: str | None = Query(None, alias="to"),
    store: EntityStore = Depends(get_store),
):
    try:
        filters = NoteFilters(
            category=category,
            created_from=created_from,
            created_to=created_to,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()[0]["msg"]) from exc
    return envelope(note_svc.list_notes(store, filters))


@router.get("/search")
def search_notes(q: str = "", store: EntityStore = Depends(get_store)):
    return envelope(note_svc.search_notes(store, q))


@router.get("/{note_id}")
def get_note(note_id: int, store: EntityStore = Depends(get_store)):
    note = note_svc.get_note(store, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return envelope(note)


@router.post("")
def create_note(data: NoteCreate, store: EntityStore = Depends(get_store)):
    return envelope(note_svc.create_note(store, data))


@router.put("/{note_id}")
@router.patch("/{note_id}")
def update_note(note_id: int, data: NotePatch, store: EntityStore = Depends(get_store)):
    note = note_svc.update_note(store, note_id, data)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return envelope(note)


@router.delete("/{note_id}")
def delete_note(note_id: int, store: EntityStore = Depends(get_store)):
    if not note_svc.delete_note(store, note_id):
        raise HTTPException(status_code=404, detail="Note not found")
    return envelope()
