"""Note service."""

from __future__ import annotations

from datetime import datetime, timezone

from ..errors import MissingFieldError
from ..models import Note
from ..schemas import NoteCreate, NoteFilters, NotePatch, NoteRead
from ..storage.base import EntityStore
from .tags import encode_tags


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def list_notes(store: EntityStore, filters: NoteFilters | None = None) -> list[NoteRead]:
    """List notes newest first, optionally by category and creation window."""
    filters = filters or NoteFilters()
    where = {"category": filters.category} if filters.category else {}
    notes = [NoteRead.from_record(r) for r in store.list(Note, where)]
    if filters.created_from:
        notes = [n for n in notes if n.created_at >= filters.created_from]
    if filters.created_to:
        notes = [n for n in notes if n.created_at <= filters.created_to]
    return sorted(notes, key=lambda n: (n.created_at, n.id), reverse=True)


def get_note(store: EntityStore, note_id: int) -> NoteRead | None:
    record = store.get(Note, note_id)
    return NoteRead.from_record(record) if record else None


def create_note(store: EntityStore, data: NoteCreate) -> NoteRead:
    if not (data.title or "").strip():
        raise MissingFieldError("title", "Note")
    if not (data.content or "").strip():
        raise MissingFieldError("content", "Note")

    now = _utcnow()
    note = Note(
        title=data.title,
        content=data.content,
        category=data.category or "general",
        tags=encode_tags(data.tags),
        created_at=now,
        updated_at=now,
        source=data.source or "web",
    )
    return NoteRead.from_record(store.insert(note))


def update_note(store: EntityStore, note_id: int, patch: NotePatch) -> NoteRead | None:
    values = patch.model_dump(exclude_unset=True)
    for field in ("title", "content"):
        if field in values and not (values[field] or "").strip():
            raise MissingFieldError(field, "Note")
    if "category" in values:
        values["category"] = values["category"] or "general"
    if "tags" in values:
        values["tags"] = encode_tags(values["tags"])
    values["updated_at"] = _utcnow()

    note = store.update(Note, note_id, values)
    return NoteRead.from_record(note) if note else None


def delete_note(store: EntityStore, note_id: int) -> bool:
    return store.delete(Note, note_id)


def search_notes(store: EntityStore, query: str) -> list[NoteRead]:
    """Case-insensitive substring search over title and content."""
    q = (query or "").lower()
    notes = list_notes(store)
    if not q:
        return notes
    return [
        n for n in notes
        if q in (n.title or "").lower()
        or q in (n.content or "").lower()
    ]
