"""People service.

Tasks reference people by id only; deleting a person leaves those tasks
pointing at a missing id.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ..errors import MissingFieldError
from ..models import Person
from ..schemas import PersonCreate, PersonFilters, PersonPatch, PersonRead
from ..storage.base import EntityStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def list_people(store: EntityStore, filters: PersonFilters | None = None) -> list[PersonRead]:
    """List people alphabetically by name."""
    filters = filters or PersonFilters()
    where = {"role": filters.role} if filters.role else {}
    people = [PersonRead.from_record(r) for r in store.list(Person, where)]
    return sorted(people, key=lambda p: (p.name.lower(), p.id))


def get_person(store: EntityStore, person_id: int) -> PersonRead | None:
    record = store.get(Person, person_id)
    return PersonRead.from_record(record) if record else None


def find_person(store: EntityStore, identifier: int | str) -> PersonRead | None:
    """Look a person up by id, exact name, or exact email.

    An id match wins; otherwise the first person in name order whose name or
    email equals ``identifier``.
    """
    if isinstance(identifier, int) or (isinstance(identifier, str) and identifier.isdigit()):
        person = get_person(store, int(identifier))
        if person:
            return person

    needle = str(identifier).strip()
    if not needle:
        return None
    for p in list_people(store):
        if p.name == needle or (p.email and p.email == needle):
            return p
    return None


def create_person(store: EntityStore, data: PersonCreate) -> PersonRead:
    if not (data.name or "").strip():
        raise MissingFieldError("name", "Person")

    now = _utcnow()
    person = Person(
        name=data.name,
        role=data.role,
        email=data.email,
        phone=data.phone,
        notes=data.notes,
        created_at=now,
        updated_at=now,
    )
    return PersonRead.from_record(store.insert(person))


def update_person(store: EntityStore, person_id: int, patch: PersonPatch) -> PersonRead | None:
    values = patch.model_dump(exclude_unset=True)
    if "name" in values and not (values["name"] or "").strip():
        raise MissingFieldError("name", "Person")
    values["updated_at"] = _utcnow()

    person = store.update(Person, person_id, values)
    return PersonRead.from_record(person) if person else None


def delete_person(store: EntityStore, person_id: int) -> bool:
    return store.delete(Person, person_id)


def search_people(store: EntityStore, query: str) -> list[PersonRead]:
    """Search people by name, role, or email."""
    q = (query or "").lower()
    people = list_people(store)
    if not q:
        return people
    return [
        p for p in people
        if q in (p.name or "").lower()
        or q in (p.role or "").lower()
        or q in (p.email or "").lower()
    ]
