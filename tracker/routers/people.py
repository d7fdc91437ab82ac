"""People JSON API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..database import get_store
from ..schemas import PersonCreate, PersonFilters, PersonPatch, envelope
from ..security.api_auth import require_api_auth
from ..services import person_svc
from ..storage.base import EntityStore

router = APIRouter(dependencies=[Depends(require_api_auth)])


@router.get("")
def list_people(role: str | None = None, store: EntityStore = Depends(get_store)):
    return envelope(person_svc.list_people(store, PersonFilters(role=role or None)))


@router.get("/search")
def search_people(q: str = "", store: EntityStore = Depends(get_store)):
    return envelope(person_svc.search_people(store, q))


@router.get("/find")
def find_person(identifier: str = "", store: EntityStore = Depends(get_store)):
    person = person_svc.find_person(store, identifier)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return envelope(person)


@router.get("/{person_id}")
def get_person(person_id: int, store: EntityStore = Depends(get_store)):
    person = person_svc.get_person(store, person_id)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return envelope(person)


@router.post("")
def create_person(data: PersonCreate, store: EntityStore = Depends(get_store)):
    return envelope(person_svc.create_person(store, data))


@router.put("/{person_id}")
@router.patch("/{person_id}")
def update_person(person_id: int, data: PersonPatch, store: EntityStore = Depends(get_store)):
    person = person_svc.update_person(store, person_id, data)
    if not person:
        raise HTTPException(status_code=404, detail="Person not found")
    return envelope(person)


@router.delete("/{person_id}")
def delete_person(person_id: int, store: EntityStore = Depends(get_store)):
    if not person_svc.delete_person(store, person_id):
        raise HTTPException(status_code=404, detail="Person not found")
    return envelope()
