"""Health and readiness routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..database import get_store
from ..storage.base import EntityStore

router = APIRouter()


@router.get("/health")
def health_check():
    return {"status": "healthy", "service": "tracker"}


@router.get("/ready")
def readiness_check(store: EntityStore = Depends(get_store)):
    store.ping()
    return {"status": "ready", "service": "tracker", "backend": store.name}
