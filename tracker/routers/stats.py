"""Statistics route."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..database import get_store
from ..schemas import envelope
from ..security.api_auth import require_api_auth
from ..services.stats_svc import compute_stats
from ..storage.base import EntityStore

router = APIRouter(dependencies=[Depends(require_api_auth)])


@router.get("/stats")
def stats(store: EntityStore = Depends(get_store)):
    return envelope(compute_stats(store))
