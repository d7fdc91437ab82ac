"""Process-wide store and the FastAPI dependency that hands it out."""

from __future__ import annotations

from functools import lru_cache

from .config import settings
from .storage import EntityStore, build_store


@lru_cache(maxsize=1)
def get_store() -> EntityStore:
    """FastAPI dependency returning the configured store."""
    return build_store(settings)
