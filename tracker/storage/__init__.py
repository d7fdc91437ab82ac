"""Storage backends - re-exports the port and both implementations."""

from ..config import TrackerSettings
from .base import EntityStore
from .json_store import JSONStore
from .sql_store import SQLStore


def build_store(settings_obj: TrackerSettings) -> EntityStore:
    """Construct the backend named by ``settings_obj.backend``."""
    backend = settings_obj.backend.strip().lower()
    if backend == "json":
        return JSONStore(settings_obj.json_path)
    if backend == "sqlite":
        return SQLStore.from_path(settings_obj.database_path, echo=settings_obj.echo_sql)
    raise ValueError(f"Unknown storage backend: {settings_obj.backend!r}")


__all__ = [
    "EntityStore",
    "JSONStore",
    "SQLStore",
    "build_store",
]
