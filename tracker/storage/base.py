"""Storage port shared by the SQLite and JSON-file backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, TypeVar

from sqlmodel import SQLModel

R = TypeVar("R", bound=SQLModel)


class EntityStore(ABC):
    """Record-level CRUD over the three entity collections.

    Stores know nothing about defaults, tags or ordering; the services
    own those. ``filters`` are equality predicates on record attributes, with
    ``None`` matching an unset column. Any I/O failure is raised as
    ``StoreUnavailableError``.
    """

    name: str = "store"

    @abstractmethod
    def create_all(self) -> None:
        """Create missing collections."""

    @abstractmethod
    def list(self, model: type[R], filters: Mapping[str, Any] | None = None) -> list[R]:
        ...

    @abstractmethod
    def get(self, model: type[R], record_id: int) -> R | None:
        ...

    @abstractmethod
    def insert(self, record: R) -> R:
        """Persist a new record, assigning the next id."""

    @abstractmethod
    def update(self, model: type[R], record_id: int, values: Mapping[str, Any]) -> R | None:
        """Overwrite the given columns. Returns ``None`` when the id is unknown."""

    @abstractmethod
    def delete(self, model: type[R], record_id: int) -> bool:
        ...

    @abstractmethod
    def ping(self) -> None:
        """Raise ``StoreUnavailableError`` unless the store can be read."""

    @abstractmethod
    def backup(self) -> Path:
        """Copy the store beside itself and return the copy's path."""

    def close(self) -> None:
        pass
