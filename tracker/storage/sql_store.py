"""SQLite store on SQLModel."""

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from ..errors import StoreUnavailableError
from ..models import COLLECTIONS
from .base import EntityStore, R

logger = logging.getLogger(__name__)


def _enable_wal(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


class SQLStore(EntityStore):
    """All three collections as tables in one SQLite database."""

    name = "sqlite"

    def __init__(self, engine: Engine, path: Path | None = None):
        self.engine = engine
        self.path = path

    @classmethod
    def from_path(cls, path: Path | str, echo: bool = False) -> "SQLStore":
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreUnavailableError(f"Cannot create database directory: {exc}") from exc
        engine = create_engine(
            f"sqlite:///{path}",
            echo=echo,
            connect_args={"check_same_thread": False},
        )
        event.listen(engine, "connect", _enable_wal)
        return cls(engine, path=path)

    @classmethod
    def in_memory(cls) -> "SQLStore":
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        return cls(engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.exception("SQLite store operation failed")
            raise StoreUnavailableError(str(exc)) from exc

    def create_all(self) -> None:
        tables = [model.__table__ for model in COLLECTIONS.values()]
        try:
            SQLModel.metadata.create_all(self.engine, tables=tables)
        except SQLAlchemyError as exc:
            logger.exception("Could not create tracker tables")
            raise StoreUnavailableError(str(exc)) from exc

    def list(self, model: type[R], filters: Mapping[str, Any] | None = None) -> list[R]:
        stmt = select(model)
        for key, value in (filters or {}).items():
            column = getattr(model, key)
            stmt = stmt.where(column.is_(None) if value is None else column == value)
        with self._session() as db:
            return list(db.exec(stmt).all())

    def get(self, model: type[R], record_id: int) -> R | None:
        with self._session() as db:
            return db.get(model, record_id)

    def insert(self, record: R) -> R:
        with self._session() as db:
            db.add(record)
            db.commit()
            db.refresh(record)
            return record

    def update(self, model: type[R], record_id: int, values: Mapping[str, Any]) -> R | None:
        with self._session() as db:
            record = db.get(model, record_id)
            if not record:
                return None
            for key, value in values.items():
                setattr(record, key, value)
            db.add(record)
            db.commit()
            db.refresh(record)
            return record

    def delete(self, model: type[R], record_id: int) -> bool:
        with self._session() as db:
            record = db.get(model, record_id)
            if not record:
                return False
            db.delete(record)
            db.commit()
            return True

    def ping(self) -> None:
        with self._session() as db:
            db.exec(text("SELECT 1"))

    def backup(self) -> Path:
        if self.path is None:
            raise StoreUnavailableError("In-memory database cannot be backed up")
        target = self.path.with_name(f"{self.path.name}.backup-{int(time.time() * 1000)}")
        try:
            raw = self.engine.raw_connection()
            try:
                with sqlite3.connect(target) as dest:
                    raw.driver_connection.backup(dest)
                dest.close()
            finally:
                raw.close()
        except (sqlite3.Error, OSError) as exc:
            logger.exception("SQLite backup failed")
            raise StoreUnavailableError(f"Backup failed: {exc}") from exc
        logger.info("Backed up %s to %s", self.path, target)
        return target

    def close(self) -> None:
        self.engine.dispose()
