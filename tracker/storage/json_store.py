"""Flat JSON-file store.

Each collection lives in ``<dir>/<collection>.json``::

    {"nextId": 3, "tasks": [{...}, {...}], "lastUpdated": "..."}

Files are re-read on every call and replaced atomically on write. Writers in
one process are serialized by a lock; separate processes are last-writer-wins.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlmodel import SQLModel

from ..errors import StoreUnavailableError
from ..models import COLLECTIONS
from .base import EntityStore, R

logger = logging.getLogger(__name__)


def _collection(model: type[SQLModel]) -> str:
    return str(model.__tablename__)


class JSONStore(EntityStore):
    """One JSON document per entity collection, each with its own id counter."""

    name = "json"

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        self._lock = threading.RLock()

    def _file(self, model: type[SQLModel]) -> Path:
        return self.directory / f"{_collection(model)}.json"

    def _empty(self, model: type[SQLModel]) -> dict[str, Any]:
        return {"nextId": 1, _collection(model): []}

    def _load(self, model: type[SQLModel]) -> dict[str, Any]:
        path = self._file(model)
        if not path.exists():
            return self._empty(model)
        try:
            with open(path, encoding="utf-8") as f:
                doc = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not load %s: %s", path, exc)
            raise StoreUnavailableError(f"Could not load {path.name}: {exc}") from exc
        if not isinstance(doc, dict) or not isinstance(doc.get(_collection(model)), list):
            raise StoreUnavailableError(f"Malformed collection file {path.name}")
        doc.setdefault("nextId", 1)
        return doc

    def _save(self, model: type[SQLModel], doc: dict[str, Any]) -> None:
        path = self._file(model)
        doc["lastUpdated"] = datetime.now(timezone.utc).isoformat()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(doc, f, ensure_ascii=False, indent=2)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as exc:
            logger.error("Could not save %s: %s", path, exc)
            raise StoreUnavailableError(f"Could not save {path.name}: {exc}") from exc

    def _records(self, model: type[R], doc: dict[str, Any]) -> list[R]:
        return [model.model_validate(raw) for raw in doc[_collection(model)]]

    def create_all(self) -> None:
        with self._lock:
            for model in COLLECTIONS.values():
                if not self._file(model).exists():
                    self._save(model, self._empty(model))

    def list(self, model: type[R], filters: Mapping[str, Any] | None = None) -> list[R]:
        records = self._records(model, self._load(model))
        for key, value in (filters or {}).items():
            records = [r for r in records if getattr(r, key) == value]
        return records

    def get(self, model: type[R], record_id: int) -> R | None:
        for raw in self._load(model)[_collection(model)]:
            if raw.get("id") == record_id:
                return model.model_validate(raw)
        return None

    def insert(self, record: R) -> R:
        model = type(record)
        with self._lock:
            doc = self._load(model)
            rows = doc[_collection(model)]
            next_id = max([doc["nextId"], *(int(r.get("id") or 0) + 1 for r in rows)])
            record.id = next_id
            doc["nextId"] = next_id + 1
            raw = record.model_dump(mode="json")
            rows.append(raw)
            self._save(model, doc)
        return model.model_validate(raw)

    def update(self, model: type[R], record_id: int, values: Mapping[str, Any]) -> R | None:
        with self._lock:
            doc = self._load(model)
            rows = doc[_collection(model)]
            for index, raw in enumerate(rows):
                if raw.get("id") != record_id:
                    continue
                record = model.model_validate(raw)
                for key, value in values.items():
                    setattr(record, key, value)
                rows[index] = record.model_dump(mode="json")
                self._save(model, doc)
                return model.model_validate(rows[index])
        return None

    def delete(self, model: type[R], record_id: int) -> bool:
        with self._lock:
            doc = self._load(model)
            rows = doc[_collection(model)]
            kept = [r for r in rows if r.get("id") != record_id]
            if len(kept) == len(rows):
                return False
            doc[_collection(model)] = kept
            self._save(model, doc)
            return True

    def ping(self) -> None:
        if not self.directory.is_dir():
            raise StoreUnavailableError(f"JSON store directory {self.directory} does not exist")
        for model in COLLECTIONS.values():
            self._load(model)

    def backup(self) -> Path:
        target = self.directory.with_name(
            f"{self.directory.name}.backup-{int(time.time() * 1000)}"
        )
        with self._lock:
            try:
                shutil.copytree(self.directory, target, ignore=shutil.ignore_patterns("*.tmp"))
            except OSError as exc:
                logger.exception("JSON store backup failed")
                raise StoreUnavailableError(f"Backup failed: {exc}") from exc
        logger.info("Backed up %s to %s", self.directory, target)
        return target
