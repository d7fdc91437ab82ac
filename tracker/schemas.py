"""Pydantic models for the tracker API and services.

Create models carry the caller-supplied fields, patch models carry one
optional slot per mutable field (only fields that were explicitly set are
merged), and read models are what the services hand back with tags decoded.
Everything serializes with camelCase keys.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from .services.tags import decode_tags

Status = Literal["todo", "in-progress", "done"]
Priority = Literal["low", "medium", "high", "urgent"]
Order = Literal["created", "priority"]

# assignedTo filter value matching tasks with no assignee.
UNASSIGNED = "unset"

PRIORITY_RANK: dict[str, int] = {"urgent": 4, "high": 3, "medium": 2, "low": 1}


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_datetime(value: object) -> object:
    """Coerce date-only input into a midnight-UTC datetime.

    HTML date inputs and the CLI send ``YYYY-MM-DD``; anything else is left
    for pydantic to parse.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if len(raw) == 10:
            try:
                return datetime.combine(date.fromisoformat(raw), time.min, tzinfo=timezone.utc)
            except ValueError:
                return raw
        return raw
    return value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Tasks ---

class _TaskFields(CamelModel):
    @field_validator("deadline", mode="before", check_fields=False)
    @classmethod
    def _deadline(cls, value: object) -> object:
        return coerce_datetime(value)

    @field_validator("scheduled_date", mode="before", check_fields=False)
    @classmethod
    def _scheduled_date(cls, value: object) -> object:
        value = _blank_to_none(value)
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value


class TaskCreate(_TaskFields):
    title: str
    description: str | None = None
    status: Status | None = None
    priority: Priority | None = None
    assigned_to: int | None = None
    deadline: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    estimated_duration: int | None = None
    tags: list[str] | None = None
    source: str | None = None


class TaskPatch(_TaskFields):
    title: str | None = None
    description: str | None = None
    status: Status | None = None
    priority: Priority | None = None
    assigned_to: int | None = None
    deadline: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    estimated_duration: int | None = None
    tags: list[str] | None = None


class TaskRead(CamelModel):
    id: int
    title: str
    description: str = ""
    status: str
    priority: str
    assigned_to: int | None = None
    deadline: datetime | None = None
    scheduled_date: date | None = None
    scheduled_time: str | None = None
    estimated_duration: int | None = None
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
    source: str = "web"

    @field_validator("deadline", "created_at", "updated_at", "completed_at")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @classmethod
    def from_record(cls, record: Any) -> "TaskRead":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description or "",
            status=record.status,
            priority=record.priority,
            assigned_to=record.assigned_to,
            deadline=record.deadline,
            scheduled_date=record.scheduled_date,
            scheduled_time=record.scheduled_time,
            estimated_duration=record.estimated_duration,
            tags=decode_tags(record.tags),
            created_at=record.created_at,
            updated_at=record.updated_at,
            completed_at=record.completed_at,
            source=record.source or "web",
        )


class TaskFilters(CamelModel):
    status: str | None = None
    assigned_to: int | Literal["unset"] | None = None
    priority: str | None = None
    tag: str | None = None
    order: Order | None = None

    @field_validator("status", "priority", "tag", mode="before")
    @classmethod
    def _empty(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def _assignee(cls, value: object) -> object:
        value = _blank_to_none(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {UNASSIGNED, "none", "null"}:
                return UNASSIGNED
            return int(lowered)
        return value


class TaskStats(CamelModel):
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    done: int = 0
    overdue: int = 0
    total_notes: int = 0
    total_people: int = 0


class TaskSuggestion(CamelModel):
    is_task: bool = False
    title: str = ""
    deadline_detected: bool = False
    assigned_to: int | None = None
    priority: str = "medium"


class DetectRequest(BaseModel):
    text: str


# --- Notes ---

class NoteCreate(CamelModel):
    title: str
    content: str
    category: str | None = None
    tags: list[str] | None = None
    source: str | None = None


class NotePatch(CamelModel):
    title: str | None = None
    content: str | None = None
    category: str | None = None
    tags: list[str] | None = None


class NoteRead(CamelModel):
    id: int
    title: str
    content: str
    category: str = "general"
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime
    source: str = "web"

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime | None:
        return as_utc(value)

    @classmethod
    def from_record(cls, record: Any) -> "NoteRead":
        return cls(
            id=record.id,
            title=record.title,
            content=record.content,
            category=record.category or "general",
            tags=decode_tags(record.tags),
            created_at=record.created_at,
            updated_at=record.updated_at,
            source=record.source or "web",
        )


class NoteFilters(CamelModel):
    """Category match plus an inclusive ``created_at`` range.

    A date-only upper bound covers that whole day.
    """

    category: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _empty(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("created_from", mode="before")
    @classmethod
    def _from(cls, value: object) -> object:
        return coerce_datetime(value)

    @field_validator("created_to", mode="before")
    @classmethod
    def _to(cls, value: object) -> object:
        if isinstance(value, str) and len(value.strip()) == 10:
            value = date.fromisoformat(value.strip())
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime.combine(value, time.max, tzinfo=timezone.utc)
        return coerce_datetime(value)

    @field_validator("created_from", "created_to")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


# --- People ---

class PersonCreate(CamelModel):
    name: str
    role: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None


class PersonPatch(CamelModel):
    name: str | None = None
    role: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None


class PersonRead(CamelModel):
    id: int
    name: str
    role: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime | None:
        return as_utc(value)

    @classmethod
    def from_record(cls, record: Any) -> "PersonRead":
        return cls(
            id=record.id,
            name=record.name,
            role=record.role,
            email=record.email,
            phone=record.phone,
            notes=record.notes,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class PersonFilters(CamelModel):
    role: str | None = None


# --- Envelope ---

def dump(value: Any) -> Any:
    """Convert service results into JSON-ready data with camelCase keys."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [dump(v) for v in value]
    return value


def envelope(data: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = dump(data)
    return body
