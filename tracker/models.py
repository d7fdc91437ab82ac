"""SQLModel table definitions for the tracker.

The same classes serve as records for the JSON-file backend, so every column
here round-trips through ``model_dump(mode="json")``. Tags are kept in their
encoded text form; ``services.tags`` owns the encoding.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Task(SQLModel, table=True):
    __tablename__ = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    title: str
    description: str = ""
    status: str = Field(default="todo", index=True)  # todo / in-progress / done
    priority: str = Field(default="medium", index=True)  # low / medium / high / urgent
    assigned_to: int | None = Field(default=None, index=True)  # person id, not enforced
    deadline: datetime | None = Field(default=None, index=True)
    scheduled_date: date | None = None
    scheduled_time: str | None = None  # HH:MM
    estimated_duration: int | None = None  # minutes
    tags: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    completed_at: datetime | None = None
    source: str = "web"


class Note(SQLModel, table=True):
    __tablename__ = "notes"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    title: str
    content: str
    category: str = Field(default="general", index=True)
    tags: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    source: str = "web"


class Person(SQLModel, table=True):
    __tablename__ = "people"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    name: str
    role: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


# Collection name -> record class, in the order the stores create them.
COLLECTIONS: dict[str, type[SQLModel]] = {
    "tasks": Task,
    "notes": Note,
    "people": Person,
}
