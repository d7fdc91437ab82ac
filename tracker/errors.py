"""Exceptions raised by the tracker stores and services.

A missing id is not an error: lookups return ``None`` and deletes return
``False``. These exceptions cover the remaining failure modes.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker errors."""


class StoreUnavailableError(TrackerError):
    """The backing database or JSON files could not be read or written."""


class MissingFieldError(TrackerError, ValueError):
    """A required field was absent or blank."""

    def __init__(self, field: str, entity: str = "entity"):
        self.field = field
        self.entity = entity
        super().__init__(f"{entity} {field} is required")
