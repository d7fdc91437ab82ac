"""Best-effort task detection from free text.

Literal keyword and pattern matching over Hebrew trigger words and their
English equivalents. Nothing here persists; callers decide whether to turn
a suggestion into a task.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from ..schemas import TaskSuggestion

MAX_TITLE_LENGTH = 100

TASK_KEYWORDS: tuple[str, ...] = (
    "תזכיר",
    "תזכורת",
    "משימה",
    "צריך",
    "חייב",
    "לעשות",
    "remind",
    "reminder",
    "task",
    "need to",
    "must",
    "to-do",
    "todo",
)

DEADLINE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"עד (\d{1,2})/(\d{1,2})"),
    re.compile(r"עד מחר"),
    re.compile(r"עד היום"),
    re.compile(r"עד הערב"),
    re.compile(r"\bby (\d{1,2})/(\d{1,2})\b", re.IGNORECASE),
    re.compile(r"\bby tomorrow\b", re.IGNORECASE),
    re.compile(r"\bby today\b", re.IGNORECASE),
    re.compile(r"\bby this evening\b", re.IGNORECASE),
)

URGENT_MARKERS: tuple[str, ...] = ("דחוף", "חשוב", "urgent", "important")
NOT_URGENT_MARKERS: tuple[str, ...] = ("לא דחוף", "not urgent")


def _contains_any(text: str, words: Iterable[str]) -> bool:
    return any(w in text for w in words)


def detect_task_from_text(text: str, people: Iterable[Any] = ()) -> TaskSuggestion:
    """Propose a task skeleton for ``text``.

    ``people`` is any iterable of objects with ``id`` and ``name``. When
    several names appear in the text the last one in iteration order wins.
    ``deadline_detected`` only flags that a date-ish phrase was seen; no date
    is parsed.
    """
    text = text or ""
    lowered = text.lower()
    suggestion = TaskSuggestion()

    if _contains_any(lowered, TASK_KEYWORDS):
        suggestion.is_task = True
        suggestion.title = text[:MAX_TITLE_LENGTH]

    suggestion.deadline_detected = any(p.search(text) for p in DEADLINE_PATTERNS)

    for person in people:
        if person.name and person.name in text:
            suggestion.assigned_to = person.id

    # The negated marker contains the plain one, so it is checked first.
    if _contains_any(lowered, NOT_URGENT_MARKERS):
        suggestion.priority = "low"
    elif _contains_any(lowered, URGENT_MARKERS):
        suggestion.priority = "urgent"

    return suggestion
