"""Tag list <-> stored text encoding."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def encode_tags(tags: Iterable[str] | None) -> str:
    """Serialize an ordered tag list into a single text field."""
    return json.dumps([str(t) for t in (tags or [])], ensure_ascii=False)


def decode_tags(raw: str | None) -> list[str]:
    """Parse stored tags back into a list. Absent or empty text gives ``[]``."""
    if not raw or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Unreadable tags field %r, treating as empty", raw[:80])
        return []
    if not isinstance(value, list):
        return []
    return [str(t) for t in value]
