"""Plain-text rendering of answers within chat platform limits."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

PLAIN_MAX_LENGTH = 2000
FALLBACK_ANSWER_LENGTH = 1900
MAX_SOURCES = 5
ELLIPSIS = "..."

_MENTION_RE = re.compile(r"<at>.*?</at>|<@!?[\w-]+>", re.IGNORECASE)


def truncate(text: str, limit: int, suffix: str = "") -> str:
    """Cut *text* to at most *limit* characters, ending with *suffix* if cut."""
    if len(text) <= limit:
        return text
    return text[: max(0, limit - len(suffix))] + suffix


def strip_mentions(text: str) -> str:
    """Remove ``<at>name</at>`` and ``<@id>`` mention markup."""
    return _MENTION_RE.sub("", text).strip()


def _field(source: Any, key: str) -> str:
    value = source.get(key) if isinstance(source, dict) else getattr(source, key, None)
    return value if isinstance(value, str) else ""


def source_title(source: Any) -> str:
    return _field(source, "title") or "Source"


def source_url(source: Any) -> str:
    return _field(source, "url") or "#"


def source_lines(sources: Sequence[Any]) -> list[str]:
    """One line per source for plain text: the url, else the title."""
    lines = []
    for source in list(sources)[:MAX_SOURCES]:
        line = _field(source, "url") or _field(source, "title")
        if line:
            lines.append(line)
    return lines


def render_plain_reply(mention: str, question: str, answer: str, sources: Sequence[Any] = ()) -> str:
    response = f"{mention}\n\n**{question}**\n\n{answer}"
    lines = source_lines(sources)
    if lines:
        response += "\n\n**Sources:**\n" + "\n".join(lines)
    return truncate(response, PLAIN_MAX_LENGTH, ELLIPSIS)


def render_fallback(mention: str, answer: str) -> str:
    """Bare-minimum reply used when the full one could not be sent."""
    return f"{mention} {answer[:FALLBACK_ANSWER_LENGTH]}".strip()
