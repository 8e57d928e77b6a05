"""Heuristics for ambient channel messages: is this worth answering?"""

from __future__ import annotations

import re
from collections.abc import Iterable

from ..config.settings import DEFAULT_AMBIENT_KEYWORDS

MIN_LENGTH = 5
COMMAND_PREFIXES: tuple[str, ...] = ("!", "/", ".")
FILLER_WORDS: tuple[str, ...] = ("gm", "gn", "thanks", "thank you", "ty", "ok", "nice", "lol")
INTERROGATIVES: tuple[str, ...] = ("what", "how", "why", "when", "where", "who", "can", "does", "is")

_FILLER_RE = re.compile(
    r"^(?:" + "|".join(re.escape(w) for w in FILLER_WORDS) + r")\b",
    re.IGNORECASE,
)


def is_likely_question(text: str, keywords: Iterable[str] = DEFAULT_AMBIENT_KEYWORDS) -> bool:
    """Return ``True`` when an un-addressed channel message looks like a question.

    Short messages, command-prefixed text and chit-chat ("gm", "thanks ...")
    are ignored.  Anything else needs a question mark, a leading
    interrogative, or one of the domain *keywords*.
    """
    text = (text or "").strip().lower()
    if len(text) < MIN_LENGTH:
        return False
    if text.startswith(COMMAND_PREFIXES):
        return False
    if _FILLER_RE.match(text):
        return False

    if "?" in text or any(text.startswith(w + " ") for w in INTERROGATIVES):
        return True
    return any(k.lower() in text for k in keywords)
