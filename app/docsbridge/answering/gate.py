"""Confidence gate -- decides whether a DocsBot answer is good enough to show.

DocsBot does not reliably say "I don't know", so strict mode combines
several weak signals and rejects when any one of them fires:

1. the answer is empty or shorter than ``min_answer_length``;
2. the answer reads like a fallback or hedge (:class:`FallbackPhrasePolicy`);
3. fewer than ``min_sources`` usable sources came back;
4. a confidence score is present and, once normalized, below
   ``min_confidence``.

With strict mode off every non-empty answer passes.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from ..config.settings import GateConfig

logger = logging.getLogger(__name__)

# Keys checked on the event payload, in order.
EVENT_CONFIDENCE_KEYS: tuple[str, ...] = (
    "confidence",
    "confidence_score",
    "confidenceScore",
    "score",
    "relevance",
    "relevance_score",
    "similarity",
    "certainty",
)

# Keys checked on each source when the payload carries none.
SOURCE_SCORE_KEYS: tuple[str, ...] = (
    "score",
    "confidence",
    "relevance",
    "relevance_score",
    "similarity",
)

REJECT_EMPTY = "empty"
REJECT_TOO_SHORT = "too_short"
REJECT_FALLBACK_PHRASE = "fallback_phrase"
REJECT_TOO_FEW_SOURCES = "too_few_sources"
REJECT_LOW_CONFIDENCE = "low_confidence"

_NOT = r"(?:n['’]?t|\s+not)"

DEFAULT_FALLBACK_PATTERNS: tuple[str, ...] = (
    rf"\bi\s+do{_NOT}\s+know\b",
    r"\bnot\s+sure\b",
    r"\bplease\s+clarify\b",
    rf"\bcould{_NOT}\s+find\b",
    r"\bno\s+information\b",
    r"\bunsure\b",
    r"\bas\s+an\s+ai\b",
    rf"\bi\s+do{_NOT}\s+have\s+enough\s+context\b",
    r"\bca(?:n['’]?t|nnot|n\s+not)\s+help\s+with\s+that\b",
    r"\btry\s+again\b",
    r"\brephrase\b",
)


class FallbackPhrasePolicy:
    """Case-insensitive regex list for "the bot doesn't really know" answers."""

    def __init__(self, patterns: Iterable[str] = DEFAULT_FALLBACK_PATTERNS) -> None:
        self._patterns = [re.compile(p, re.IGNORECASE) for p in patterns]

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self._patterns)


@dataclass
class AnswerResult:
    accepted: bool
    answer: str = ""
    sources: list[Any] = field(default_factory=list)
    reason: str = ""
    confidence: float | None = None


def _get(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    if isinstance(obj, BaseModel):
        return getattr(obj, key, None)
    return None


def _as_finite(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _payload(raw_event: Any) -> Any:
    if raw_event is None:
        return None
    if isinstance(raw_event, dict):
        data = raw_event.get("data")
        return data if isinstance(data, dict) else raw_event
    return getattr(raw_event, "payload", None)


def normalize_confidence(raw_event: Any, sources: Sequence[Any] = ()) -> float | None:
    """Return the first confidence-like value found, scaled to 0-1.

    The event payload is searched first (:data:`EVENT_CONFIDENCE_KEYS`),
    then every source (:data:`SOURCE_SCORE_KEYS`).  Values above 1 are read
    as percentages.  ``None`` means no score was present.
    """
    payload = _payload(raw_event)
    candidates = [_get(payload, key) for key in EVENT_CONFIDENCE_KEYS]
    for source in sources:
        candidates.extend(_get(source, key) for key in SOURCE_SCORE_KEYS)

    for candidate in candidates:
        value = _as_finite(candidate)
        if value is not None:
            return value / 100.0 if value > 1 else value
    return None


class ConfidenceGate:
    def __init__(self, config: GateConfig, phrases: FallbackPhrasePolicy | None = None) -> None:
        self.config = config
        self.phrases = phrases or FallbackPhrasePolicy()

    def evaluate(self, answer: str, sources: Sequence[Any], raw_event: Any = None) -> AnswerResult:
        text = (answer or "").strip()
        usable = [s for s in (sources or []) if s is not None]
        confidence = normalize_confidence(raw_event, usable)

        def _result(reason: str = "") -> AnswerResult:
            if reason:
                logger.info(
                    "[gate] Rejected (%s): len=%d sources=%d confidence=%s",
                    reason, len(text), len(usable), confidence,
                )
            return AnswerResult(
                accepted=not reason, answer=text, sources=usable,
                reason=reason, confidence=confidence,
            )

        if not text:
            return _result(REJECT_EMPTY)
        if not self.config.strict_mode:
            return _result()

        if len(text) < self.config.min_answer_length:
            return _result(REJECT_TOO_SHORT)
        if self.phrases.matches(text):
            return _result(REJECT_FALLBACK_PHRASE)
        if len(usable) < self.config.min_sources:
            return _result(REJECT_TOO_FEW_SOURCES)
        if confidence is not None and confidence < self.config.min_confidence:
            return _result(REJECT_LOW_CONFIDENCE)
        return _result()

    def accept(self, answer: str, sources: Sequence[Any], raw_event: Any = None) -> bool:
        return self.evaluate(answer, sources, raw_event).accepted
