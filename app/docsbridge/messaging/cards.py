"""Adaptive Card rendering for ``/ask`` replies."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from botbuilder.schema import Attachment

from .formatting import MAX_SOURCES, source_title, source_url, truncate

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"
CARD_ANSWER_MAX_LENGTH = 4000
CARD_SOURCES_MAX_LENGTH = 1024
FOOTER_TEXT = "Powered by DocsBot.ai"


def _adaptive_card_attachment(card_json: dict) -> Attachment:
    card_json.setdefault("type", "AdaptiveCard")
    card_json.setdefault("version", "1.5")
    card_json.setdefault("$schema", "http://adaptivecards.io/schemas/adaptive-card.json")
    return Attachment(content_type=ADAPTIVE_CARD_CONTENT_TYPE, content=card_json)


def sources_markdown(sources: Sequence[Any]) -> str:
    """Markdown link list of the first sources, capped for a card field."""
    lines = [
        f"- [{source_title(s)}]({source_url(s)})"
        for s in list(sources)[:MAX_SOURCES]
    ]
    return truncate("\n".join(lines), CARD_SOURCES_MAX_LENGTH)


def answer_card(answer: str, sources: Sequence[Any] = ()) -> Attachment:
    body: list[dict[str, Any]] = [
        {"type": "TextBlock", "text": "Answer", "weight": "Bolder", "size": "Medium", "color": "Accent"},
        {"type": "TextBlock", "text": truncate(answer, CARD_ANSWER_MAX_LENGTH), "wrap": True},
    ]
    if sources:
        body.append({"type": "TextBlock", "text": "Sources", "weight": "Bolder", "spacing": "Medium"})
        body.append({"type": "TextBlock", "text": sources_markdown(sources), "wrap": True})
    body.append({"type": "TextBlock", "text": FOOTER_TEXT, "isSubtle": True, "size": "Small", "spacing": "Medium"})
    return _adaptive_card_attachment({"body": body})
