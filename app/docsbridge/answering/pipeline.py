"""Question -> DocsBot -> gate, shared by every front-end."""

from __future__ import annotations

import logging
from typing import Any

from ..config import settings
from ..services.docsbot import DocsBotClient
from ..state.conversations import ConversationTracker, get_conversation_tracker
from .gate import AnswerResult, ConfidenceGate

logger = logging.getLogger(__name__)

REASON_UNAVAILABLE = "unavailable"
REASON_API_FAILURE = "api_failure"

NO_CONFIDENT_ANSWER = (
    "I couldn't find a confident answer to that in the docs. "
    "Try rephrasing, or ask a more specific question."
)
NOT_READY = "The docs bot is still initializing. Please try again in a moment."
API_FAILURE = "I had trouble getting an answer. Please try again."


def notice_for(result: AnswerResult) -> str:
    """User-facing wording for a result that will not be shown."""
    if result.reason == REASON_UNAVAILABLE:
        return NOT_READY
    if result.reason == REASON_API_FAILURE:
        return API_FAILURE
    return NO_CONFIDENT_ANSWER


class AnswerPipeline:
    def __init__(
        self,
        client: DocsBotClient,
        gate: ConfidenceGate,
        tracker: ConversationTracker | None = None,
    ) -> None:
        self.client = client
        self.gate = gate
        self.tracker = tracker or get_conversation_tracker()

    @classmethod
    def from_settings(cls, s: Any = None) -> AnswerPipeline:
        s = s or settings.cfg
        return cls(DocsBotClient.from_settings(s), ConfidenceGate(s.gate_config()))

    async def answer(self, question: str, user_id: str) -> AnswerResult:
        conversation_id = self.tracker.get_or_create_id(user_id)
        outcome = await self.client.ask(question, conversation_id)
        if not outcome:
            logger.warning("[pipeline] No answer for user %s: %s", user_id, outcome.message)
            return AnswerResult(accepted=False, reason=REASON_API_FAILURE)
        if not outcome.has_value:
            return AnswerResult(accepted=False, reason=REASON_UNAVAILABLE)

        raw = outcome.value
        return self.gate.evaluate(raw.answer, raw.sources, raw.event)

    def reset(self, user_id: str) -> bool:
        return self.tracker.reset(user_id)

    async def close(self) -> None:
        await self.client.close()
