"""Bot Framework ActivityHandler -- routes chat messages to DocsBot.

Three ways in:

* ``/ask``, ``/new``, ``/help`` and "new topic" go to the command dispatcher;
* a direct message or a mention is answered outright;
* any other message in an allow-listed conversation is "ambient" and only
  answered if it looks like a question.  Ambient misses stay silent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from botbuilder.core import ActivityHandler, TurnContext
from botbuilder.schema import Activity, ActivityTypes, Attachment, ChannelAccount, Mention

from ..answering.classifier import is_likely_question
from ..answering.gate import AnswerResult
from ..answering.pipeline import AnswerPipeline, notice_for
from ..config.settings import DEFAULT_AMBIENT_KEYWORDS
from .commands import CommandDispatcher
from .formatting import render_fallback, render_plain_reply, strip_mentions

logger = logging.getLogger(__name__)


class TurnResponder:
    """Adapts a :class:`TurnContext` to the command ``Responder`` protocol.

    With a *user*, replies that contain that user's ``<at>`` markup carry
    the matching :class:`Mention` entity.
    """

    def __init__(self, turn_context: TurnContext, user: ChannelAccount | None = None) -> None:
        self._ctx = turn_context
        self._mention = _mention(user) if user is not None else None

    @property
    def mention_text(self) -> str:
        return self._mention[0] if self._mention else ""

    async def reply(self, text: str) -> None:
        entities = None
        if self._mention and self._mention[0] in text:
            entities = [self._mention[1]]
        await _reply(self._ctx, text, entities)

    async def reply_card(self, attachment: Attachment, fallback_text: str) -> None:
        await self._ctx.send_activity(
            Activity(type=ActivityTypes.message, attachments=[attachment], summary=fallback_text)
        )

    async def typing(self) -> None:
        try:
            await self._ctx.send_activity(Activity(type=ActivityTypes.typing))
        except Exception as exc:
            logger.debug("[bot] Typing indicator failed: %s", exc)


class Bot(ActivityHandler):
    def __init__(
        self,
        pipeline: AnswerPipeline,
        allowed_channel_ids: Iterable[str] = (),
        keywords: Iterable[str] = DEFAULT_AMBIENT_KEYWORDS,
    ) -> None:
        self._pipeline = pipeline
        self._commands = CommandDispatcher(pipeline)
        self._ambient_channels = frozenset(allowed_channel_ids)
        self._keywords = tuple(keywords)
        logger.info("[bot] Auto-answer channels: %s", sorted(self._ambient_channels) or "(none)")

    async def on_message_activity(self, turn_context: TurnContext) -> None:
        try:
            await self._handle_message(turn_context)
        except Exception:
            logger.exception("[bot] Unexpected error handling message")

    async def _handle_message(self, turn_context: TurnContext) -> None:
        activity = turn_context.activity
        if _is_from_bot(activity):
            return

        user = activity.from_property or ChannelAccount(id="unknown")
        mentioned = _mentions_recipient(activity)
        text = strip_mentions(activity.text or "") if mentioned else (activity.text or "").strip()
        if not text:
            return

        responder = TurnResponder(turn_context, user)
        if await self._commands.try_handle(text, user.id, responder, responder.mention_text):
            return

        direct = mentioned or _is_personal(activity)
        if not direct:
            conversation_id = activity.conversation.id if activity.conversation else ""
            if conversation_id not in self._ambient_channels:
                return
            if not is_likely_question(text, self._keywords):
                return
            logger.info("[ambient] Detected question in %s: %.80s", conversation_id, text)
        else:
            logger.info("[bot] %s asked: %.80s", user.id, text)

        await responder.typing()
        result = await self._pipeline.answer(text, user.id)
        if not result.accepted:
            if direct:
                await _reply(turn_context, notice_for(result))
            return

        await self._deliver(turn_context, user, text, result)

    async def _deliver(
        self,
        turn_context: TurnContext,
        user: ChannelAccount,
        question: str,
        result: AnswerResult,
    ) -> None:
        mention_text, mention = _mention(user)
        try:
            body = render_plain_reply(mention_text, question, result.answer, result.sources)
            sent = await turn_context.send_activity(
                Activity(type=ActivityTypes.message, text=body, entities=[mention])
            )
            logger.info("[bot] Answer sent (id=%s)", getattr(sent, "id", None))
        except Exception:
            logger.exception("[bot] Error sending answer")
            try:
                await turn_context.send_activity(
                    Activity(
                        type=ActivityTypes.message,
                        text=render_fallback(mention_text, result.answer),
                        entities=[mention],
                    )
                )
            except Exception:
                logger.exception("[bot] Failed to send any message")

    async def on_members_added_activity(
        self,
        members_added: list[ChannelAccount],
        turn_context: TurnContext,
    ) -> None:
        for member in members_added:
            if member.id != turn_context.activity.recipient.id:
                await turn_context.send_activity(
                    "Hi! Ask me about the docs with /ask <question>, or mention me."
                )


async def _reply(ctx: TurnContext, text: str, entities: list[Mention] | None = None) -> None:
    await ctx.send_activity(
        Activity(type=ActivityTypes.message, text=text, text_format="plain", entities=entities)
    )


def _mention(user: ChannelAccount) -> tuple[str, Mention]:
    text = f"<at>{user.name or user.id}</at>"
    return text, Mention(mentioned=user, text=text, type="mention")


def _is_from_bot(activity: Activity) -> bool:
    sender = activity.from_property
    if sender is None:
        return False
    if (sender.role or "").lower() == "bot":
        return True
    return bool(activity.recipient and sender.id == activity.recipient.id)


def _is_personal(activity: Activity) -> bool:
    conversation = activity.conversation
    if conversation is None:
        return True
    return not conversation.is_group


def _mentioned_id(entity: Any) -> str | None:
    mentioned = getattr(entity, "mentioned", None)
    if mentioned is None:
        mentioned = (getattr(entity, "additional_properties", None) or {}).get("mentioned")
    if isinstance(mentioned, dict):
        return mentioned.get("id")
    return getattr(mentioned, "id", None)


def _mentions_recipient(activity: Activity) -> bool:
    if not activity.recipient:
        return False
    for entity in activity.entities or []:
        if (getattr(entity, "type", "") or "").lower() != "mention":
            continue
        if _mentioned_id(entity) == activity.recipient.id:
            return True
    return False
