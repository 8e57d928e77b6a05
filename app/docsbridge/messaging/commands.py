"""Slash-command dispatcher.

Shared by the Bot Framework handler and the terminal console so both
front-ends answer ``/ask`` and reset conversations the same way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from botbuilder.schema import Attachment

from ..answering.pipeline import API_FAILURE, AnswerPipeline, notice_for
from .cards import answer_card
from .formatting import FALLBACK_ANSWER_LENGTH, render_fallback

logger = logging.getLogger(__name__)

ASK_MAX_LENGTH = 500

HELP_TEXT = (
    "Commands\n"
    "  /ask <question>  Ask the docs bot a question\n"
    "  /new             Start a new conversation (or say \"new topic\")\n"
    "  /help            Show this message\n"
    "\nYou can also mention me with your question."
)


class Responder(Protocol):
    async def reply(self, text: str) -> None: ...

    async def reply_card(self, attachment: Attachment, fallback_text: str) -> None: ...

    async def typing(self) -> None: ...


@dataclass
class CommandContext:
    text: str
    user_id: str
    responder: Responder
    mention: str = ""

    @property
    def args(self) -> str:
        parts = self.text.split(maxsplit=1)
        return parts[1].strip() if len(parts) > 1 else ""


class CommandDispatcher:
    _EXACT_COMMANDS: dict[str, str] = {
        "/new": "_cmd_new",
        "new topic": "_cmd_new",
        "/help": "_cmd_help",
        "/ask": "_cmd_ask",
    }

    _PREFIX_COMMANDS: tuple[tuple[str, str], ...] = (
        ("/ask", "_cmd_ask"),
    )

    def __init__(self, pipeline: AnswerPipeline) -> None:
        self._pipeline = pipeline

    async def try_handle(self, text: str, user_id: str, responder: Responder, mention: str = "") -> bool:
        """Run *text* as a command.  *mention* addresses the fallback reply."""
        stripped = text.strip()
        lower = stripped.lower()
        ctx = CommandContext(text=stripped, user_id=user_id, responder=responder, mention=mention)

        handler_name = self._EXACT_COMMANDS.get(lower)
        if handler_name:
            await getattr(self, handler_name)(ctx)
            return True

        for prefix, handler_name in self._PREFIX_COMMANDS:
            if lower.startswith(prefix + " "):
                await getattr(self, handler_name)(ctx)
                return True

        return False

    async def _cmd_new(self, ctx: CommandContext) -> None:
        self._pipeline.reset(ctx.user_id)
        await ctx.responder.reply("Started a new conversation. Ask away!")

    async def _cmd_help(self, ctx: CommandContext) -> None:
        await ctx.responder.reply(HELP_TEXT)

    async def _cmd_ask(self, ctx: CommandContext) -> None:
        question = ctx.args
        if not question:
            await ctx.responder.reply("Usage: /ask <question>")
            return
        if len(question) > ASK_MAX_LENGTH:
            await ctx.responder.reply(
                f"Questions are limited to {ASK_MAX_LENGTH} characters (yours has {len(question)})."
            )
            return

        try:
            await ctx.responder.typing()
            result = await self._pipeline.answer(question, ctx.user_id)
        except Exception:
            logger.exception("[ask] Error answering question for %s", ctx.user_id)
            await _safe_reply(ctx.responder, API_FAILURE)
            return

        if not result.accepted:
            await _safe_reply(ctx.responder, notice_for(result))
            return

        try:
            await ctx.responder.reply_card(
                answer_card(result.answer, result.sources),
                result.answer[:FALLBACK_ANSWER_LENGTH],
            )
        except Exception:
            logger.exception("[ask] Error sending answer card")
            await _safe_reply(ctx.responder, render_fallback(ctx.mention, result.answer))


async def _safe_reply(responder: Responder, text: str) -> None:
    try:
        await responder.reply(text)
    except Exception:
        logger.exception("[ask] Failed to send any message")
