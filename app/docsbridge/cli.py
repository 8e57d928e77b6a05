"""Interactive console -- ask DocsBot through the same pipeline as the bot."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

from botbuilder.schema import Attachment
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from . import __version__
from .answering.pipeline import AnswerPipeline, notice_for
from .config import settings
from .config.settings import ConfigError
from .messaging.cards import FOOTER_TEXT
from .messaging.commands import CommandDispatcher
from .messaging.formatting import render_plain_reply

console = Console()
logger = logging.getLogger(__name__)

CONSOLE_USER = "console"


class ConsoleResponder:
    async def reply(self, text: str) -> None:
        console.print(text)

    async def reply_card(self, attachment: Attachment, fallback_text: str) -> None:
        blocks = attachment.content.get("body", []) if isinstance(attachment.content, dict) else []
        lines = [b.get("text", "") for b in blocks if b.get("text") not in (None, "Answer", FOOTER_TEXT)]
        console.print(Panel(Markdown("\n\n".join(lines) or fallback_text), title="Answer", subtitle=FOOTER_TEXT))

    async def typing(self) -> None:
        console.print("[dim]thinking...[/dim]")


async def _main() -> None:
    cfg = settings.cfg
    cfg.validate()
    console.print(
        f"[bold green]docsbridge[/bold green] v{__version__}\n"
        "Type a question, [bold]/ask <question>[/bold] for the card view, "
        "[bold]/new[/bold] for a new topic, [bold]/quit[/bold] to exit.\n"
    )

    pipeline = AnswerPipeline.from_settings(cfg)
    commands = CommandDispatcher(pipeline)
    responder = ConsoleResponder()
    history_path = Path.home() / ".docsbridge_history"
    prompt_session: PromptSession[str] = PromptSession(history=FileHistory(str(history_path)))

    try:
        while True:
            try:
                user_input = await asyncio.to_thread(prompt_session.prompt, HTML("<b>you &gt;</b> "))
            except (EOFError, KeyboardInterrupt):
                break

            text = user_input.strip()
            if not text:
                continue
            if text.lower() in ("/quit", "/exit"):
                break
            if await commands.try_handle(text, CONSOLE_USER, responder):
                continue

            await responder.typing()
            result = await pipeline.answer(text, CONSOLE_USER)
            if not result.accepted:
                console.print(f"[yellow]{notice_for(result)}[/yellow] [dim]({result.reason})[/dim]")
                continue
            console.print(Markdown(render_plain_reply("", text, result.answer, result.sources).strip()))
            console.print()
    finally:
        await pipeline.close()
        console.print("[dim]Goodbye.[/dim]")


def main() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
    )
    try:
        asyncio.run(_main())
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
