"""External service integrations."""

from .docsbot import AnswerEvent, DocsBotClient, RawAnswer, Source

__all__ = ["AnswerEvent", "DocsBotClient", "RawAnswer", "Source"]
