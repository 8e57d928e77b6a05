"""DocsBot chat-agent client -- one POST per question, never raises."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import BaseModel, ConfigDict

from ..util.result import Result

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0
CONTEXT_ITEMS = 5

# Event kinds in priority order; anything else falls back to the first event.
EVENT_PRIORITY: tuple[str, ...] = ("lookup_answer", "answer")


class Source(BaseModel):
    """A citation attached to an answer.  Score fields ride along as extras.

    Any non-null object is a source, whatever types its fields carry.
    """

    model_config = ConfigDict(extra="allow")

    title: Any = None
    url: Any = None


class AnswerEvent(BaseModel):
    """One record of the chat-agent event array.  Nothing in it is required."""

    model_config = ConfigDict(extra="allow")

    event: Any = None
    data: Any = None

    @property
    def kind(self) -> str:
        return self.event if isinstance(self.event, str) else ""

    @property
    def payload(self) -> dict[str, Any]:
        return self.data if isinstance(self.data, dict) else {}


@dataclass
class RawAnswer:
    answer: str = ""
    sources: list[Source] = field(default_factory=list)
    event: AnswerEvent | None = None


def select_event(events: list[AnswerEvent]) -> AnswerEvent | None:
    """Pick ``lookup_answer``, else ``answer``, else the first event."""
    for kind in EVENT_PRIORITY:
        for ev in events:
            if ev.event == kind:
                return ev
    return events[0] if events else None


def _parse_sources(raw: Any) -> list[Source]:
    if not isinstance(raw, list):
        return []
    return [Source.model_validate(item) for item in raw if isinstance(item, dict)]


def parse_events(body: str) -> list[AnswerEvent]:
    """Decode the chat-agent response body into events.

    Raises ``ValueError`` when the body is not a JSON array.
    """
    data = json.loads(body)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    return [AnswerEvent.model_validate(item) for item in data if isinstance(item, dict)]


def to_raw_answer(event: AnswerEvent) -> RawAnswer:
    payload = event.payload
    answer = payload.get("answer")
    return RawAnswer(
        answer=answer.strip() if isinstance(answer, str) else "",
        sources=_parse_sources(payload.get("sources")),
        event=event,
    )


class DocsBotClient:
    """Async client for ``POST /teams/{team}/bots/{bot}/chat-agent``.

    :meth:`ask` returns a :class:`Result`:

    * ``Result.ok(value=RawAnswer)`` when an event was selected,
    * ``Result.empty(...)`` when DocsBot had nothing to say (``null`` body,
      empty array),
    * ``Result.fail(reason)`` on HTTP errors, timeouts and malformed bodies.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.url = url
        self._api_key = api_key
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_settings(cls, settings: Any) -> DocsBotClient:
        return cls(
            settings.chat_agent_url,
            settings.docsbot_api_key,
            timeout=settings.docsbot_timeout,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @staticmethod
    def build_payload(question: str, conversation_id: str) -> dict[str, Any]:
        return {
            "conversationId": conversation_id,
            "question": question,
            "stream": False,
            "context_items": CONTEXT_ITEMS,
            "document_retriever": True,
            "followup_rating": False,
            "human_escalation": False,
        }

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def ask(self, question: str, conversation_id: str) -> Result:
        logger.info("[docsbot] Asking (conversation=%s): %.80s", conversation_id, question)
        try:
            session = self._get_session()
            async with session.post(
                self.url,
                json=self.build_payload(question, conversation_id),
                headers=self._headers(),
                timeout=self._timeout,
            ) as resp:
                body = await resp.text()
                logger.info("[docsbot] Response status: %d", resp.status)
                if resp.status >= 400:
                    logger.error("[docsbot] API error %d: %s", resp.status, body[:500])
                    return Result.fail(f"DocsBot HTTP {resp.status}")
        except asyncio.TimeoutError:
            logger.warning("[docsbot] Request timed out after %.0fs", self._timeout.total)
            return Result.fail("timeout")
        except aiohttp.ClientError as exc:
            logger.error("[docsbot] Request failed: %s", exc)
            return Result.fail(f"network error: {exc}")
        except Exception as exc:
            logger.exception("[docsbot] Unexpected error calling API: %s", exc)
            return Result.fail(f"unexpected error: {exc}")

        if not body.strip() or body.strip() == "null":
            logger.warning("[docsbot] Received null response")
            return Result.empty("no answer available")

        try:
            events = parse_events(body)
        except ValueError as exc:
            logger.error("[docsbot] Malformed response: %s | raw=%s", exc, body[:500])
            return Result.fail("malformed response")

        chosen = select_event(events)
        if chosen is None:
            logger.warning("[docsbot] Response contained no events")
            return Result.empty("no events")

        raw = to_raw_answer(chosen)
        logger.info(
            "[docsbot] Selected %r event (answer=%d chars, sources=%d)",
            chosen.event, len(raw.answer), len(raw.sources),
        )
        return Result.ok(chosen.kind, value=raw)
