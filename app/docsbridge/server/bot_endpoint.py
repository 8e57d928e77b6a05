"""Bot Framework endpoint -- POST /api/messages."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from aiohttp import web
from botbuilder.schema import Activity

if TYPE_CHECKING:
    from botbuilder.core import BotFrameworkAdapter

    from ..messaging.bot import Bot

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/api/messages"


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"status": "error", "message": message}, status=status)


class BotEndpoint:
    """Hands incoming activities to the adapter and the :class:`Bot`."""

    def __init__(self, adapter: BotFrameworkAdapter, bot: Bot, *, credentials_configured: bool = True) -> None:
        self.adapter = adapter
        self._bot = bot
        self._credentials_configured = credentials_configured

    def register(self, router: web.UrlDispatcher) -> None:
        router.add_post(MESSAGES_PATH, self.handle)
        router.add_get(MESSAGES_PATH, self._probe)

    async def _probe(self, _req: web.Request) -> web.Response:
        return web.json_response({
            "status": "ok",
            "endpoint": MESSAGES_PATH,
            "method": "POST required",
            "bot_configured": self._credentials_configured,
        })

    @staticmethod
    async def _read_activity_json(req: web.Request) -> dict[str, Any]:
        """Decode the request body; ``ValueError`` unless it is a JSON object."""
        body = json.loads(await req.read())
        if not isinstance(body, dict):
            raise ValueError("activity must be a JSON object")
        return body

    async def handle(self, req: web.Request) -> web.Response:
        if not self._credentials_configured:
            logger.warning("[bot] Rejected activity from %s: bot credentials not configured", req.remote)
            return _error(503, "Bot credentials not configured")

        try:
            body = await self._read_activity_json(req)
        except ValueError as exc:
            logger.error("[bot] Unusable request body: %s", exc)
            return _error(400, f"Invalid JSON: {exc}")

        summary = f"type={body.get('type', '?')} channel={body.get('channelId', '?')}"
        logger.debug("[bot] Activity: %s", summary)

        try:
            response = await self.adapter.process_activity(
                Activity().deserialize(body),
                req.headers.get("Authorization", ""),
                self._bot.on_turn,
            )
        except PermissionError as exc:
            logger.warning("[bot] Authentication failed (401): %s", exc)
            return web.Response(status=401, text=str(exc))
        except Exception as exc:
            logger.exception("[bot] Error processing activity (%s)", summary)
            return _error(500, f"Processing failed: {exc}")

        if not response:
            return web.Response(status=200)
        return web.Response(status=response.status, body=response.body, content_type="application/json")
