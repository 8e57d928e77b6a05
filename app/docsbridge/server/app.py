"""Webhook server -- app factory and entry point."""

from __future__ import annotations

import logging
import sys
from typing import Any

from aiohttp import web
from aiohttp.abc import AbstractAccessLogger
from botbuilder.core import BotFrameworkAdapter, BotFrameworkAdapterSettings, TurnContext
from botbuilder.schema import Activity, ActivityTypes

from .. import __version__
from ..answering.pipeline import AnswerPipeline
from ..config import settings
from ..config.settings import ConfigError
from ..messaging.bot import Bot
from .bot_endpoint import BotEndpoint

logger = logging.getLogger(__name__)

_QUIET_PATHS = frozenset({"/health"})

PIPELINE_KEY = web.AppKey("pipeline", AnswerPipeline)


class QuietAccessLogger(AbstractAccessLogger):
    """Demotes health-probe log entries to DEBUG."""

    def log(self, request: web.BaseRequest, response: web.StreamResponse, time: float) -> None:
        level = logging.DEBUG if request.path in _QUIET_PATHS else logging.INFO
        self.logger.log(
            level,
            "%s %s %s %s %.3fs",
            request.remote,
            request.method,
            request.path,
            response.status,
            time,
        )


def create_adapter(s: Any = None) -> BotFrameworkAdapter:
    s = s or settings.cfg
    adapter = BotFrameworkAdapter(
        BotFrameworkAdapterSettings(
            app_id=s.bot_app_id or None,
            app_password=s.bot_app_password or None,
            channel_auth_tenant=s.bot_app_tenant_id or None,
        )
    )

    async def on_error(context: TurnContext, error: Exception) -> None:
        logger.error("Bot turn error: %s", error, exc_info=True)
        try:
            await context.send_activity(
                Activity(type=ActivityTypes.message, text="An error occurred.", text_format="plain")
            )
        except Exception as exc:
            logger.debug("Could not report turn error to the user: %s", exc)

    adapter.on_turn_error = on_error
    return adapter


async def _health(_req: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__})


def create_app(s: Any = None, pipeline: AnswerPipeline | None = None) -> web.Application:
    s = s or settings.cfg
    pipeline = pipeline or AnswerPipeline.from_settings(s)
    bot = Bot(pipeline, s.allowed_channel_ids, s.ambient_keywords)
    endpoint = BotEndpoint(
        create_adapter(s),
        bot,
        credentials_configured=bool(s.bot_app_id and s.bot_app_password),
    )

    app = web.Application()
    app[PIPELINE_KEY] = pipeline
    endpoint.register(app.router)
    app.router.add_get("/health", _health)
    app.on_cleanup.append(_close_pipeline)
    return app


async def _close_pipeline(app: web.Application) -> None:
    await app[PIPELINE_KEY].close()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
    )


def main() -> None:
    try:
        cfg = settings.cfg
        configure_logging(cfg.log_level)
        cfg.validate()
    except ConfigError as exc:
        configure_logging()
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    logger.info("Starting docsbridge %s", __version__)
    logger.info("ENV check: %s", cfg.summary())
    logger.info("Gate: %s", cfg.gate_config())
    web.run_app(create_app(cfg), host="0.0.0.0", port=cfg.bot_port, access_log_class=QuietAccessLogger)


if __name__ == "__main__":
    main()
