"""Tests for the webhook app factory and entry point."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest
from aiohttp.test_utils import TestClient, TestServer

from app.docsbridge import __version__
from app.docsbridge.config import settings
from app.docsbridge.server.app import PIPELINE_KEY, QuietAccessLogger, create_app, main
from app.docsbridge.util.singletons import reset_all_singletons


class TestCreateApp:
    @pytest.mark.asyncio
    async def test_health(self, mock_pipeline: MagicMock) -> None:
        async with TestClient(TestServer(create_app(pipeline=mock_pipeline))) as client:
            resp = await client.get("/health")
            assert resp.status == 200
            assert await resp.json() == {"status": "ok", "version": __version__}

    @pytest.mark.asyncio
    async def test_messages_unconfigured_without_credentials(self, mock_pipeline: MagicMock) -> None:
        async with TestClient(TestServer(create_app(pipeline=mock_pipeline))) as client:
            resp = await client.post("/api/messages", json={"type": "message"})
            assert resp.status == 503

    @pytest.mark.asyncio
    async def test_probe_reports_credentials(self, monkeypatch: pytest.MonkeyPatch, mock_pipeline: MagicMock) -> None:
        monkeypatch.setenv("BOT_APP_ID", "app-id")
        monkeypatch.setenv("BOT_APP_PASSWORD", "secret")
        settings.cfg.reload()
        async with TestClient(TestServer(create_app(pipeline=mock_pipeline))) as client:
            data = await (await client.get("/api/messages")).json()
            assert data["bot_configured"] is True

    @pytest.mark.asyncio
    async def test_pipeline_closed_on_cleanup(self, mock_pipeline: MagicMock) -> None:
        app = create_app(pipeline=mock_pipeline)
        assert app[PIPELINE_KEY] is mock_pipeline
        async with TestClient(TestServer(app)):
            pass
        mock_pipeline.close.assert_awaited_once()


class TestQuietAccessLogger:
    @pytest.mark.parametrize(("path", "level"), [("/health", logging.DEBUG), ("/api/messages", logging.INFO)])
    def test_levels(self, path: str, level: int) -> None:
        log = MagicMock()
        access = QuietAccessLogger(log, "")
        access.log(MagicMock(path=path, remote="1.2.3.4", method="GET"), MagicMock(status=200), 0.01)
        assert log.log.call_args[0][0] == level


class TestMain:
    def test_missing_config_exits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DOCSBOT_API_KEY")
        settings.cfg.reload()
        with patch("app.docsbridge.server.app.web.run_app") as run_app, pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        run_app.assert_not_called()

    def test_runs_on_configured_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BOT_PORT", "4100")
        settings.cfg.reload()
        with patch("app.docsbridge.server.app.web.run_app") as run_app:
            main()
        assert run_app.call_args.kwargs["port"] == 4100

    def test_malformed_number_exits_cleanly(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIN_SOURCES", "abc")
        reset_all_singletons()
        with patch("app.docsbridge.server.app.web.run_app") as run_app, pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        run_app.assert_not_called()
