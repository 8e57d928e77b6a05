"""Shared pytest fixtures for app.docsbridge tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.docsbridge.answering.gate import AnswerResult

_MANAGED_ENV = (
    "BOT_APP_ID",
    "BOT_APP_PASSWORD",
    "BOT_APP_TENANT_ID",
    "BOT_PORT",
    "DOCSBOT_API_BASE",
    "DOCSBOT_TIMEOUT",
    "ALLOWED_CHANNEL_IDS",
    "AMBIENT_KEYWORDS",
    "STRICT_MODE",
    "MIN_SOURCES",
    "MIN_ANSWER_LENGTH",
    "MIN_CONFIDENCE",
    "CONVERSATION_CACHE_SIZE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    dotenv = tmp_path / ".env"
    monkeypatch.setenv("DOTENV_PATH", str(dotenv))
    for key in _MANAGED_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("DOCSBOT_TEAM_ID", "team-1")
    monkeypatch.setenv("DOCSBOT_BOT_ID", "bot-1")
    monkeypatch.setenv("DOCSBOT_API_KEY", "key-123")
    return dotenv


@pytest.fixture(autouse=True)
def _reset_singletons(_isolate_env: Path):
    from app.docsbridge.util.singletons import reset_all_singletons

    reset_all_singletons()
    yield
    reset_all_singletons()


@pytest.fixture()
def dotenv(_isolate_env: Path) -> Path:
    return _isolate_env


@pytest.fixture()
def mock_pipeline() -> MagicMock:
    pipeline = MagicMock()
    pipeline.answer = AsyncMock(return_value=AnswerResult(
        accepted=True,
        answer="Vaults hold staked tokens and stream rewards to depositors every epoch.",
        sources=[{"title": "Vaults", "url": "https://docs.example.com/vaults"}],
    ))
    pipeline.reset = MagicMock(return_value=True)
    pipeline.close = AsyncMock()
    return pipeline
