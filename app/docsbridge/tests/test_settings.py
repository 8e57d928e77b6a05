"""Tests for Settings and GateConfig."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.docsbridge.config.settings import (
    DEFAULT_AMBIENT_KEYWORDS,
    ConfigError,
    GateConfig,
    Settings,
)


class TestDefaults:
    def test_gate_defaults(self) -> None:
        gate = Settings().gate_config()
        assert gate == GateConfig(strict_mode=True, min_sources=1, min_answer_length=20, min_confidence=0.35)

    def test_docsbot_defaults(self) -> None:
        s = Settings()
        assert s.docsbot_timeout == 20.0
        assert s.chat_agent_url == "https://api.docsbot.ai/teams/team-1/bots/bot-1/chat-agent"
        assert s.bot_port == 3978
        assert s.allowed_channel_ids == frozenset()
        assert s.ambient_keywords == DEFAULT_AMBIENT_KEYWORDS

    def test_gate_config_is_frozen(self) -> None:
        gate = Settings().gate_config()
        with pytest.raises(AttributeError):
            gate.strict_mode = False  # type: ignore[misc]


class TestEnvironment:
    def test_gate_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRICT_MODE", "false")
        monkeypatch.setenv("MIN_SOURCES", "0")
        monkeypatch.setenv("MIN_ANSWER_LENGTH", "50")
        monkeypatch.setenv("MIN_CONFIDENCE", "0.6")
        gate = Settings().gate_config()
        assert gate == GateConfig(strict_mode=False, min_sources=0, min_answer_length=50, min_confidence=0.6)

    def test_min_confidence_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIN_CONFIDENCE", "7")
        assert Settings().min_confidence == 1.0

    def test_allowed_channels_csv(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ALLOWED_CHANNEL_IDS", " 123, 456 ,,789 ")
        assert Settings().allowed_channel_ids == frozenset({"123", "456", "789"})

    def test_keywords_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AMBIENT_KEYWORDS", "Bridge,FEES")
        assert Settings().ambient_keywords == ("bridge", "fees")

    def test_api_base_trailing_slash(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCSBOT_API_BASE", "http://localhost:9000/")
        assert Settings().chat_agent_url == "http://localhost:9000/teams/team-1/bots/bot-1/chat-agent"

    def test_bad_integer_is_reported_by_validate(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIN_SOURCES", "many")
        s = Settings()
        assert s.min_sources == 1
        with pytest.raises(ConfigError, match="MIN_SOURCES must be an integer"):
            s.validate()

    def test_bad_number_reported_with_missing_keys(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIN_CONFIDENCE", "high")
        monkeypatch.delenv("DOCSBOT_API_KEY")
        with pytest.raises(ConfigError) as excinfo:
            Settings().validate()
        assert "DOCSBOT_API_KEY" in str(excinfo.value)
        assert "MIN_CONFIDENCE must be a number" in str(excinfo.value)

    def test_reload_clears_problems(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BOT_PORT", "eighty")
        s = Settings()
        monkeypatch.setenv("BOT_PORT", "8080")
        s.reload()
        s.validate()
        assert s.bot_port == 8080

    def test_dotenv_takes_precedence(self, dotenv: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        dotenv.write_text("DOCSBOT_BOT_ID=from-file\n")
        monkeypatch.setenv("DOCSBOT_BOT_ID", "from-env")
        assert Settings().docsbot_bot_id == "from-file"


class TestValidate:
    def test_valid(self) -> None:
        Settings().validate()

    def test_missing_required(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DOCSBOT_API_KEY")
        monkeypatch.delenv("DOCSBOT_TEAM_ID")
        with pytest.raises(ConfigError) as excinfo:
            Settings().validate()
        assert "DOCSBOT_API_KEY" in str(excinfo.value)
        assert "DOCSBOT_TEAM_ID" in str(excinfo.value)
        assert "DOCSBOT_BOT_ID" not in str(excinfo.value)


class TestSummary:
    def test_secrets_masked(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BOT_APP_ID", "abcdefgh-1234-5678")
        monkeypatch.setenv("BOT_APP_PASSWORD", "hunter2")
        summary = Settings().summary()
        assert summary["DOCSBOT_API_KEY"] == "present"
        assert summary["BOT_APP_PASSWORD"] == "present"
        assert summary["BOT_APP_ID"] == "abcdefgh..."
        assert "key-123" not in str(summary)
        assert "hunter2" not in str(summary)
