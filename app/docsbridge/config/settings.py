"""Application settings -- reads from the ``.env`` file and the environment.

All configuration is consolidated here.  The gate thresholds are frozen into
a :class:`GateConfig` once at startup; everything else stays on the
:class:`Settings` singleton.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import ClassVar

from ..util.env_file import EnvFile
from ..util.singletons import register_singleton

logger = logging.getLogger(__name__)

REQUIRED_ENV_KEYS: tuple[str, ...] = (
    "DOCSBOT_TEAM_ID",
    "DOCSBOT_BOT_ID",
    "DOCSBOT_API_KEY",
)

DEFAULT_AMBIENT_KEYWORDS: tuple[str, ...] = ("iaero", "aero", "stake", "vault", "token", "reward")

_TRUTHY = ("1", "true", "yes", "on")


class ConfigError(RuntimeError):
    """Raised when a required setting is missing or malformed."""


@dataclass(frozen=True)
class GateConfig:
    strict_mode: bool = True
    min_sources: int = 1
    min_answer_length: int = 20
    min_confidence: float = 0.35


class Settings:
    """Runtime configuration sourced from ``.env`` and environment variables."""

    _DOTENV_ENV: ClassVar[str] = "DOTENV_PATH"

    def __init__(self) -> None:
        self.env = EnvFile(os.getenv(self._DOTENV_ENV) or ".env")
        self.reload()

    def reload(self) -> None:
        """Re-read the ``.env`` file and environment variables."""
        e = self._read
        self.problems: list[str] = []

        self.bot_app_id: str = e("BOT_APP_ID")
        self.bot_app_password: str = e("BOT_APP_PASSWORD")
        self.bot_app_tenant_id: str = e("BOT_APP_TENANT_ID")
        self.bot_port: int = self._int("BOT_PORT", 3978)

        self.docsbot_team_id: str = e("DOCSBOT_TEAM_ID")
        self.docsbot_bot_id: str = e("DOCSBOT_BOT_ID")
        self.docsbot_api_key: str = e("DOCSBOT_API_KEY")
        self.docsbot_api_base: str = (e("DOCSBOT_API_BASE") or "https://api.docsbot.ai").rstrip("/")
        self.docsbot_timeout: float = self._float("DOCSBOT_TIMEOUT", 20.0)

        self.allowed_channel_ids: frozenset[str] = self._csv("ALLOWED_CHANNEL_IDS")
        keywords = self._csv("AMBIENT_KEYWORDS")
        self.ambient_keywords: tuple[str, ...] = (
            tuple(sorted(k.lower() for k in keywords)) if keywords else DEFAULT_AMBIENT_KEYWORDS
        )

        raw_strict = e("STRICT_MODE")
        self.strict_mode: bool = raw_strict.lower() in _TRUTHY if raw_strict else True
        self.min_sources: int = max(0, self._int("MIN_SOURCES", 1))
        self.min_answer_length: int = max(0, self._int("MIN_ANSWER_LENGTH", 20))
        self.min_confidence: float = min(1.0, max(0.0, self._float("MIN_CONFIDENCE", 0.35)))

        self.conversation_cache_size: int = max(0, self._int("CONVERSATION_CACHE_SIZE", 10_000))
        self.log_level: str = (e("LOG_LEVEL") or "INFO").upper()

    # -- derived -----------------------------------------------------------

    @property
    def chat_agent_url(self) -> str:
        return (
            f"{self.docsbot_api_base}/teams/{self.docsbot_team_id}"
            f"/bots/{self.docsbot_bot_id}/chat-agent"
        )

    def gate_config(self) -> GateConfig:
        return GateConfig(
            strict_mode=self.strict_mode,
            min_sources=self.min_sources,
            min_answer_length=self.min_answer_length,
            min_confidence=self.min_confidence,
        )

    def missing_required(self) -> list[str]:
        values = {
            "DOCSBOT_TEAM_ID": self.docsbot_team_id,
            "DOCSBOT_BOT_ID": self.docsbot_bot_id,
            "DOCSBOT_API_KEY": self.docsbot_api_key,
        }
        return [key for key in REQUIRED_ENV_KEYS if not values[key]]

    def validate(self) -> None:
        errors = list(self.problems)
        missing = self.missing_required()
        if missing:
            errors.insert(0, f"Missing required settings: {', '.join(missing)}")
        if errors:
            raise ConfigError("; ".join(errors))
        if not self.bot_app_id:
            logger.warning("BOT_APP_ID not set -- /api/messages will reject inbound activities")

    def summary(self) -> dict[str, str]:
        """Masked view of the configuration for the startup log."""
        return {
            "BOT_APP_ID": (self.bot_app_id[:8] + "...") if self.bot_app_id else "(missing)",
            "BOT_APP_PASSWORD": "present" if self.bot_app_password else "(missing)",
            "DOCSBOT_TEAM_ID": self.docsbot_team_id or "(missing)",
            "DOCSBOT_BOT_ID": self.docsbot_bot_id or "(missing)",
            "DOCSBOT_API_KEY": "present" if self.docsbot_api_key else "(missing)",
            "ALLOWED_CHANNEL_IDS": ",".join(sorted(self.allowed_channel_ids)) or "(none)",
            "STRICT_MODE": str(self.strict_mode),
        }

    # -- helpers -----------------------------------------------------------

    def _read(self, key: str) -> str:
        return (self.env.read(key) or os.getenv(key, "")).strip()

    def _csv(self, key: str) -> frozenset[str]:
        raw = self._read(key)
        return frozenset(part.strip() for part in raw.split(",") if part.strip())

    def _int(self, key: str, default: int) -> int:
        raw = self._read(key)
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError:
            self.problems.append(f"{key} must be an integer, got {raw!r}")
            return default

    def _float(self, key: str, default: float) -> float:
        raw = self._read(key)
        if not raw:
            return default
        try:
            return float(raw)
        except ValueError:
            self.problems.append(f"{key} must be a number, got {raw!r}")
            return default


# Module-level singleton
cfg = Settings()


def _reset_cfg() -> None:
    global cfg
    cfg = Settings()


register_singleton("settings", _reset_cfg)
