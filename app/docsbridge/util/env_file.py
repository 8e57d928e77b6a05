"""Minimal ``.env`` reader used by the settings layer."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _parse_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):]
    key, _, value = line.partition("=")
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1]
    return key.strip(), value


class EnvFile:
    """Key/value access to a dotenv file.  A missing file reads as empty."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read_all(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        values: dict[str, str] = {}
        try:
            for line in self.path.read_text().splitlines():
                parsed = _parse_line(line)
                if parsed:
                    values[parsed[0]] = parsed[1]
        except OSError as exc:
            logger.warning("Failed to read %s: %s", self.path, exc)
        return values

    def read(self, key: str) -> str:
        return self.read_all().get(key, "")
