"""Configuration -- environment-backed settings and gate thresholds."""

from .settings import ConfigError, GateConfig, Settings

__all__ = ["ConfigError", "GateConfig", "Settings"]
