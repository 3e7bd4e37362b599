"""
Configuration management for FX Journal.

Loads settings from config.yaml and environment variables.
"""

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_FILE = Path(os.getenv("FXJOURNAL_CONFIG", str(PROJECT_ROOT / "config.yaml")))

SERVER_CLOCKS = ("xm", "utc", "jst")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
CONFIG_KEYS = ("server_clock", "reports.cache_ttl_seconds", "reports.cache_max_entries", "logging.level")


def get_default_config() -> dict[str, Any]:
    """Return default configuration if config.yaml doesn't exist."""
    return {
        # How naive broker timestamps are interpreted before conversion to JST
        "server_clock": "xm",
        "reports": {
            "cache_ttl_seconds": 600,
            "cache_max_entries": 128,
        },
        "logging": {
            "level": "INFO",
        },
    }


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML file, layered over the defaults."""
    config_file = path or CONFIG_FILE
    if config_file.exists():
        with open(config_file, "r") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{config_file} must contain a mapping, got {type(loaded).__name__}")
        return _merge(get_default_config(), loaded)
    return get_default_config()


def save_config(config: dict[str, Any], path: Path | None = None) -> None:
    """Save configuration to YAML file."""
    with open(path or CONFIG_FILE, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


class Settings:
    """Application settings singleton."""

    _instance = None
    _config: dict[str, Any] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._config = load_config()
        return cls._instance

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = load_config()

    @property
    def server_clock(self) -> str:
        # Check environment first, then config file
        env_clock = os.getenv("FXJOURNAL_SERVER_CLOCK")
        clock = (env_clock or self._config.get("server_clock", "xm")).lower()
        if clock not in SERVER_CLOCKS:
            raise ValueError(f"Unknown server clock {clock!r}; expected one of {SERVER_CLOCKS}")
        return clock

    @property
    def cache_ttl_seconds(self) -> float:
        return float(self._config.get("reports", {}).get("cache_ttl_seconds", 600))

    @property
    def cache_max_entries(self) -> int:
        return int(self._config.get("reports", {}).get("cache_max_entries", 128))

    @property
    def log_level(self) -> str:
        env_level = os.getenv("FXJOURNAL_LOG_LEVEL")
        level = (env_level or self._config.get("logging", {}).get("level", "INFO")).upper()
        return level if level in LOG_LEVELS else "INFO"

    def as_dict(self) -> dict[str, Any]:
        """Effective configuration, environment overrides applied."""
        effective = copy.deepcopy(self._config)
        effective["server_clock"] = self.server_clock
        effective.setdefault("logging", {})["level"] = self.log_level
        return effective

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-notation key."""
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default


# Global settings instance
settings = Settings()
