"""Layered configuration for Sprout.

Supports:
- Built-in defaults (period table, night window, duration bounds, trends)
- User overrides from sprout.yaml
- Environment variable overrides (SPROUT_*)
- Nested key access with dot notation
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .errors import ConfigurationError

__all__ = ["DEFAULT_CONFIG", "Config", "dump_config"]

DEFAULT_CONFIG: dict[str, Any] = {
    "core": {
        "timezone": "UTC",
    },
    "stats": {
        "periods": {
            "2day": 2,
            "7day": 7,
            "14day": 14,
            "30day": 30,
        },
        "main_period": "7day",
        "compare_period": "14day",
        "night_window": {
            "start_hour": 19,
            "end_hour": 7,
        },
        "bounds": {
            "max_wake_window_minutes": 1440,
            "max_nap_minutes": 360,
            "max_night_sleep_minutes": 720,
        },
        "trends": {
            "avg_wake_window_minutes": "neutral",
            "avg_nap_minutes": "higher_is_better",
            "avg_night_sleep_minutes": "higher_is_better",
            "avg_night_wakings": "lower_is_better",
            "avg_feedings_per_day": "neutral",
            "avg_feed_amount": "higher_is_better",
            "avg_diaper_changes_per_day": "neutral",
            "avg_poops_per_day": "neutral",
        },
    },
    "logging": {
        "level": "INFO",
    },
}


class Config:
    """Configuration with defaults, overrides, and env vars.

    Configuration priority (highest to lowest):
    1. Environment variables (SPROUT_*)
    2. User config (sprout.yaml)
    3. Built-in defaults

    Example:
        >>> config = Config.load()
        >>> config.get("stats.periods.7day")
        7
        >>> config.get("core.timezone", "UTC")
        'UTC'
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """Load configuration from defaults, file and environment.

        Parameters
        ----------
        config_path
            Path to user config file (default: ``$SPROUT_CONFIG`` or sprout.yaml)

        Returns
        -------
        Config
            Loaded configuration instance

        Raises
        ------
        ConfigurationError
            If an explicitly given config file is missing or malformed
        """
        explicit = config_path is not None or "SPROUT_CONFIG" in os.environ
        if config_path is None:
            config_path = os.environ.get("SPROUT_CONFIG", "sprout.yaml")
        config_path = Path(config_path)

        if config_path.exists():
            user_config = cls._load_yaml_file(config_path)
        elif explicit:
            raise ConfigurationError(f"Config file not found: {config_path}")
        else:
            user_config = {}

        merged = cls._deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)
        merged = cls._apply_env_overrides(merged)

        return cls(merged)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Supports dot notation for nested keys:
        - "stats.periods" → config["stats"]["periods"]
        - "core.timezone" → config["core"]["timezone"]
        """
        parts = key.split(".")
        value: Any = self._data

        for part in parts:
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by key (dot notation)."""
        parts = key.split(".")
        data = self._data

        for part in parts[:-1]:
            if part not in data:
                data[part] = {}
            data = data[part]

        data[parts[-1]] = value

    def to_dict(self) -> dict[str, Any]:
        """Get full configuration as dictionary."""
        return copy.deepcopy(self._data)

    @staticmethod
    def _load_yaml_file(path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Failed to load config from {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        logger.debug("Loaded config file", path=str(path))
        return data

    @staticmethod
    def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    @staticmethod
    def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides.

        Example: SPROUT_DEFAULT_TZ overrides config["core"]["timezone"]
        """
        result = config.copy()

        env_mappings = {
            "SPROUT_DEFAULT_TZ": "core.timezone",
            "SPROUT_LOG_LEVEL": "logging.level",
            "SPROUT_MAIN_PERIOD": "stats.main_period",
            "SPROUT_COMPARE_PERIOD": "stats.compare_period",
        }

        for env_var, config_key in env_mappings.items():
            value = os.environ.get(env_var)
            if value is None:
                continue

            parts = config_key.split(".")
            data = result
            for part in parts[:-1]:
                data = data.setdefault(part, {})
            data[parts[-1]] = value

        return result


def dump_config(config: Config) -> str:
    """Render configuration as YAML."""
    return yaml.safe_dump(config.to_dict(), default_flow_style=False, allow_unicode=True, sort_keys=False)
