"""Centralized runtime settings.

Loads settings from a .env file and the environment (``SPROUT_*``) and
provides typed access to them. Missing or invalid values produce clear
ConfigurationError messages.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..core.errors import ConfigurationError
from ..core.time import resolve_timezone

__all__ = [
    "LOG_LEVELS",
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
]

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Runtime settings for Sprout.

    Attributes
    ----------
    data_path : Path | None
        JSON-lines activity log read by the CLI
    default_timezone : str
        Zone used for local days when a command gives none
    log_level : str
        Logging level
    log_dir : Path | None
        Directory for JSONL logs (console only when unset)
    config_path : Path | None
        YAML config file (default: sprout.yaml when present)
    """

    data_path: Path | None = None
    default_timezone: str = "UTC"
    log_level: str = "INFO"
    log_dir: Path | None = None
    config_path: Path | None = None

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if isinstance(self.data_path, str):
            self.data_path = Path(self.data_path)
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)
        if isinstance(self.config_path, str):
            self.config_path = Path(self.config_path)

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"SPROUT_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )

        # Raises ConfigurationError for unknown zones
        resolve_timezone(self.default_timezone)

    def require_data_path(self) -> Path:
        """Return the activity log path or fail with a clear message."""
        if self.data_path is None:
            raise ConfigurationError(
                "SPROUT_DATA_PATH is required.\n\n"
                "Quick fix:\n"
                "  1. Copy .env.example to .env\n"
                "  2. Set SPROUT_DATA_PATH=activity.jsonl in .env\n"
                "  3. Run your command again\n\n"
                "Or pass --data PATH to the command"
            )
        return self.data_path

    @classmethod
    def from_env(cls, env_file: Path | str | None = None) -> Settings:
        """Load settings from environment.

        Loads from .env file if present, otherwise from os.environ.

        Parameters
        ----------
        env_file
            Path to .env file (default: .env in current directory)

        Returns
        -------
        Settings
            Loaded settings

        Raises
        ------
        ConfigurationError
            If a setting is invalid
        """
        if env_file is None:
            env_file = Path(".env")

        if isinstance(env_file, str):
            env_file = Path(env_file)

        if env_file.exists():
            load_env_file(env_file)

        return cls(
            data_path=_optional_path("SPROUT_DATA_PATH"),
            default_timezone=os.environ.get("SPROUT_DEFAULT_TZ", "UTC"),
            log_level=os.environ.get("SPROUT_LOG_LEVEL", "INFO"),
            log_dir=_optional_path("SPROUT_LOG_DIR"),
            config_path=_optional_path("SPROUT_CONFIG"),
        )


def _optional_path(name: str) -> Path | None:
    value = os.environ.get(name)
    return Path(value) if value else None


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Existing environment variables are overwritten.

    Parameters
    ----------
    env_file
        Path to .env file
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
                value = value[1:-1]

            os.environ[key] = value


# Global settings instance
_settings: Settings | None = None


def load_settings(env_file: Path | str | None = None) -> Settings:
    """Load settings from environment and keep them as current.

    Parameters
    ----------
    env_file
        Path to .env file

    Returns
    -------
    Settings
        Loaded settings

    Raises
    ------
    ConfigurationError
        If a setting is invalid
    """
    global _settings
    _settings = Settings.from_env(env_file)
    return _settings


def get_settings() -> Settings:
    """Get current settings.

    Raises
    ------
    ConfigurationError
        If settings were not loaded
    """
    if _settings is None:
        raise ConfigurationError("Settings not loaded. Call load_settings() first.")
    return _settings


def generate_example_env(output_path: Path | None = None) -> str:
    """Generate example .env file with all settings.

    Parameters
    ----------
    output_path
        Optional path to write .env file

    Returns
    -------
    str
        Example .env contents
    """
    example = """# Sprout configuration
# Copy this to .env and adjust values

# JSON-lines activity log (required by the CLI unless --data is given)
SPROUT_DATA_PATH=activity.jsonl

# Default timezone for local days (optional, default: UTC)
# Examples: UTC, America/New_York, Europe/Brussels, +05:30
SPROUT_DEFAULT_TZ=UTC

# Period tokens (optional, default: from sprout.yaml or 7day / 14day)
# SPROUT_MAIN_PERIOD=7day
# SPROUT_COMPARE_PERIOD=14day

# Log level (optional, default: INFO)
# Options: TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL
SPROUT_LOG_LEVEL=INFO

# Directory for JSONL logs (optional, console only if not set)
# SPROUT_LOG_DIR=logs

# YAML config file (optional, default: sprout.yaml if present)
# SPROUT_CONFIG=sprout.yaml
"""

    if output_path:
        output_path.write_text(example, encoding="utf-8")

    return example
