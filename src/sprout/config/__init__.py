"""Runtime settings."""

from .settings import Settings, generate_example_env, get_settings, load_env_file, load_settings

__all__ = [
    "Settings",
    "generate_example_env",
    "get_settings",
    "load_env_file",
    "load_settings",
]
