"""Configuration exports."""

from codetag.config.loader import (
    ConfigError,
    config_search_paths,
    load_app_config,
    resolve_config_path,
)
from codetag.config.models import AppConfig, LoggingConfig, SinkConfig

__all__ = [
    "AppConfig",
    "ConfigError",
    "LoggingConfig",
    "SinkConfig",
    "config_search_paths",
    "load_app_config",
    "resolve_config_path",
]
