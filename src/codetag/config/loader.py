"""Configuration discovery, loading and override resolution."""

from __future__ import annotations

import os
import shlex
import sys
from pathlib import Path
from typing import Any, Mapping

import yaml

from codetag.config.models import AppConfig
from codetag.constants import CONFIG_ENV_VAR, CONFIG_SEARCH_PATHS
from codetag.runtime_env import env_flag


class ConfigError(ValueError):
    """Raised when no usable configuration can be produced."""


def config_search_paths(argv0: str | None = None) -> list[Path]:
    """Candidate config locations, in lookup order."""
    program = argv0 if argv0 is not None else sys.argv[0]
    candidates = [Path(f"{program}.yaml")] if program else []
    candidates.extend(Path(path) for path in CONFIG_SEARCH_PATHS)
    return [candidate.expanduser() for candidate in candidates]


def resolve_config_path(
    config_path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    argv0: str | None = None,
) -> Path:
    """Pick the config file: explicit path, then env var, then search paths."""
    active_env = os.environ if env is None else env
    if config_path is not None:
        return config_path.expanduser()
    env_path = active_env.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    searched = config_search_paths(argv0)
    for candidate in searched:
        if candidate.is_file():
            return candidate
    listing = ", ".join(str(path) for path in searched)
    raise ConfigError(f"Failed to find any suitable configuration file (tried: {listing})")


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to process configuration file ({path}): {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("Configuration file must deserialize to a mapping")
    return data


def _section(merged: dict[str, Any], key: str) -> dict[str, Any]:
    current = merged.get(key)
    section = dict(current) if isinstance(current, dict) else {}
    merged[key] = section
    return section


def apply_overrides(
    raw_config: dict[str, Any],
    env: Mapping[str, str],
    cli_overrides: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Apply precedence: CLI > env > YAML."""
    merged = dict(raw_config)

    dry_run = env_flag(env, "CODETAG_DRY_RUN")
    if dry_run is not None:
        _section(merged, "sink")["dry_run"] = dry_run
    if env.get("CODETAG_TAG_COMMAND"):
        _section(merged, "sink")["command"] = shlex.split(env["CODETAG_TAG_COMMAND"])
    if env.get("CODETAG_LOG_LEVEL"):
        _section(merged, "logging")["level"] = env["CODETAG_LOG_LEVEL"]

    if cli_overrides:
        if cli_overrides.get("paths"):
            merged["paths"] = [str(path) for path in cli_overrides["paths"]]
        if cli_overrides.get("dry_run"):
            _section(merged, "sink")["dry_run"] = True
        if cli_overrides.get("on_failure"):
            _section(merged, "sink")["on_failure"] = cli_overrides["on_failure"]
        if cli_overrides.get("log_level"):
            _section(merged, "logging")["level"] = cli_overrides["log_level"]
    return merged


def load_app_config(
    config_path: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
    argv0: str | None = None,
) -> AppConfig:
    """Locate, load and validate the application config."""
    active_env = os.environ if env is None else env
    path = resolve_config_path(config_path, env=active_env, argv0=argv0)
    raw = _load_yaml(path)
    merged = apply_overrides(raw, active_env, cli_overrides)
    return AppConfig.model_validate(merged)
