"""Pydantic models for the YAML configuration file."""

from __future__ import annotations

import logging as std_logging
import os
import shlex
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator

from codetag.constants import DEFAULT_TAG_COMMAND
from codetag.schemas.base import StrictSchemaModel
from codetag.schemas.enums import SinkFailurePolicy, normalize_failure_policy

LOGGER = std_logging.getLogger(__name__)


def _normalize_level(value: Any) -> str:
    if isinstance(value, int):
        name = std_logging.getLevelName(value)
        if isinstance(name, str) and not name.startswith("Level "):
            return name
        raise ValueError(f"Unknown log level: {value}")
    normalized = str(value).strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    if normalized not in std_logging.getLevelNamesMapping():
        raise ValueError(f"Unknown log level: {value}")
    return normalized


def _scalar_list(value: Any, *, field: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"'{field}' must be a list or (worst-case) a scalar")
    items: list[str] = []
    for item in value:
        if isinstance(item, str):
            items.append(item)
        else:
            LOGGER.warning("Skipped invalid %s entry: %r", field, item)
    return items


class LoggingConfig(StrictSchemaModel):
    """Logging levels for the run."""

    level: str = "WARNING"
    loggers: dict[str, str] = Field(default_factory=dict)
    rich_tracebacks: bool = False

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: Any) -> str:
        return _normalize_level(value)

    @field_validator("loggers", mode="before")
    @classmethod
    def normalize_loggers(cls, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("'loggers' section must be a map")
        return {str(name): _normalize_level(level) for name, level in value.items()}


class SinkConfig(StrictSchemaModel):
    """Where and how computed tags are applied."""

    command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TAG_COMMAND), min_length=1
    )
    dry_run: bool = False
    on_failure: SinkFailurePolicy = SinkFailurePolicy.ABORT
    max_attempts: int = Field(default=1, ge=1, le=10)
    backoff_seconds: float = Field(default=0.5, ge=0.0)
    timeout_seconds: int | None = Field(default=None, gt=0)
    jsonl_path: Path | None = None

    @field_validator("command", mode="before")
    @classmethod
    def split_command(cls, value: Any) -> Any:
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator("on_failure", mode="before")
    @classmethod
    def normalize_on_failure(cls, value: str | SinkFailurePolicy) -> SinkFailurePolicy:
        return normalize_failure_policy(value)


class AppConfig(StrictSchemaModel):
    """Central application configuration."""

    paths: list[str] = Field(min_length=1)
    filter: list[str] = Field(default_factory=list)
    taggers: dict[str, Any] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sink: SinkConfig = Field(default_factory=SinkConfig)

    @field_validator("paths", mode="before")
    @classmethod
    def normalize_paths(cls, value: Any) -> list[str]:
        return _scalar_list(value, field="paths")

    @field_validator("filter", mode="before")
    @classmethod
    def normalize_filter(cls, value: Any) -> list[str]:
        return _scalar_list(value, field="filter")

    @field_validator("taggers", mode="before")
    @classmethod
    def normalize_taggers(cls, value: Any) -> dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("'taggers' must be a map of namespace to tagger list")
        return {("" if ns is None else str(ns)): spec for ns, spec in value.items()}

    def root_paths(self) -> list[Path]:
        """Expand and absolutize configured traversal roots."""
        roots: list[Path] = []
        for raw in self.paths:
            expanded = Path(raw).expanduser()
            roots.append(Path(os.path.abspath(expanded)))
        return roots
