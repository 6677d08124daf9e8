"""Tagger registry and the compiled tagger protocol.

A tagger type is a classification function plus an optional config compiler.
The compiler runs once per configured instance; its result is handed back to
the classification function on every call, so nothing is re-parsed per path.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from codetag.constants import FALLBACK_OPTION
from codetag.scanner.context import namespace_tags

LOGGER = logging.getLogger(__name__)

ClassifyFn = Callable[
    [str, Any, str, os.stat_result, dict[str, Any]], Iterable[str] | None
]
CompileFn = Callable[[str, Any], Any]


class UnknownTaggerError(LookupError):
    """Raised when a configured tagger name has no registration."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tagger: {name}")
        self.name = name


class TaggerConfigError(ValueError):
    """Raised when a tagger rejects its configuration."""


@dataclass(frozen=True)
class TaggerType:
    """Registered tagger implementation."""

    name: str
    classify: ClassifyFn
    compile_config: CompileFn | None = None
    description: str = ""


@dataclass(frozen=True)
class Tagger:
    """Tagger type bound to its compiled configuration."""

    name: str
    classify: ClassifyFn
    compiled: Any = None
    fallback: bool = False

    def __call__(
        self, path: str, info: os.stat_result, ns_context: dict[str, Any]
    ) -> list[str]:
        if self.fallback and namespace_tags(ns_context):
            return []
        tags = self.classify(self.name, self.compiled, path, info, ns_context)
        return list(tags) if tags else []


def split_fallback(raw_config: Any) -> tuple[bool, Any]:
    """Pull the cross-cutting ``fallback`` option out of a tagger config."""
    if not isinstance(raw_config, Mapping) or FALLBACK_OPTION not in raw_config:
        return False, raw_config
    remaining = {k: v for k, v in raw_config.items() if k != FALLBACK_OPTION}
    fallback = raw_config[FALLBACK_OPTION]
    if not isinstance(fallback, bool):
        raise TaggerConfigError(f"'{FALLBACK_OPTION}' must be a boolean, got {fallback!r}")
    return fallback, remaining or None


@dataclass
class TaggerRegistry:
    """Name -> tagger type mapping, built once at startup."""

    _types: dict[str, TaggerType] = field(default_factory=dict)

    def register(
        self,
        name: str,
        classify: ClassifyFn,
        compile_config: CompileFn | None = None,
        *,
        description: str = "",
    ) -> TaggerType:
        if name in self._types:
            raise ValueError(f"Tagger already registered: {name}")
        tagger_type = TaggerType(
            name=name,
            classify=classify,
            compile_config=compile_config,
            description=description,
        )
        self._types[name] = tagger_type
        return tagger_type

    def get(self, name: str, raw_config: Any = None) -> Tagger:
        """Compile ``raw_config`` for ``name`` and return a ready tagger."""
        tagger_type = self._types.get(name)
        if tagger_type is None:
            raise UnknownTaggerError(name)
        fallback, config = split_fallback(raw_config)
        compiled = config
        if tagger_type.compile_config is not None:
            try:
                compiled = tagger_type.compile_config(name, config)
            except TaggerConfigError:
                raise
            except (TypeError, ValueError) as exc:
                raise TaggerConfigError(f"Invalid config for tagger {name}: {exc}") from exc
        return Tagger(
            name=name,
            classify=tagger_type.classify,
            compiled=compiled,
            fallback=fallback,
        )

    def names(self) -> list[str]:
        return sorted(self._types)

    def describe(self, name: str) -> str:
        return self._types[name].description

    def __contains__(self, name: object) -> bool:
        return name in self._types
