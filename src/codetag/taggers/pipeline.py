"""Namespaced tagger pipeline built from the ``taggers`` config section."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from codetag.constants import EMPTY_NAMESPACE_ALIAS, RESERVED_NAMESPACE_PREFIX
from codetag.scanner.context import Context, namespace_tags
from codetag.taggers.registry import (
    Tagger,
    TaggerConfigError,
    TaggerRegistry,
    UnknownTaggerError,
)

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaggerPipeline:
    """Ordered taggers per namespace, run against every visited path."""

    namespaces: dict[str, tuple[Tagger, ...]] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls, raw_taggers: Mapping[Any, Any], registry: TaggerRegistry
    ) -> "TaggerPipeline":
        """Build taggers, dropping anything invalid with a warning."""
        namespaces: dict[str, list[Tagger]] = {}
        for raw_ns, node in raw_taggers.items():
            ns = normalize_namespace(raw_ns)
            if ns is None:
                LOGGER.warning(
                    "Ignoring namespace name, starting with %r: %s",
                    RESERVED_NAMESPACE_PREFIX,
                    raw_ns,
                )
                continue
            built = namespaces.setdefault(ns, [])
            for name, config in _iter_specs(ns, node):
                try:
                    built.append(registry.get(name, config))
                except (UnknownTaggerError, TaggerConfigError) as exc:
                    LOGGER.warning("Failed to init tagger %s (ns: %r): %s", name, ns, exc)
        pipeline = cls(
            namespaces={ns: tuple(taggers) for ns, taggers in namespaces.items() if taggers}
        )
        LOGGER.debug("Using taggers: %s", pipeline.describe())
        return pipeline

    def run(self, path: str, info: os.stat_result, context: Context) -> None:
        """Feed every namespace's taggers and merge results into its tag set."""
        for ns, taggers in self.namespaces.items():
            ns_context = context.namespace(ns)
            for tagger in taggers:
                try:
                    tags = tagger(path, info, ns_context)
                except OSError as exc:
                    LOGGER.info("Tagger %s failed on %s: %s", tagger.name, path, exc)
                    continue
                if tags:
                    namespace_tags(ns_context).update(tags)

    def describe(self) -> dict[str, list[str]]:
        return {
            ns: [
                f"{tagger.name} (fallback)" if tagger.fallback else tagger.name
                for tagger in taggers
            ]
            for ns, taggers in self.namespaces.items()
        }

    def __bool__(self) -> bool:
        return bool(self.namespaces)


def normalize_namespace(raw_ns: Any) -> str | None:
    """Map config keys to namespace names; None for reserved names."""
    ns = "" if raw_ns is None else str(raw_ns)
    if ns == EMPTY_NAMESPACE_ALIAS:
        return ""
    if ns.startswith(RESERVED_NAMESPACE_PREFIX):
        return None
    return ns


def _iter_specs(ns: str, node: Any) -> list[tuple[str, Any]]:
    if isinstance(node, str):
        return [(node, None)]
    if not isinstance(node, list):
        LOGGER.warning("Invalid tagger(-list) specification (ns: %r): %r", ns, node)
        return []
    specs: list[tuple[str, Any]] = []
    for item in node:
        if isinstance(item, str):
            specs.append((item, None))
        elif isinstance(item, dict) and len(item) == 1:
            name, config = next(iter(item.items()))
            specs.append((str(name), config))
        elif isinstance(item, dict):
            LOGGER.warning(
                "Invalid tagger specification - map must contain only one element "
                "(ns: %r): %r",
                ns,
                item,
            )
        else:
            LOGGER.warning(
                "Invalid tagger specification - must be map or string (ns: %r): %r",
                ns,
                item,
            )
    return specs
