"""Ordered include/exclude policy for traversal."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterable, Protocol

from pathspec import GitIgnoreSpec

LOGGER = logging.getLogger(__name__)

GLOB_PREFIX = "glob:"


class _Matcher(Protocol):
    def __call__(self, rel_path: str) -> bool: ...


@dataclass(frozen=True)
class FilterRule:
    """One ``+``/``-`` rule; ``include`` is the verdict when it matches."""

    source: str
    include: bool
    matches: _Matcher

    @classmethod
    def parse(cls, line: str) -> "FilterRule":
        """Compile a config line like ``-\\.git/$`` or ``+glob:src/**``."""
        if not line or line[0] not in "+-":
            raise ValueError("filter rule must start with '+' or '-'")
        include = line[0] == "+"
        body = line[1:]
        if body.startswith(GLOB_PREFIX):
            spec = GitIgnoreSpec.from_lines([body[len(GLOB_PREFIX) :]])
            return cls(source=line, include=include, matches=spec.match_file)
        pattern = re.compile(body)
        return cls(
            source=line,
            include=include,
            matches=lambda rel_path: pattern.search(rel_path) is not None,
        )


@dataclass(frozen=True)
class PathFilter:
    """First matching rule decides; no match means include."""

    rules: tuple[FilterRule, ...] = ()

    @classmethod
    def from_config(cls, lines: Iterable[str]) -> "PathFilter":
        rules: list[FilterRule] = []
        for line in lines:
            try:
                rules.append(FilterRule.parse(line))
            except (re.error, ValueError) as exc:
                LOGGER.warning("Dropping invalid filter rule %r: %s", line, exc)
        return cls(rules=tuple(rules))

    def accepts(self, rel_path: str, *, is_dir: bool = False) -> bool:
        """Verdict for a root-relative, ``/``-separated path."""
        candidate = normalize_rel_path(rel_path, is_dir=is_dir)
        for rule in self.rules:
            if rule.matches(candidate):
                LOGGER.debug("Rule %r matched %s", rule.source, candidate)
                return rule.include
        return True


def normalize_rel_path(rel_path: str, *, is_dir: bool) -> str:
    if os.sep != "/":
        rel_path = rel_path.replace(os.sep, "/")
    normalized = rel_path.strip("/")
    if is_dir:
        return f"{normalized}/"
    return normalized
