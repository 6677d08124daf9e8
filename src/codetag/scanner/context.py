"""Per-path classification state.

Every visited path owns a :class:`Context`. A context maps a namespace name to
a namespace-local dict; the reserved ``tags`` key of that dict holds the
namespace's :class:`TagSet`, every other key is free for taggers to stash
whatever they need. Contexts are inherited by value: a path that has no
context yet starts from a deep copy of its parent's one, so state set on a
directory is visible below it but never leaks into siblings or back up.
"""

from __future__ import annotations

import copy
import os
from typing import Any, Iterable, Iterator, Sequence

from codetag.constants import TAGS_KEY


class TagSet:
    """Deduplicated, unordered collection of tag strings."""

    __slots__ = ("_tags",)

    def __init__(self, tags: Iterable[str] = ()) -> None:
        self._tags: set[str] = set(tags)

    def add(self, tag: str) -> None:
        self._tags.add(tag)

    def update(self, tags: Iterable[str]) -> None:
        """Merge tags in (set union)."""
        self._tags.update(tags)

    def reset(self, tags: Iterable[str] = ()) -> None:
        """Drop everything accumulated so far, then insert ``tags``."""
        self._tags.clear()
        self._tags.update(tags)

    def qualified(self, namespace: str) -> list[str]:
        """Sorted ``namespace:tag`` strings; bare tags for the empty namespace."""
        if not namespace:
            return sorted(self._tags)
        return [f"{namespace}:{tag}" for tag in sorted(self._tags)]

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tags))

    def __len__(self) -> int:
        return len(self._tags)

    def __bool__(self) -> bool:
        return bool(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSet):
            return self._tags == other._tags
        if isinstance(other, (set, frozenset)):
            return self._tags == other
        return NotImplemented

    def __deepcopy__(self, memo: dict[int, Any]) -> "TagSet":
        return TagSet(self._tags)

    def __repr__(self) -> str:
        return f"TagSet({sorted(self._tags)!r})"


def namespace_tags(ns_context: dict[str, Any]) -> TagSet:
    """Return the tag set held by a namespace context, creating it if needed."""
    tags = ns_context.get(TAGS_KEY)
    if not isinstance(tags, TagSet):
        tags = TagSet()
        ns_context[TAGS_KEY] = tags
    return tags


class Context:
    """Namespace-keyed classification state of one path."""

    __slots__ = ("_namespaces",)

    def __init__(self, namespaces: Iterable[str] = ()) -> None:
        self._namespaces: dict[str, dict[str, Any]] = {}
        for name in namespaces:
            self.namespace(name)

    def namespace(self, name: str) -> dict[str, Any]:
        """Namespace-local mapping, always carrying a ``tags`` entry."""
        ns_context = self._namespaces.get(name)
        if ns_context is None:
            ns_context = {TAGS_KEY: TagSet()}
            self._namespaces[name] = ns_context
        else:
            namespace_tags(ns_context)
        return ns_context

    def tags(self, name: str) -> TagSet:
        return namespace_tags(self.namespace(name))

    def namespaces(self) -> list[str]:
        return list(self._namespaces)

    def flatten(self) -> list[str]:
        """All tags of all namespaces as sorted, qualified strings."""
        flat: list[str] = []
        for name in sorted(self._namespaces):
            flat.extend(self.tags(name).qualified(name))
        return flat

    def clone(self) -> "Context":
        """Independent deep copy; nothing is shared with the original."""
        return copy.deepcopy(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Context):
            return NotImplemented
        return self._namespaces == other._namespaces

    def __deepcopy__(self, memo: dict[int, Any]) -> "Context":
        duplicate = Context()
        duplicate._namespaces = copy.deepcopy(self._namespaces, memo)
        return duplicate

    def __repr__(self) -> str:
        return f"Context({self._namespaces!r})"


class ContextStore:
    """Maps absolute paths to their contexts for the length of one run."""

    def __init__(self, namespaces: Sequence[str] = ()) -> None:
        self.namespaces = tuple(namespaces)
        self._contexts: dict[str, Context] = {}

    def resolve(self, path: str | os.PathLike[str]) -> Context:
        """Context of ``path``, cloned from its direct parent on first sight."""
        key = os.path.normpath(os.fspath(path))
        context = self._contexts.get(key)
        if context is not None:
            return context
        parent = self._contexts.get(os.path.dirname(key))
        if parent is not None:
            context = parent.clone()
        else:
            context = Context(self.namespaces)
        self._contexts[key] = context
        return context

    def get(self, path: str | os.PathLike[str]) -> Context | None:
        return self._contexts.get(os.path.normpath(os.fspath(path)))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return os.path.normpath(os.fspath(path)) in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)
