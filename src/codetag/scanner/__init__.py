"""Traversal state, filtering and sinks."""

from codetag.scanner.context import Context, ContextStore, TagSet
from codetag.scanner.path_filter import FilterRule, PathFilter

__all__ = ["Context", "ContextStore", "FilterRule", "PathFilter", "TagSet"]
