"""Depth-first, pre-order traversal driving the tagger pipeline."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable, Iterable

from codetag.scanner.context import ContextStore
from codetag.scanner.path_filter import PathFilter
from codetag.scanner.sink import TagSink
from codetag.schemas.walk_models import WalkStats
from codetag.taggers.pipeline import TaggerPipeline

LOGGER = logging.getLogger(__name__)


class Walker:
    """Walk roots, classify every accepted path and emit tags for files.

    Traversal is single-threaded and pre-order: a directory is fully tagged
    before any of its children, which clone its context on first visit.
    ``should_stop`` is polled between path visits only.
    """

    def __init__(
        self,
        *,
        path_filter: PathFilter,
        pipeline: TaggerPipeline,
        sink: TagSink,
        should_stop: Callable[[], bool] | None = None,
    ) -> None:
        self.path_filter = path_filter
        self.pipeline = pipeline
        self.sink = sink
        self.should_stop = should_stop or (lambda: False)
        self.contexts = ContextStore(list(pipeline.namespaces))

    def walk_all(self, roots: Iterable[str | os.PathLike[str]]) -> WalkStats:
        total = WalkStats()
        for root in roots:
            total = total.merge(self.walk(root))
            if total.cancelled:
                break
        return total

    def walk(self, root: str | os.PathLike[str]) -> WalkStats:
        stats = WalkStats(roots=1)
        root_path = os.path.normpath(os.path.abspath(os.fspath(Path(root).expanduser())))
        LOGGER.info("Processing path: %s", root_path)
        pending: list[tuple[str, os.stat_result | None]] = [(root_path, None)]
        while pending:
            if self.should_stop():
                LOGGER.warning("Traversal of %s interrupted", root_path)
                stats.cancelled = True
                break
            path, info = pending.pop()
            if info is None:
                try:
                    info = os.lstat(path)
                except OSError as exc:
                    LOGGER.warning("Cannot stat %s: %s", path, exc)
                    stats.io_errors += 1
                    continue
            self._visit(path, info, stats)
            if stat.S_ISDIR(info.st_mode):
                pending.extend(reversed(self._children(root_path, path, stats)))
        return stats

    def _visit(self, path: str, info: os.stat_result, stats: WalkStats) -> None:
        stats.paths_visited += 1
        context = self.contexts.resolve(path)
        self.pipeline.run(path, info, context)
        if stat.S_ISDIR(info.st_mode):
            stats.directories_visited += 1
            return
        if not stat.S_ISREG(info.st_mode):
            return
        tags = context.flatten()
        if not tags:
            LOGGER.debug("No tags for %s", path)
            stats.files_untagged += 1
            return
        LOGGER.debug("Tags for %s: %s", path, tags)
        result = self.sink.apply(path, tags)
        if result.failed:
            stats.sink_failures += 1
        else:
            stats.files_tagged += 1

    def _children(
        self, root_path: str, path: str, stats: WalkStats
    ) -> list[tuple[str, os.stat_result]]:
        try:
            with os.scandir(path) as entries:
                listing = sorted(entries, key=lambda entry: entry.name)
        except OSError as exc:
            LOGGER.warning("Cannot list %s: %s", path, exc)
            stats.io_errors += 1
            return []

        children: list[tuple[str, os.stat_result]] = []
        for entry in listing:
            try:
                info = entry.stat(follow_symlinks=False)
            except OSError as exc:
                LOGGER.warning("Cannot stat %s: %s", entry.path, exc)
                stats.io_errors += 1
                continue
            rel_path = os.path.relpath(entry.path, root_path)
            if not self.path_filter.accepts(rel_path, is_dir=stat.S_ISDIR(info.st_mode)):
                LOGGER.debug("Pruned by filter: %s", entry.path)
                stats.paths_pruned += 1
                continue
            children.append((entry.path, info))
        return children
