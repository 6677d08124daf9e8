"""Traversal result contracts."""

from __future__ import annotations

from pydantic import Field

from codetag.schemas.base import StrictSchemaModel


class WalkStats(StrictSchemaModel):
    """Counters collected over one traversal run."""

    roots: int = 0
    paths_visited: int = 0
    directories_visited: int = 0
    files_tagged: int = 0
    files_untagged: int = 0
    paths_pruned: int = 0
    io_errors: int = 0
    sink_failures: int = 0
    cancelled: bool = False

    def merge(self, other: "WalkStats") -> "WalkStats":
        """Return the sum of two stats records."""
        payload = {
            name: getattr(self, name) + getattr(other, name)
            for name in type(self).model_fields
            if name != "cancelled"
        }
        payload["cancelled"] = self.cancelled or other.cancelled
        return WalkStats(**payload)


class FileTagRecord(StrictSchemaModel):
    """Final tag list emitted for one regular file."""

    path: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
