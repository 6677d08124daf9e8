"""Schema contract exports."""

from codetag.schemas.enums import SinkFailurePolicy, SinkStatus
from codetag.schemas.walk_models import FileTagRecord, WalkStats

__all__ = [
    "FileTagRecord",
    "SinkFailurePolicy",
    "SinkStatus",
    "WalkStats",
]
