"""Enum definitions for configuration and run contracts."""

from __future__ import annotations

from enum import Enum


class SinkFailurePolicy(str, Enum):
    ABORT = "abort"
    SKIP = "skip"


class SinkStatus(str, Enum):
    APPLIED = "applied"
    DRY_RUN = "dry_run"
    FAILED = "failed"


def normalize_failure_policy(raw_value: str | SinkFailurePolicy) -> SinkFailurePolicy:
    """Normalize failure-policy labels into canonical enum values."""
    if isinstance(raw_value, SinkFailurePolicy):
        return raw_value
    normalized = raw_value.strip().lower()
    if normalized in {"continue", "ignore"}:
        return SinkFailurePolicy.SKIP
    if normalized in {"fail", "fatal"}:
        return SinkFailurePolicy.ABORT
    try:
        return SinkFailurePolicy(normalized)
    except ValueError as exc:
        raise ValueError(f"Unsupported sink failure policy: {raw_value}") from exc
