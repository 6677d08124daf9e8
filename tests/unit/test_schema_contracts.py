"""Schema contract validation tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from codetag.config.models import LoggingConfig, SinkConfig
from codetag.schemas.enums import SinkFailurePolicy, normalize_failure_policy
from codetag.schemas.walk_models import FileTagRecord, WalkStats


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("abort", SinkFailurePolicy.ABORT),
        (" Fatal ", SinkFailurePolicy.ABORT),
        ("skip", SinkFailurePolicy.SKIP),
        ("continue", SinkFailurePolicy.SKIP),
        (SinkFailurePolicy.SKIP, SinkFailurePolicy.SKIP),
    ],
)
def test_failure_policy_aliases(raw: str, expected: SinkFailurePolicy) -> None:
    """Policy labels normalize to canonical enum values."""
    assert normalize_failure_policy(raw) == expected


def test_unknown_failure_policy_is_rejected() -> None:
    """Unsupported labels fail validation."""
    with pytest.raises(ValidationError):
        SinkConfig(on_failure="retry-forever")


def test_sink_config_bounds() -> None:
    """Attempts and timeouts must stay within range."""
    with pytest.raises(ValidationError):
        SinkConfig(max_attempts=0)
    with pytest.raises(ValidationError):
        SinkConfig(timeout_seconds=0)
    with pytest.raises(ValidationError):
        SinkConfig(command=[])


def test_logging_config_levels() -> None:
    """Level names are case-insensitive and WARN is accepted."""
    config = LoggingConfig(level="warn", loggers={"codetag.taggers": "debug"})
    assert config.level == "WARNING"
    assert config.loggers == {"codetag.taggers": "DEBUG"}
    with pytest.raises(ValidationError):
        LoggingConfig(level="chatty")


def test_walk_stats_merge() -> None:
    """Counters add up; cancellation is sticky."""
    merged = WalkStats(roots=1, files_tagged=2).merge(
        WalkStats(roots=1, files_tagged=3, io_errors=1, cancelled=True)
    )
    assert merged.roots == 2
    assert merged.files_tagged == 5
    assert merged.io_errors == 1
    assert merged.cancelled is True


def test_malformed_tag_record_is_rejected() -> None:
    """Records must carry a path and reject unknown fields."""
    with pytest.raises(ValidationError):
        FileTagRecord.model_validate_json('{"tags": ["lang:go"]}')
    with pytest.raises(ValidationError):
        FileTagRecord.model_validate({"path": "/a", "tags": [], "extra": 1})
