"""Sinks receiving the final tag list of every regular file."""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol, Sequence

import orjson
from pydantic import ValidationError

from codetag.config.models import SinkConfig
from codetag.resilience.retry import RetryExecutor, RetryPolicy
from codetag.schemas.enums import SinkFailurePolicy, SinkStatus
from codetag.schemas.walk_models import FileTagRecord

LOGGER = logging.getLogger(__name__)
OUTPUT_LOGGER = logging.getLogger(f"{__name__}.output")


def printable_path(value: str) -> str:
    """Valid UTF-8 text for a path that may carry undecodable bytes."""
    return os.fsencode(value).decode("utf-8", "backslashreplace")


@dataclass(frozen=True)
class SinkResult:
    """Outcome of applying tags to one file."""

    path: str
    tags: tuple[str, ...]
    status: SinkStatus
    error: str | None = None
    exit_code: int | None = None

    @property
    def failed(self) -> bool:
        return self.status == SinkStatus.FAILED


class SinkFailureError(RuntimeError):
    """Raised when a failed sink call must abort the run."""

    def __init__(self, result: SinkResult) -> None:
        super().__init__(f"Failed to tag {printable_path(result.path)}: {result.error}")
        self.result = result


class TagSink(Protocol):
    """Receiver of per-file tag lists."""

    def apply(self, path: str, tags: Sequence[str]) -> SinkResult:
        """Apply tags to path."""

    def close(self) -> None:
        """Release resources."""


class CommandSink:
    """Runs ``<command> <path> <tags...>`` per file, e.g. ``tmsu tag``."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        dry_run: bool = False,
        timeout_seconds: int | None = None,
    ) -> None:
        if not command:
            raise ValueError("sink command must not be empty")
        self.command = list(command)
        self.dry_run = dry_run
        self.timeout_seconds = timeout_seconds

    def apply(self, path: str, tags: Sequence[str]) -> SinkResult:
        cmd = [*self.command, path, *tags]
        if self.dry_run:
            LOGGER.info("[dry-run] %s", shlex.join(cmd))
            return SinkResult(path=path, tags=tuple(tags), status=SinkStatus.DRY_RUN)
        if shutil.which(self.command[0]) is None:
            return self._failed(path, tags, f"{self.command[0]} not found")
        LOGGER.debug("Running: %s", shlex.join(cmd))
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            return self._failed(path, tags, f"{self.command[0]} timed out")
        except OSError as exc:
            return self._failed(path, tags, str(exc))

        for line in (result.stdout or "").splitlines():
            if line.strip():
                OUTPUT_LOGGER.info("%s", line.rstrip())
        if result.returncode != 0:
            return self._failed(
                path,
                tags,
                f"{self.command[0]} exited with code {result.returncode}",
                exit_code=result.returncode,
            )
        return SinkResult(
            path=path,
            tags=tuple(tags),
            status=SinkStatus.APPLIED,
            exit_code=result.returncode,
        )

    def close(self) -> None:
        return

    @staticmethod
    def _failed(
        path: str, tags: Sequence[str], error: str, *, exit_code: int | None = None
    ) -> SinkResult:
        return SinkResult(
            path=path,
            tags=tuple(tags),
            status=SinkStatus.FAILED,
            error=error,
            exit_code=exit_code,
        )


class JsonLinesSink:
    """Appends one ``{"path", "tags"}`` JSON record per file."""

    def __init__(self, output_path: Path, *, dry_run: bool = False) -> None:
        self.output_path = output_path
        self.dry_run = dry_run
        self._handle: BinaryIO | None = None

    def apply(self, path: str, tags: Sequence[str]) -> SinkResult:
        if self.dry_run:
            LOGGER.info("[dry-run] %s: %s", path, " ".join(tags))
            return SinkResult(path=path, tags=tuple(tags), status=SinkStatus.DRY_RUN)
        try:
            record = FileTagRecord(
                path=printable_path(path), tags=[printable_path(tag) for tag in tags]
            )
            handle = self._open()
            handle.write(orjson.dumps(record.model_dump(mode="json")) + b"\n")
        except (OSError, ValidationError, orjson.JSONEncodeError) as exc:
            return SinkResult(
                path=path, tags=tuple(tags), status=SinkStatus.FAILED, error=str(exc)
            )
        return SinkResult(path=path, tags=tuple(tags), status=SinkStatus.APPLIED)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _open(self) -> BinaryIO:
        if self._handle is None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.output_path.open("wb")
        return self._handle


class GuardedSink:
    """Applies the retry and failure policy around another sink."""

    def __init__(
        self,
        sink: TagSink,
        *,
        policy: SinkFailurePolicy = SinkFailurePolicy.ABORT,
        retry: RetryExecutor | None = None,
    ) -> None:
        self.sink = sink
        self.policy = policy
        self.retry = retry or RetryExecutor(RetryPolicy())

    def apply(self, path: str, tags: Sequence[str]) -> SinkResult:
        result = self.retry.run(
            lambda: self.sink.apply(path, tags),
            is_failure=lambda outcome: outcome.failed,
            label=f"tagging {path}",
        )
        if not result.failed:
            return result
        if self.policy == SinkFailurePolicy.ABORT:
            raise SinkFailureError(result)
        LOGGER.error("Failed to tag %s: %s", printable_path(path), result.error)
        return result

    def close(self) -> None:
        self.sink.close()


def build_sink(config: SinkConfig) -> GuardedSink:
    """Sink described by the ``sink`` config section."""
    sink: TagSink
    if config.jsonl_path is not None:
        sink = JsonLinesSink(config.jsonl_path.expanduser(), dry_run=config.dry_run)
    else:
        sink = CommandSink(
            config.command,
            dry_run=config.dry_run,
            timeout_seconds=config.timeout_seconds,
        )
    retry = RetryExecutor(
        RetryPolicy(
            max_attempts=config.max_attempts,
            backoff_seconds=config.backoff_seconds,
        )
    )
    return GuardedSink(sink, policy=config.on_failure, retry=retry)
