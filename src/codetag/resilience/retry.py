"""Bounded retry with exponential backoff for sink invocations."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry/backoff policy; one attempt means no retry."""

    max_attempts: int = 1
    backoff_seconds: float = 0.0


class RetryExecutor:
    """Re-run an operation while its result reports failure."""

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        if policy.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.policy = policy
        self._sleep = sleep_fn

    def run(
        self,
        operation: Callable[[], T],
        *,
        is_failure: Callable[[T], bool],
        label: str,
    ) -> T:
        """Return the first non-failing result, or the last failing one."""
        result = operation()
        for attempt in range(2, self.policy.max_attempts + 1):
            if not is_failure(result):
                break
            delay = self._backoff_delay(attempt - 1)
            LOGGER.info(
                "%s failed, retrying in %.2fs (attempt %d/%d)",
                label,
                delay,
                attempt,
                self.policy.max_attempts,
            )
            self._sleep(delay)
            result = operation()
        return result

    def _backoff_delay(self, attempt: int) -> float:
        return max(0.0, self.policy.backoff_seconds * (2 ** (attempt - 1)))
