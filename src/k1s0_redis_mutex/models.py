"""Mutex data models."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import MutexError, MutexErrorCodes

MIN_SPIN_TIME_MS = 10


@dataclass
class LockGuard:
    """Lock guard yielded while a lock is held."""

    key: str
    token: str


@dataclass(frozen=True)
class OptimisticLockOptions:
    """Retry policy for optimistic acquisition.

    All durations are in milliseconds. ``max_attempts=None`` means the attempt
    count is unbounded and only ``max_wait_time`` stops the loop.
    """

    max_wait_time: int
    max_attempts: int | None = None
    time_between_attempts: int | None = None

    def __post_init__(self) -> None:
        if self.max_attempts is not None and self.max_attempts < 1:
            raise MutexError(
                code=MutexErrorCodes.INVALID_OPTIONS,
                message=f"max_attempts must be >= 1: {self.max_attempts}",
            )
        if self.time_between_attempts is not None and self.time_between_attempts < 0:
            raise MutexError(
                code=MutexErrorCodes.INVALID_OPTIONS,
                message=f"time_between_attempts must be >= 0: {self.time_between_attempts}",
            )

    @property
    def spin_time(self) -> int:
        """Delay between attempts in milliseconds."""
        if self.time_between_attempts is not None:
            return self.time_between_attempts
        return max(MIN_SPIN_TIME_MS, self.max_wait_time // 2)
