"""Per-process fixed-window rate limiter keyed by client identifier.

Each key holds one RateLimitRecord (count, reset_time). A request either opens
a new window, increments the open one, or is denied once `max_requests` is
reached. Bursts of up to 2x max_requests are possible across a window
boundary — accepted in exchange for O(1) state per key.

State is process-local: scaled-out instances each keep their own table, so
the cap is per instance, not global.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateLimitRecord:
    """Counter for one client key within its current window."""

    count: int
    reset_time: float


class FixedWindowRateLimiter:
    """Fixed-window counter table guarded by a lock.

    Created once per application lifespan and stored on app.state; `clear()`
    is called on shutdown.

    Args:
        window_seconds: Window length W.
        max_requests: Requests M allowed per key per window.
        sweep_threshold: Table size above which expired records are purged
            before a new key is inserted. 0 disables sweeping.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        max_requests: int = 5,
        sweep_threshold: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self._window = window_seconds
        self._max_requests = max_requests
        self._sweep_threshold = sweep_threshold
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    @property
    def window_seconds(self) -> float:
        return self._window

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def allow(self, key: str | None) -> bool:
        """Count one request for `key` and report whether it is allowed.

        Args:
            key: Client identifier (IP). Empty or None maps to "unknown".

        Returns:
            True if the request fits in the current window, False if denied.
        """
        key = key or UNKNOWN_CLIENT
        with self._lock:
            now = self._clock()
            record = self._records.get(key)

            if record is None:
                if self._sweep_threshold and len(self._records) >= self._sweep_threshold:
                    self._purge_expired_locked(now)
                self._records[key] = RateLimitRecord(count=1, reset_time=now + self._window)
                return True

            if now > record.reset_time:
                record.count = 1
                record.reset_time = now + self._window
                return True

            if record.count < self._max_requests:
                record.count += 1
                return True

            return False

    def get(self, key: str | None) -> RateLimitRecord | None:
        """Return a copy of the record for `key`, or None."""
        key = key or UNKNOWN_CLIENT
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            return RateLimitRecord(count=record.count, reset_time=record.reset_time)

    def purge_expired(self) -> int:
        """Drop every record whose window has closed. Returns the number removed."""
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _purge_expired_locked(self, now: float) -> int:
        expired = [key for key, record in self._records.items() if now > record.reset_time]
        for key in expired:
            del self._records[key]
        if expired:
            logger.debug("rate_limit_swept", removed=len(expired), remaining=len(self._records))
        return len(expired)
