"""Client-side sliding-window rate limiter keyed by action name.

This is a soft UX guard that lives for the lifetime of the process. Nothing is
persisted, so a restart starts every key with an empty window.
"""

from __future__ import annotations

import time
from collections.abc import Callable

ANALYSIS_KEY = "resume-analysis"
ROADMAP_KEY = "roadmap-generation"
CHAT_KEY = "interview-chat"


class RateLimitError(RuntimeError):
    """Raised when an action exceeds its request budget for the current window."""

    def __init__(self, key: str, window_seconds: float):
        self.key = key
        self.window_seconds = window_seconds
        super().__init__(
            f"Too many requests for {key!r}. "
            f"Please wait up to {window_seconds:g} seconds and try again."
        )


class RateLimiter:
    """Counts timestamped requests per key within a trailing window."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._timestamps: dict[str, list[float]] = {}

    def _live(self, key: str, window_seconds: float, now: float) -> list[float]:
        return [t for t in self._timestamps.get(key, []) if now - t < window_seconds]

    def is_allowed(self, key: str, max_requests: int, window_seconds: float) -> bool:
        """Record a request for ``key`` and return True, or return False if over budget.

        A rejected call leaves the stored timestamps untouched.
        """
        now = self._clock()
        timestamps = self._live(key, window_seconds, now)
        if len(timestamps) >= max_requests:
            return False
        timestamps.append(now)
        self._timestamps[key] = timestamps
        return True

    def remaining(self, key: str, max_requests: int, window_seconds: float) -> int:
        """How many more requests ``key`` may make right now."""
        live = self._live(key, window_seconds, self._clock())
        return max(0, max_requests - len(live))

    def reset(self, key: str) -> None:
        """Forget every recorded request for ``key``."""
        self._timestamps.pop(key, None)
