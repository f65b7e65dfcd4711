"""Sliding-window rate limiting for the reputation API."""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable


@dataclass
class RateLimiter:
    """
    Sliding-window rate limiter for API calls.

    Allows at most `max_requests` within any trailing `window_seconds`.
    Timestamps are pruned lazily on access; there is no background timer.
    Admission is synchronous and never waits.
    """

    max_requests: int = 4
    window_seconds: float = 60.0
    clock: Callable[[], float] = time.monotonic
    _requests: deque = field(default_factory=deque, init=False, repr=False)

    def _prune(self) -> None:
        """Drop timestamps that have left the window."""
        now = self.clock()
        while self._requests and now - self._requests[0] >= self.window_seconds:
            self._requests.popleft()

    def can_make_request(self) -> bool:
        """Check if a request can proceed immediately."""
        self._prune()
        return len(self._requests) < self.max_requests

    def record_request(self) -> None:
        """Record a request made now."""
        self._requests.append(self.clock())

    def try_acquire(self) -> bool:
        """Check and record in one step. Returns False when at capacity."""
        if not self.can_make_request():
            return False
        self.record_request()
        return True

    def wait_time(self) -> float:
        """Seconds until the oldest request exits the window (0 if empty)."""
        self._prune()
        if not self._requests:
            return 0.0
        oldest = self._requests[0]
        return max(self.window_seconds - (self.clock() - oldest), 0.0)

    @property
    def in_window(self) -> int:
        """Number of requests currently counted against the limit."""
        self._prune()
        return len(self._requests)

    def reset(self) -> None:
        """Reset the rate limiter to full capacity."""
        self._requests.clear()
