"""Per-user limits on AI endpoints: a burst gap plus a rolling daily quota.

State is in memory and resets on restart.
"""

import threading
import time
from collections import defaultdict, deque

from fastapi import HTTPException

WINDOW_SECONDS = 86400  # 24h
DEFAULT_DAILY_LIMIT = 50
DEFAULT_BURST_INTERVAL = 2.0

_LIMIT_MESSAGE = "AI request limit reached, please try again later"


def _too_many(retry_after: float) -> HTTPException:
    return HTTPException(
        status_code=429,
        detail=_LIMIT_MESSAGE,
        headers={"Retry-After": str(int(retry_after) + 1)},
    )


class SlidingWindowLimiter:
    """Timestamps of accepted calls per user, oldest first."""

    def __init__(self, window: float = WINDOW_SECONDS):
        self.window = window
        self._calls: dict[str, deque] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, user_id: str, daily_limit: int, burst_interval: float) -> int:
        """Record a call, or raise 429. Returns calls left in the window."""
        now = time.time()
        with self._lock:
            calls = self._calls[user_id]
            while calls and calls[0] <= now - self.window:
                calls.popleft()

            if calls and now - calls[-1] < burst_interval:
                raise _too_many(burst_interval - (now - calls[-1]))
            if len(calls) >= daily_limit:
                raise _too_many(calls[0] + self.window - now)

            calls.append(now)
            return daily_limit - len(calls)

    def clear(self):
        with self._lock:
            self._calls.clear()


_limiter = SlidingWindowLimiter()


def check_ai_rate_limit(
    user_id: str,
    daily_limit: int = DEFAULT_DAILY_LIMIT,
    burst_interval: float = DEFAULT_BURST_INTERVAL,
) -> int:
    """Raise 429 if the user exceeds the burst or daily AI limits.

    Returns the number of AI calls the user has left today.
    """
    return _limiter.hit(user_id, daily_limit, burst_interval)


def reset_rate_limits() -> None:
    """Forget all recorded calls. Used in tests."""
    _limiter.clear()
