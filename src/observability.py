"""In-process counters and latency windows for aggregations and analysis calls."""

import math
import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Any

import structlog

logger = structlog.get_logger().bind(source="observability")

# Per-name sample cap; the server is long-lived
WINDOW = 500
SLOW_MS = 2000.0


def _percentile(ordered: list[float], pct: float) -> float:
    """Nearest-rank percentile of an ascending list."""
    rank = max(1, math.ceil(pct / 100 * len(ordered)))
    return ordered[rank - 1]


class Metrics:
    """Counters plus a rolling window of durations per timer name.

    Route handlers run on worker threads, so every update takes the lock.
    """

    def __init__(self, window: int = WINDOW, slow_ms: float = SLOW_MS):
        self.window = window
        self.slow_ms = slow_ms
        self._counters: dict[str, int] = {}
        self._timings: dict[str, deque] = {}
        self._calls: dict[str, int] = {}
        self._lock = threading.Lock()

    def counter(self, name: str, value: int = 1):
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + value

    @contextmanager
    def timer(self, name: str):
        """Time the block in milliseconds; slow blocks are logged."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            with self._lock:
                self._timings.setdefault(name, deque(maxlen=self.window)).append(elapsed_ms)
                self._calls[name] = self._calls.get(name, 0) + 1
            if elapsed_ms >= self.slow_ms:
                logger.warning("metrics.slow", name=name, ms=round(elapsed_ms, 1))

    def summary(self) -> dict[str, Any]:
        """Counters and, per timer, lifetime call count plus window stats in ms."""
        with self._lock:
            counters = dict(self._counters)
            samples = {name: sorted(window) for name, window in self._timings.items()}
            calls = dict(self._calls)

        timers = {}
        for name, ordered in samples.items():
            timers[name] = {
                "calls": calls[name],
                "avg_ms": round(sum(ordered) / len(ordered), 2),
                "p50_ms": round(_percentile(ordered, 50), 2),
                "p95_ms": round(_percentile(ordered, 95), 2),
                "max_ms": round(ordered[-1], 2),
            }
        return {"counters": counters, "timers": timers}

    def reset(self):
        with self._lock:
            self._counters.clear()
            self._timings.clear()
            self._calls.clear()


metrics = Metrics()


def log_run_summary(label: str = "run"):
    """Log the current metrics under ``<label>.summary``."""
    logger.info(f"{label}.summary", **metrics.summary())
