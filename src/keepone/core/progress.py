"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/progress.py
Cancellation flag and throttled, monotonic progress reporting shared by all scan stages.
"""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


class CancellationToken:
    """Cooperative cancellation flag for a single scan run."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        # Lets a token stand in wherever a `stopped_flag()` callable is expected
        return self._event.is_set()


class ProgressThrottle:
    """
    Decides when an open-ended loop should emit progress:
    every `interval` seconds or every `every_n` ticks, whichever comes first.
    """

    def __init__(self, interval: float = 0.1, every_n: int = 1000, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self.every_n = every_n
        self._clock = clock
        self._last_time = clock()
        self._ticks = 0

    def tick(self) -> bool:
        self._ticks += 1
        now = self._clock()
        if self._ticks >= self.every_n or now - self._last_time > self.interval:
            self._ticks = 0
            self._last_time = now
            return True
        return False


class ProgressReporter:
    """
    Forwards (fraction, status) pairs to a caller callback.
    Fractions are clamped to [0, 1] and never decrease within one scan.
    Callback failures are logged and swallowed so a broken UI hook cannot abort a scan.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None):
        self._callback = callback
        self._fraction = 0.0
        self._lock = threading.Lock()

    @property
    def fraction(self) -> float:
        return self._fraction

    def report(self, fraction: float, status: str) -> None:
        with self._lock:
            fraction = min(1.0, max(self._fraction, fraction))
            self._fraction = fraction
        if self._callback is None:
            return
        try:
            self._callback(fraction, status)
        except Exception:
            logger.exception("Error in progress callback")

    def report_span(self, start: float, end: float, done: int, total: int, status: str) -> None:
        """Report `done/total` mapped linearly into the [start, end] band of a phase."""
        ratio = done / total if total else 1.0
        self.report(start + (end - start) * ratio, status)
