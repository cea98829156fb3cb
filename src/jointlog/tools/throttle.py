"""Time-based throttling for periodic log messages."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional


class LogThrottle:
    """
    Let a message through at most once every ``period_s`` seconds.

    A period of zero disables throttling.
    """

    def __init__(self, period_s: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.period_s = max(0.0, float(period_s))
        self._clock = clock
        self._last: Optional[float] = None
        self._lock = threading.Lock()
        self.suppressed = 0

    def ready(self) -> bool:
        now = self._clock()
        with self._lock:
            if self._last is None or now - self._last >= self.period_s:
                self._last = now
                return True
            self.suppressed += 1
            return False

    def log(self, log: logging.Logger, level: int, msg: str, *args: Any) -> bool:
        """Emit ``msg`` on ``log`` if the throttle allows it; return whether it did."""
        if not self.ready():
            return False
        log.log(level, msg, *args)
        return True

    def reset(self) -> None:
        with self._lock:
            self._last = None
            self.suppressed = 0
