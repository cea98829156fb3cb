from __future__ import annotations

import math
from collections import deque
from typing import Deque, Iterable


class RateEstimator:
    """
    Sliding-window estimate of how often the sampler actually ticks.

    Notes
    -----
    - Tick times are monotonic seconds.
    - ``estimated_hz`` is ``(n - 1) / span`` over the window and falls back to
      ``default_hz`` until two distinct tick times are known.
    - ``jitter_s`` is the standard deviation of the tick intervals, which is
      what the recorder reports next to the rate.
    """

    def __init__(self, window_size: int = 100, default_hz: float = 0.0) -> None:
        if window_size <= 1:
            raise ValueError("window_size must be > 1")
        self._ticks: Deque[float] = deque(maxlen=window_size)
        self.default_hz = float(default_hz)

    def add_sample_time(self, t: float) -> None:
        self._ticks.append(float(t))

    def feed_times(self, times: Iterable[float]) -> None:
        for t in times:
            self.add_sample_time(t)

    def _intervals(self) -> list[float]:
        ticks = list(self._ticks)
        return [b - a for a, b in zip(ticks, ticks[1:])]

    @property
    def buffer_span_s(self) -> float:
        if len(self._ticks) < 2:
            return 0.0
        return self._ticks[-1] - self._ticks[0]

    @property
    def estimated_hz(self) -> float:
        span = self.buffer_span_s
        if span <= 0:
            return self.default_hz
        return (len(self._ticks) - 1) / span

    @property
    def jitter_s(self) -> float:
        """Standard deviation of tick intervals in the window (0 if unknown)."""
        intervals = self._intervals()
        if len(intervals) < 2:
            return 0.0
        mean = sum(intervals) / len(intervals)
        return math.sqrt(sum((dt - mean) ** 2 for dt in intervals) / len(intervals))

    def reset(self) -> None:
        self._ticks.clear()
