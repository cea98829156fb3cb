"""Fixed-rate background sampler used to snapshot the joint feed."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

NS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class TickEvent:
    """Timing information handed to the sampler callback."""

    index: int
    current_real: float
    last_real: Optional[float]
    expected_period: float

    @property
    def period(self) -> Optional[float]:
        """Real time elapsed since the previous tick (``None`` on the first)."""
        if self.last_real is None:
            return None
        return self.current_real - self.last_real


def monotonic_targets(period_ns: int, start_ns: int) -> Iterator[int]:
    """Yield target monotonic_ns timestamps for a fixed period.

    Each step adds a fixed period to the *previous target* time, which keeps the
    long-term rate stable and avoids drift from small sleep() errors.
    """
    next_t = start_ns
    while True:
        next_t += period_ns
        yield next_t


class PeriodicSampler:
    """
    Call ``callback(TickEvent)`` every ``period_s`` seconds on a worker thread.

    A tick that starts more than one period late is counted as an overrun and
    the schedule is re-anchored at the current time, so a stall never turns
    into a burst of catch-up ticks.
    """

    def __init__(
        self,
        period_s: float,
        callback: Callable[[TickEvent], None],
        *,
        name: str = "JointlogSampler",
    ) -> None:
        if period_s <= 0:
            raise ValueError(f"period_s must be positive, got {period_s}")
        self.period_s = float(period_s)
        self._period_ns = max(1, int(self.period_s * NS_PER_SECOND))
        self._callback = callback
        self._name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.overruns = 0
        self.ticks = 0

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                raise RuntimeError("sampler already running")
            self._stop_event.clear()
            self.overruns = 0
            self.ticks = 0
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Request the loop to end and wait for it.

        Calling this from inside the callback only sets the stop flag; the
        loop exits after the callback returns.
        """
        self._stop_event.set()
        with self._lock:
            thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout)

    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._stop_event.is_set()

    # ------------------------------------------------------------------ loop
    def _run(self) -> None:
        targets = monotonic_targets(self._period_ns, time.monotonic_ns())
        target_ns = next(targets)
        last_real: Optional[float] = None

        while not self._stop_event.is_set():
            sleep_ns = target_ns - time.monotonic_ns()
            if sleep_ns > 0:
                if self._stop_event.wait(sleep_ns / NS_PER_SECOND):
                    break
            elif -sleep_ns > self._period_ns:
                self.overruns += 1
                if self.overruns % 50 == 1:
                    logger.warning(
                        "Sampler %s behind by %.3f ms (overruns=%d)",
                        self._name,
                        -sleep_ns / 1e6,
                        self.overruns,
                    )
                targets = monotonic_targets(self._period_ns, time.monotonic_ns())

            now = time.monotonic()
            event = TickEvent(
                index=self.ticks,
                current_real=now,
                last_real=last_real,
                expected_period=self.period_s,
            )
            try:
                self._callback(event)
            except Exception:
                logger.exception("Error in sampler callback %s", self._name)
            self.ticks += 1
            last_real = now
            target_ns = next(targets)
