from __future__ import annotations

import threading
import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class LatestMessage(Generic[T]):
    """Holder for the newest message on a topic plus its local receive time.

    Subscription callbacks run on the ingest thread and overwrite the held
    message; the sampler thread reads it. The lock keeps the message and its
    receive time consistent with each other.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._message: Optional[T] = None
        self._received_at: Optional[float] = None
        self._count = 0

    def update(self, message: T) -> None:
        """Replace the held message and stamp the receive time."""
        now = self._clock()
        with self._lock:
            self._message = message
            self._received_at = now
            self._count += 1

    def get(self) -> Optional[T]:
        with self._lock:
            return self._message

    def snapshot(self) -> tuple[Optional[T], Optional[float]]:
        """Return ``(message, received_at)`` read under one lock."""
        with self._lock:
            return self._message, self._received_at

    def has_message(self) -> bool:
        with self._lock:
            return self._message is not None

    @property
    def received_at(self) -> Optional[float]:
        with self._lock:
            return self._received_at

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def age(self, now: Optional[float] = None) -> Optional[float]:
        """Seconds since the last update, or ``None`` if nothing arrived yet."""
        with self._lock:
            received = self._received_at
        if received is None:
            return None
        current = self._clock() if now is None else now
        return current - received

    def clear(self) -> None:
        with self._lock:
            self._message = None
            self._received_at = None
            self._count = 0
