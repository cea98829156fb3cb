from __future__ import annotations

from typing import Any, Callable, Optional

from jointlog.core.models import CommandMode, JointCommand, JointState
from jointlog.sources.base import MessageSource


class FakeSource(MessageSource):
    """In-memory source: tests push messages with :meth:`publish`."""

    def __init__(self) -> None:
        super().__init__()
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def close(self) -> None:
        self.closed = True

    def publish(self, topic: str, kind: str, message: Any) -> int:
        return self.dispatch(topic, kind, message)


class ManualClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ManualSampler:
    """Stand-in for PeriodicSampler; the test drives ticks by hand."""

    instances: list["ManualSampler"] = []

    def __init__(self, period_s: float, callback: Callable, *, name: str = "") -> None:
        self.period_s = period_s
        self.callback = callback
        self.name = name
        self.running = False
        self.stop_calls = 0
        ManualSampler.instances.append(self)

    def start(self) -> None:
        self.running = True

    def stop(self, timeout: Optional[float] = None) -> None:
        self.running = False
        self.stop_calls += 1


def make_state(stamp: float, names=("left_s0", "left_s1"), offset: float = 0.0) -> JointState:
    n = len(names)
    return JointState(
        stamp=stamp,
        name=list(names),
        position=[offset + i for i in range(n)],
        velocity=[offset + 10 + i for i in range(n)],
        effort=[offset + 20 + i for i in range(n)],
    )


def make_command(values, names=(), mode: CommandMode = CommandMode.POSITION) -> JointCommand:
    return JointCommand(mode=mode, values=list(values), names=list(names))
