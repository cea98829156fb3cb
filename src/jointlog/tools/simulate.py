#!/usr/bin/env python3
"""
Emit a synthetic joint feed as JSON lines on stdout.

Each period one joint state and one command line are printed. Joints follow
slow sine trajectories and the state lags the command slightly, which gives
the recorder and ``jointlog-plot`` something realistic to chew on.

    jointlog-simulate --rate 200 --duration 10 | jointlog-record --duration 5
"""

from __future__ import annotations

import argparse
import math
import sys
import time
from typing import Iterator, List, Optional, Sequence, TextIO

from ..config.runtime import RecorderConfig
from ..core.models import CommandMode, JointCommand, JointState
from ..sources import codec

BAXTER_JOINTS = ("s0", "s1", "e0", "e1", "w0", "w1", "w2")


def default_joint_names(arm: str) -> List[str]:
    return [f"{arm}_{joint}" for joint in BAXTER_JOINTS]


def joint_targets(t: float, count: int, *, amplitude: float = 0.5, base_hz: float = 0.2) -> List[float]:
    """Commanded angles at time ``t``: one sine per joint, phase-shifted."""
    return [
        amplitude * math.sin(2.0 * math.pi * base_hz * (1.0 + 0.1 * idx) * t + idx * 0.7)
        for idx in range(count)
    ]


def generate_feed(
    names: Sequence[str],
    *,
    rate_hz: float,
    mode: CommandMode,
    count: int,
    start_stamp: float = 0.0,
    lag_s: float = 0.05,
) -> Iterator[tuple[JointState, JointCommand]]:
    """Yield ``count`` (state, command) pairs spaced ``1 / rate_hz`` apart."""
    dt = 1.0 / rate_hz
    n = len(names)
    for k in range(count):
        t = k * dt
        cmd_pos = joint_targets(t, n)
        pos = joint_targets(t - lag_s, n)
        prev = joint_targets(t - lag_s - dt, n)
        vel = [(p - q) / dt for p, q in zip(pos, prev)]
        effort = [0.1 * v for v in vel]
        state = JointState(
            stamp=start_stamp + t,
            name=list(names),
            position=pos,
            velocity=vel,
            effort=effort,
        )
        if mode is CommandMode.POSITION:
            values = cmd_pos
        else:
            values = [(c - p) / lag_s for c, p in zip(cmd_pos, pos)]
        yield state, JointCommand(mode=mode, values=values, names=list(names))


def emit(
    out: TextIO,
    config: RecorderConfig,
    *,
    rate_hz: float,
    duration: Optional[float],
    names: Sequence[str],
    realtime: bool = True,
) -> int:
    state_topic = config.resolved_state_topic()
    command_topic = config.resolved_command_topic()
    count = int(duration * rate_hz) if duration else sys.maxsize
    start_wall = time.time()
    start_mono = time.monotonic()
    written = 0
    for k, (state, command) in enumerate(
        generate_feed(names, rate_hz=rate_hz, mode=config.mode, count=count, start_stamp=start_wall)
    ):
        if realtime:
            delay = start_mono + k / rate_hz - time.monotonic()
            if delay > 0:
                time.sleep(delay)
        out.write(codec.encode_joint_state(state_topic, state) + "\n")
        out.write(codec.encode_command(command_topic, command) + "\n")
        out.flush()
        written += 1
    return written


def main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Print a synthetic JSONL joint feed on stdout.")
    ap.add_argument("--arm", type=str, default="left")
    ap.add_argument("--mode", type=str, choices=["position", "velocity"], default="position")
    ap.add_argument("--rate", type=float, default=100.0, help="Messages per second (default 100)")
    ap.add_argument("--duration", type=float, default=None, help="Seconds to run (default: forever)")
    ap.add_argument("--joints", type=str, default="",
                    help="Comma-separated joint names (default: Baxter arm joints)")
    ap.add_argument("--no-realtime", action="store_true", help="Print as fast as possible")
    args = ap.parse_args(argv)

    if args.rate <= 0:
        ap.error("--rate must be positive")

    config = RecorderConfig(arm_name=args.arm, command_mode=args.mode).sanitized()
    names = [n.strip() for n in args.joints.split(",") if n.strip()] or default_joint_names(args.arm)
    try:
        emit(
            sys.stdout,
            config,
            rate_hz=args.rate,
            duration=args.duration,
            names=names,
            realtime=not args.no_realtime,
        )
    except (KeyboardInterrupt, BrokenPipeError):
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
