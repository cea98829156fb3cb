#!/usr/bin/env python3
"""
Record a robot arm's joint states and commands to CSV.

The recorder waits for the first joint state, then samples the latest state
and command at a fixed rate until one of these happens:

  * ``--duration`` seconds have passed,
  * Ctrl-C / SIGTERM,
  * the state feed goes stale (the recording is cut short but still written).

Examples
--------
# Pipe a simulated feed in and record 5 seconds at the default 100 Hz
jointlog-simulate --rate 200 | jointlog-record --source stdin --duration 5

# Velocity commands from the right arm, streamed over SSH from the robot PC
jointlog-record --source ssh --host robot.local --user ruser \\
    --bridge-cmd "jointlog-bridge" --arm right --mode velocity

# Directly from ROS 2 (requires a sourced ROS 2 environment)
jointlog-record --source ros2 --session-name wave_test
"""

from __future__ import annotations

import argparse
import logging
import signal
import threading
import time
from pathlib import Path
from typing import Optional, Sequence

from ..config.app_config import AppPaths
from ..config.runtime import RecorderConfig, load_config
from ..core.recorder import JointRecorder
from ..dataio.file_paths import recording_file_paths
from ..dataio.meta import write_meta
from ..remote.bridge import DEFAULT_BRIDGE_COMMAND, RemoteBridgeSource
from ..remote.ssh_client import Host
from ..sources.base import MessageSource
from ..sources.line_stream import file_source, stdin_source
from .debug import configure_logging

logger = logging.getLogger(__name__)

SOURCES = ("stdin", "file", "ssh", "ros2")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Sample joint states and commands at a fixed rate and write them to CSV.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("--config", type=str, default=None,
                    help="YAML config file (default: recorder.yaml shipped with the package)")
    ap.add_argument("--arm", type=str, default=None, help="Arm name used in topic names (default: left)")
    ap.add_argument("--mode", type=str, choices=["position", "velocity"], default=None,
                    help="Which command stream to record next to the state")
    ap.add_argument("--rate", type=float, default=None, help="Sampling rate in Hz")
    ap.add_argument("--expire", type=float, default=None,
                    help="Seconds without a state message before the recording is aborted")
    ap.add_argument("--timeout", type=float, default=None,
                    help="Give up if no state message arrives within this many seconds")
    ap.add_argument("--duration", type=float, default=None, help="Stop after this many seconds")
    ap.add_argument("--out", type=str, default=None,
                    help="Output .csv file, or a directory for a timestamped file")
    ap.add_argument("--session-name", type=str, default="", help="Label used in the output file name")

    src = ap.add_argument_group("feed")
    src.add_argument("--source", type=str, choices=SOURCES, default="stdin")
    src.add_argument("--file", type=str, default=None, help="JSONL capture for --source file")
    src.add_argument("--host", type=str, default=None, help="Robot host for --source ssh")
    src.add_argument("--user", type=str, default=None)
    src.add_argument("--port", type=int, default=22)
    src.add_argument("--password", type=str, default=None)
    src.add_argument("--key-file", type=str, default=None)
    src.add_argument("--bridge-cmd", type=str, default=DEFAULT_BRIDGE_COMMAND,
                     help="Command run on the robot host that prints the JSONL feed")
    src.add_argument("--node-name", type=str, default="jointlog_recorder", help="ROS 2 node name")

    ap.add_argument("-v", "--verbose", action="count", default=0)
    return ap


def build_source(args: argparse.Namespace) -> MessageSource:
    if args.source == "stdin":
        return stdin_source()
    if args.source == "file":
        if not args.file:
            raise ValueError("--source file requires --file")
        return file_source(args.file)
    if args.source == "ssh":
        if not args.host or not args.user:
            raise ValueError("--source ssh requires --host and --user")
        host = Host(
            name=args.host,
            host=args.host,
            user=args.user,
            password=args.password,
            port=args.port,
            key_filename=args.key_file,
        )
        return RemoteBridgeSource(host, args.bridge_cmd)
    if args.source == "ros2":
        from ..sources.ros2 import Ros2Source

        return Ros2Source(args.node_name)
    raise ValueError(f"Unknown source {args.source!r}")


def resolve_config(args: argparse.Namespace) -> RecorderConfig:
    cfg_path = args.config or AppPaths().default_config_file
    cfg = load_config(cfg_path)
    return cfg.with_overrides(
        arm_name=args.arm,
        command_mode=args.mode,
        record_rate_hz=args.rate,
        state_expired_timeout_s=args.expire,
    )


def resolve_output(args: argparse.Namespace, cfg: RecorderConfig) -> Path:
    if args.out and args.out.lower().endswith(".csv"):
        return Path(args.out).expanduser()
    base = Path(args.out).expanduser() if args.out else None
    return recording_file_paths(args.session_name or None, cfg.arm_name, base=base).data_path


def run_recording(
    recorder: JointRecorder,
    output: Path,
    *,
    stop_event: threading.Event,
    timeout: Optional[float] = None,
    duration: Optional[float] = None,
) -> bool:
    """Wait for the feed, record until stopped, and write the file."""
    if not recorder.wait_for_first_state(timeout=timeout, stop_event=stop_event):
        return False

    recorder.start_recording(output)
    deadline = None if duration is None or duration <= 0 else time.monotonic() + duration
    while not stop_event.is_set():
        if recorder.wait_until_stopped(0.1):
            break
        if deadline is not None and time.monotonic() >= deadline:
            break
    return recorder.stop_recording()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        cfg = resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        source = build_source(args)
    except ValueError as exc:
        parser.error(str(exc))
    except OSError as exc:
        logger.error("Cannot open %s feed: %s", args.source, exc)
        return 1

    output = resolve_output(args, cfg)
    recorder = JointRecorder(source, cfg)

    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        stop_event.set()

    previous = {
        sig: signal.signal(sig, _handle_signal) for sig in (signal.SIGINT, signal.SIGTERM)
    }

    try:
        try:
            source.start()
        except Exception as exc:
            # SSH, ROS 2 and file errors all surface here
            logger.error("Cannot start %s feed: %s", args.source, exc)
            return 1
        written = run_recording(
            recorder,
            output,
            stop_event=stop_event,
            timeout=args.timeout,
            duration=args.duration,
        )
    finally:
        source.close()
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    if written:
        meta_path = write_meta(output, recorder.recording_info())
        logger.debug("Metadata written to %s", meta_path)

    info = recorder.recording_info()
    print("\n=== Recording summary ===")
    print(f"Arm: {info.arm_name} ({info.command_mode.value} commands)")
    print(f"Rate: {info.record_rate_hz:g} Hz")
    print(f"Samples: {info.sample_count}")
    if info.aborted:
        print("Aborted early: state feed went stale")
    print("Output:", output if written else "(nothing written)")
    return 0 if written else 1


if __name__ == "__main__":
    raise SystemExit(main())
