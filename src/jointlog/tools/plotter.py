#!/usr/bin/env python3
"""
Plot a joint recording: measured vs commanded value for every joint.

Position recordings compare ``<joint>_pos`` with ``<joint>_pos_cmd``; velocity
recordings compare ``<joint>_vel`` with ``<joint>_vel_cmd``. If no ``--file``
is given, the newest ``*.csv`` under the recordings directory is used.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from ..analysis.tracking import tracking_summary
from ..config.app_config import AppPaths
from ..dataio.log_loader import joint_names, joint_series, load_recording, time_axis
from ..dataio.meta import read_meta


def find_latest_recording(search_roots: Sequence[Path]) -> Optional[Path]:
    candidates: list[Path] = []
    for root in search_roots:
        if root.exists():
            candidates.extend(root.glob("*.csv"))
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


def _measured_field(columns: Sequence[str]) -> str:
    return "vel" if any(c.endswith("_vel_cmd") for c in columns) else "pos"


def build_figure(path: Path, joints: Sequence[str] | None = None):
    """Return ``(fig, axes)`` with one subplot per joint."""
    data, columns = load_recording(path)
    names = list(joints) if joints else joint_names(columns)
    if not names:
        raise ValueError(f"No joint columns found in {path}")

    field = _measured_field(columns)
    t = time_axis(data)
    fig, axes = plt.subplots(len(names), 1, sharex=True, figsize=(9, 2.0 * len(names)))
    axes = np.atleast_1d(axes)

    for ax, joint in zip(axes, names):
        measured = joint_series(data, joint, field)
        commanded = joint_series(data, joint, "cmd")
        ax.plot(t, measured, label=f"{joint}_{field}")
        ax.plot(t, commanded, "--", label="command")
        summary = tracking_summary(measured, commanded)
        ax.set_title(f"{joint}  rms err {summary.rms:.4g}", fontsize="small")
        ax.legend(loc="upper right", fontsize="x-small")

    unit = "rad/s" if field == "vel" else "rad"
    axes[len(axes) // 2].set_ylabel(f"{field} [{unit}]")
    axes[-1].set_xlabel("Time [s since start]")

    meta = read_meta(path)
    title = path.name
    if meta is not None:
        title = f"{meta.arm_name} arm @ {meta.record_rate_hz:g} Hz - {path.name}"
        if meta.aborted:
            title += " (aborted)"
    fig.suptitle(title)
    fig.tight_layout()
    return fig, axes


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Plot measured vs commanded joints from a recording.")
    parser.add_argument("-f", "--file", type=str, help="Recording (.csv); default: newest recording")
    parser.add_argument("-j", "--joints", type=str, default="", help="Comma-separated subset of joints")
    parser.add_argument("-o", "--output", type=str, default=None,
                        help="Save the figure to this path instead of opening a window")
    args = parser.parse_args(argv)

    if args.file:
        csv_path = Path(args.file).expanduser().resolve()
        if not csv_path.exists():
            parser.error(f"Recording not found: {csv_path}")
    else:
        csv_path = find_latest_recording([AppPaths().recordings])
        if csv_path is None:
            parser.error("No recordings found; specify one with --file.")
        print(f"[INFO] Using latest recording: {csv_path}")

    joints = [j.strip() for j in args.joints.split(",") if j.strip()] or None
    if joints:
        _, columns = load_recording(csv_path)
        unknown = [j for j in joints if j not in joint_names(columns)]
        if unknown:
            parser.error(f"Joint(s) not in {csv_path.name}: {', '.join(unknown)}")
    fig, _axes = build_figure(csv_path, joints)
    if args.output:
        fig.savefig(args.output)
        return 0
    try:
        plt.show()
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
