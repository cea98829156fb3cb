"""CSV writing helpers for recorded joint data."""

from __future__ import annotations

import csv
import logging
import math
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.models import CommandMode, JointCommand, JointState

logger = logging.getLogger(__name__)

Sample = Tuple[JointState, Optional[JointCommand]]

TIMESTAMP_COLUMN = "timestamp"


def write_rows(path: Path, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """
    Write a header row and all data rows to a CSV file.

    Directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(headers)
        writer.writerows(rows)


def build_header(first_state: JointState, mode: CommandMode) -> List[str]:
    """Column names: the timestamp, then pos/vel/eff/command per joint."""
    mode = CommandMode.parse(mode)
    header = [TIMESTAMP_COLUMN]
    for joint in first_state.name:
        header.extend(
            [
                f"{joint}_pos",
                f"{joint}_vel",
                f"{joint}_eff",
                f"{joint}{mode.column_suffix}",
            ]
        )
    return header


def build_rows(samples: Sequence[Sample], mode: CommandMode) -> Iterator[List[float]]:
    """
    Yield one row per sample.

    The joint set and order come from the first state; timestamps are
    relative to the first state's stamp.
    """
    if not samples:
        return
    mode = CommandMode.parse(mode)
    first_state = samples[0][0]
    joints = list(first_state.name)
    start_time = first_state.stamp

    for state, command in samples:
        row: List[float] = [state.stamp - start_time]
        for idx, joint in enumerate(joints):
            row.extend(state.values_for(joint))
            if command is None or command.mode is not mode:
                row.append(math.nan)
            else:
                row.append(command.value_for(joint, idx))
        yield row


def write_recording(path: Path, samples: Sequence[Sample], mode: CommandMode) -> bool:
    """
    Write collected samples to ``path``.

    Returns ``False`` (and writes nothing) when no joint states were collected.
    """
    if not samples:
        logger.error("No joint states populated, nothing written to %s", path)
        return False

    header = build_header(samples[0][0], mode)
    write_rows(Path(path), header, build_rows(samples, mode))
    logger.info("Wrote to file %s (%d samples)", path, len(samples))
    return True
