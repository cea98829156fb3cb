"""Utilities for loading recorded joint CSV files."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np

from .csv_writer import TIMESTAMP_COLUMN

FIELD_SUFFIXES = ("_pos", "_vel", "_eff", "_pos_cmd", "_vel_cmd")


def load_recording(path: Path) -> Tuple[np.ndarray, List[str]]:
    """Load a recording with a header row into a structured NumPy array."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        header_line = fh.readline().strip()
    if not header_line:
        raise ValueError(f"File {path} is empty")
    names = [name.strip() for name in header_line.split(",")]

    # genfromtxt's names=True mangles some characters, so pass names explicitly.
    data = np.genfromtxt(
        path,
        delimiter=",",
        skip_header=1,
        names=names,
        dtype=float,
        deletechars="",
        autostrip=True,
    )
    if data.size == 0:
        raise ValueError(f"File {path} contains no data rows")
    # A single row comes back as a 0-d array.
    if data.ndim == 0:
        data = data.reshape(1)
    return data, names


def _split_column(column: str) -> Tuple[str, str] | None:
    # Longest suffix first so "_pos_cmd" is not read as "_cmd" of "x_pos".
    for suffix in sorted(FIELD_SUFFIXES, key=len, reverse=True):
        if column.endswith(suffix) and len(column) > len(suffix):
            return column[: -len(suffix)], suffix[1:]
    return None


def joint_names(columns: Sequence[str]) -> List[str]:
    """Return joints present in ``columns`` in recording order."""
    names: List[str] = []
    for column in columns:
        if column == TIMESTAMP_COLUMN:
            continue
        split = _split_column(column)
        if split is None:
            continue
        joint = split[0]
        if joint not in names:
            names.append(joint)
    return names


def joint_series(data: np.ndarray, joint: str, field: str) -> np.ndarray:
    """
    Return one column (``pos``, ``vel``, ``eff``, ``pos_cmd`` or ``vel_cmd``).

    ``field="cmd"`` picks whichever command column the recording has.
    """
    available = data.dtype.names or ()
    if field == "cmd":
        for candidate in ("pos_cmd", "vel_cmd"):
            column = f"{joint}_{candidate}"
            if column in available:
                return np.asarray(data[column], dtype=float)
        raise KeyError(f"No command column for joint {joint!r}")
    column = f"{joint}_{field}"
    if column not in available:
        raise KeyError(f"Column {column!r} not in recording")
    return np.asarray(data[column], dtype=float)


def time_axis(data: np.ndarray) -> np.ndarray:
    return np.asarray(data[TIMESTAMP_COLUMN], dtype=float)
