"""Command-tracking metrics for recorded joints."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike


def _to_1d_array(signal: ArrayLike) -> np.ndarray:
    """Convert input to a 1D float64 numpy array."""
    arr = np.asarray(signal, dtype=float)
    if arr.ndim != 1:
        raise ValueError(f"signal must be 1-D, got shape {arr.shape}")
    return arr


def tracking_error(measured: ArrayLike, commanded: ArrayLike) -> np.ndarray:
    """
    Return ``measured - commanded`` sample by sample.

    Rows where the command was not yet known are NaN in the result.
    """
    m = _to_1d_array(measured)
    c = _to_1d_array(commanded)
    if m.shape != c.shape:
        raise ValueError(f"length mismatch: {m.shape[0]} measured vs {c.shape[0]} commanded")
    return m - c


@dataclass(frozen=True)
class TrackingSummary:
    samples: int
    rms: float
    max_abs: float
    mean: float


def tracking_summary(measured: ArrayLike, commanded: ArrayLike) -> TrackingSummary:
    """
    Summarize the tracking error over rows that have both values.

    Parameters
    ----------
    measured:
        Joint position (or velocity) as recorded from the state feed.
    commanded:
        Matching command column.

    Returns
    -------
    TrackingSummary
        RMS, peak absolute and mean error. All NaN when no row is usable.
    """
    err = tracking_error(measured, commanded)
    valid = err[np.isfinite(err)]
    if valid.size == 0:
        return TrackingSummary(samples=0, rms=float("nan"), max_abs=float("nan"), mean=float("nan"))
    return TrackingSummary(
        samples=int(valid.size),
        rms=float(np.sqrt(np.mean(np.square(valid)))),
        max_abs=float(np.max(np.abs(valid))),
        mean=float(np.mean(valid)),
    )
