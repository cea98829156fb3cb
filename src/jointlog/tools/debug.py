"""Minimal helpers for opt-in debug/instrumentation hooks."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator

DEBUG_JOINTLOG = os.getenv("JOINTLOG_DEBUG", "").lower() in {"1", "true", "yes", "on"}

logger = logging.getLogger(__name__)


def debug_enabled() -> bool:
    """Return True when lightweight instrumentation should run."""
    return DEBUG_JOINTLOG


@contextmanager
def time_block(label: str, *, log: logging.Logger | None = None) -> Iterator[None]:
    """
    Context manager that logs elapsed time when debugging is enabled.

    The overhead is essentially a couple of perf_counter() calls when disabled.
    """
    if not DEBUG_JOINTLOG:
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        (log or logger).debug("%s took %.3f ms", label, elapsed_ms)


def configure_logging(verbose: int = 0) -> None:
    """Root logging setup shared by the command-line tools (logs go to stderr)."""
    level = logging.DEBUG if verbose or DEBUG_JOINTLOG else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
